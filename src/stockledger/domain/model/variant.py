"""ProductVariant aggregate: the sellable unit whose stock is tracked.

Variants are owned by the catalog. The stock ledger only ever writes the
cached ``stock_on_hand`` field, and only through ``apply_movement``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ProductVariant:
    """A purchasable unit of a product.

    Invariants:
    - ``stock_on_hand`` equals the sum of every stock movement recorded
      for this variant
    - when ``track_inventory`` is true, ``stock_on_hand`` is never negative
    """

    id: str
    name: str
    stock_on_hand: int = 0
    track_inventory: bool = True

    def would_go_negative(self, delta: int) -> bool:
        """True if applying *delta* breaks the non-negative invariant."""
        return self.track_inventory and self.stock_on_hand + delta < 0

    def apply_movement(self, quantity: int) -> None:
        """Fold a recorded movement into the cached on-hand value."""
        self.stock_on_hand += quantity

    def set_track_inventory(self, track: bool) -> None:
        # Flag changes never create movements.
        self.track_inventory = track
