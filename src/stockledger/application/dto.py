"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from stockledger.domain.model.order import Order
from stockledger.domain.model.stock_movement import StockMovement
from stockledger.domain.model.variant import ProductVariant


@dataclass(frozen=True)
class VariantDTO:
    id: str
    name: str
    stock_on_hand: int
    track_inventory: bool

    @staticmethod
    def from_domain(variant: ProductVariant) -> VariantDTO:
        return VariantDTO(
            id=variant.id,
            name=variant.name,
            stock_on_hand=variant.stock_on_hand,
            track_inventory=variant.track_inventory,
        )


@dataclass(frozen=True)
class StockMovementDTO:
    id: int
    variant_id: str
    type: str
    quantity: int
    order_line_id: str | None
    created_at: str

    @staticmethod
    def from_domain(movement: StockMovement) -> StockMovementDTO:
        return StockMovementDTO(
            id=movement.id,
            variant_id=movement.variant_id,
            type=movement.type.value,
            quantity=movement.quantity,
            order_line_id=movement.order_line_id,
            created_at=movement.created_at.strftime("%Y-%m-%d %H:%M:%S UTC"),
        )


@dataclass(frozen=True)
class StockMovementPageDTO:
    """Output: one page of a variant's stock history."""

    items: list[StockMovementDTO]
    total_items: int


@dataclass(frozen=True)
class StockUpdateRequest:
    """Input: requested stock on hand and/or tracking flag for one variant."""

    variant_id: str
    stock_on_hand: int | None = None
    track_inventory: bool | None = None


@dataclass(frozen=True)
class StockUpdateResult:
    """Output: the outcome of updating one variant.

    ``movement`` is None when nothing changed in the ledger, either
    because the request was a no-op or because it failed (see ``error``).
    """

    variant_id: str
    variant: VariantDTO | None = None
    movement: StockMovementDTO | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class LineStockOutcome(Enum):
    RECORDED = "RECORDED"
    ALREADY_RECORDED = "ALREADY_RECORDED"
    SKIPPED_UNTRACKED = "SKIPPED_UNTRACKED"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    MISSING_VARIANT = "MISSING_VARIANT"
    NOTHING_TO_RESTORE = "NOTHING_TO_RESTORE"
    SKIPPED_CANCELLED = "SKIPPED_CANCELLED"


FAILED_OUTCOMES = frozenset(
    {LineStockOutcome.INSUFFICIENT_STOCK, LineStockOutcome.MISSING_VARIANT}
)


@dataclass(frozen=True)
class LineStockResult:
    """Output: what the stock hook did for a single order line."""

    line_id: str
    variant_id: str
    outcome: LineStockOutcome
    movement_id: int | None = None
    message: str | None = None

    @property
    def failed(self) -> bool:
        return self.outcome in FAILED_OUTCOMES


@dataclass(frozen=True)
class OrderLineDTO:
    id: str
    variant_id: str
    quantity: int
    stock_reconciled: bool


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    state: str
    lines: list[OrderLineDTO]
    history: list[str]
    stock_reconciled: bool
    created_at: str

    @staticmethod
    def from_domain(order: Order) -> OrderDTO:
        return OrderDTO(
            id=order.id,  # type: ignore[arg-type]
            state=order.state.value,
            lines=[
                OrderLineDTO(
                    id=line.id,
                    variant_id=line.variant_id,
                    quantity=line.quantity.value,
                    stock_reconciled=line.stock_reconciled,
                )
                for line in order.lines
            ],
            history=[
                f"{t.from_state.value} -> {t.to_state.value}" for t in order.history
            ],
            stock_reconciled=order.is_stock_reconciled,
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        )


@dataclass(frozen=True)
class StockDiscrepancyDTO:
    """Output: a variant whose cached stock disagrees with its history."""

    variant_id: str
    cached: int
    from_history: int
