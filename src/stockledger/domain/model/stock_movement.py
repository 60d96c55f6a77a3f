"""StockMovement: an immutable, signed change to a variant's stock.

Movements are the audit trail of the ledger. They are never updated or
deleted; a mistake is corrected by appending a compensating movement.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Generic, TypeVar

from stockledger.domain.exceptions import ValidationError

T = TypeVar("T")


class StockMovementType(Enum):
    ADJUSTMENT = "ADJUSTMENT"
    SALE = "SALE"
    CANCELLATION = "CANCELLATION"
    RETURN = "RETURN"


# Order-driven movement types must reference the order line that caused them.
ORDER_LINE_TYPES = frozenset(
    {StockMovementType.SALE, StockMovementType.CANCELLATION, StockMovementType.RETURN}
)


@dataclass(frozen=True)
class StockMovement:
    """A single recorded stock change.

    Use ``StockMovement.record()`` for new movements; it enforces the
    shape rules for each movement type.  The plain constructor is kept
    for repositories reconstituting persisted rows.
    """

    id: int
    variant_id: str
    type: StockMovementType
    quantity: int
    order_line_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def record(
        movement_id: int,
        variant_id: str,
        movement_type: StockMovementType,
        quantity: int,
        order_line_id: str | None = None,
    ) -> StockMovement:
        StockMovement.check_shape(movement_type, quantity, order_line_id)
        return StockMovement(
            id=movement_id,
            variant_id=variant_id,
            type=movement_type,
            quantity=quantity,
            order_line_id=order_line_id,
        )

    @staticmethod
    def check_shape(
        movement_type: StockMovementType,
        quantity: int,
        order_line_id: str | None,
    ) -> None:
        """Raise ValidationError unless the movement is well formed for its type."""
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError(
                f"Stock movement quantity must be an integer, got {type(quantity).__name__}"
            )
        if quantity == 0:
            raise ValidationError("Stock movement quantity cannot be zero")

        if movement_type in ORDER_LINE_TYPES and order_line_id is None:
            raise ValidationError(
                f"{movement_type.value} movements must reference an order line"
            )
        if movement_type is StockMovementType.ADJUSTMENT and order_line_id is not None:
            raise ValidationError("ADJUSTMENT movements cannot reference an order line")

        if movement_type is StockMovementType.SALE and quantity > 0:
            raise ValidationError("SALE movements must decrease stock")
        if movement_type in (StockMovementType.CANCELLATION, StockMovementType.RETURN) and quantity < 0:
            raise ValidationError(f"{movement_type.value} movements must increase stock")


@dataclass(frozen=True)
class PaginatedList(Generic[T]):
    """One page of an offset-paginated listing."""

    items: list[T]
    total_items: int
