"""Order aggregate and its lifecycle.

The Order owns its lines and its transition history.  State changes go
through ``transition_to()`` which enforces the transition table and
returns an immutable ``OrderTransition`` record describing the edge.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import Quantity


class OrderState(Enum):
    ADDING_ITEMS = "AddingItems"
    ARRANGING_PAYMENT = "ArrangingPayment"
    PAYMENT_SETTLED = "PaymentSettled"
    PAYMENT_DECLINED = "PaymentDeclined"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


TRANSITIONS: dict[OrderState, frozenset[OrderState]] = {
    OrderState.ADDING_ITEMS: frozenset(
        {OrderState.ARRANGING_PAYMENT, OrderState.CANCELLED}
    ),
    OrderState.ARRANGING_PAYMENT: frozenset(
        {
            OrderState.PAYMENT_SETTLED,
            OrderState.PAYMENT_DECLINED,
            OrderState.ADDING_ITEMS,
            OrderState.CANCELLED,
        }
    ),
    OrderState.PAYMENT_DECLINED: frozenset(
        {OrderState.ARRANGING_PAYMENT, OrderState.CANCELLED}
    ),
    # Settlement is a one-way gate: no path leads back to AddingItems.
    OrderState.PAYMENT_SETTLED: frozenset(
        {OrderState.COMPLETED, OrderState.CANCELLED}
    ),
    OrderState.COMPLETED: frozenset(),
    OrderState.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class OrderTransition:
    """An immutable record of one edge taken by an order."""

    order_id: int
    sequence: int
    from_state: OrderState
    to_state: OrderState
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_settlement(self) -> bool:
        return (
            self.to_state is OrderState.PAYMENT_SETTLED
            and self.from_state is not OrderState.PAYMENT_SETTLED
        )

    @property
    def is_settled_cancellation(self) -> bool:
        return (
            self.from_state is OrderState.PAYMENT_SETTLED
            and self.to_state is OrderState.CANCELLED
        )


@dataclass
class OrderLine:
    """A variant and quantity on an order.

    ``stock_reconciled`` flips to true once the settlement hook has dealt
    with the line (sale recorded, or skipped because the variant does not
    track inventory).
    """

    id: str
    variant_id: str
    quantity: Quantity
    stock_reconciled: bool = False


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use ``Order.create()`` for new orders.  The ``__init__`` is kept
    simple so the repository can reconstitute persisted orders.
    """

    id: int | None
    lines: list[OrderLine] = field(default_factory=list)
    state: OrderState = OrderState.ADDING_ITEMS
    history: list[OrderTransition] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create() -> Order:
        return Order(id=None)

    # --- Line management ------------------------------------------------------

    def add_item(self, variant_id: str, quantity: Quantity) -> OrderLine:
        """Add *quantity* of a variant, merging with an existing line."""
        if self.state is not OrderState.ADDING_ITEMS:
            raise ValidationError(
                f"Cannot add items to order in {self.state.value} state"
            )
        for line in self.lines:
            if line.variant_id == variant_id:
                line.quantity = line.quantity + quantity
                return line
        line = OrderLine(id=uuid.uuid4().hex, variant_id=variant_id, quantity=quantity)
        self.lines.append(line)
        return line

    def find_line(self, line_id: str) -> OrderLine:
        for line in self.lines:
            if line.id == line_id:
                return line
        raise ValidationError(f"Order line '{line_id}' not found in order #{self.id}")

    # --- State transitions ----------------------------------------------------

    def can_transition_to(self, to_state: OrderState) -> bool:
        return to_state in TRANSITIONS[self.state]

    def transition_to(self, to_state: OrderState) -> OrderTransition:
        """Move the order along one edge of the transition table."""
        if self.id is None:
            raise ValidationError("Order must be saved before it can change state")
        if not self.can_transition_to(to_state):
            raise ValidationError(
                f"Cannot transition order #{self.id} from "
                f"{self.state.value} to {to_state.value}"
            )
        if to_state is OrderState.ARRANGING_PAYMENT and not self.lines:
            raise ValidationError("Cannot arrange payment for an order with no lines")

        transition = OrderTransition(
            order_id=self.id,
            sequence=len(self.history) + 1,
            from_state=self.state,
            to_state=to_state,
        )
        self.state = to_state
        self.history.append(transition)
        return transition

    # --- Computed properties --------------------------------------------------

    @property
    def settlement(self) -> OrderTransition | None:
        """The edge that settled payment, if the order ever crossed it."""
        for transition in self.history:
            if transition.is_settlement:
                return transition
        return None

    @property
    def is_stock_reconciled(self) -> bool:
        return all(line.stock_reconciled for line in self.lines)
