"""Application service: Return Order Lines use case.

Puts returned units back into stock with RETURN movements.  Only lines
that were actually deducted at settlement can be returned, and never
more than was sold.  Every requested line is validated before any
movement is written.
"""

from __future__ import annotations

from stockledger.application.dto import StockMovementDTO
from stockledger.domain.exceptions import EntityNotFoundError, ValidationError
from stockledger.domain.model.order import OrderLine, OrderState
from stockledger.domain.model.stock_movement import StockMovementType
from stockledger.domain.model.value_objects import Quantity
from stockledger.domain.repository.order_repository import OrderRepository
from stockledger.domain.service.stock_ledger import StockLedger

RETURNABLE_STATES = (OrderState.PAYMENT_SETTLED, OrderState.COMPLETED)


class ReturnOrderLinesHandler:

    def __init__(self, order_repo: OrderRepository, ledger: StockLedger) -> None:
        self._order_repo = order_repo
        self._ledger = ledger

    def handle(self, order_id: int, quantities: dict[str, int]) -> list[StockMovementDTO]:
        """Record returns for ``{line_id: quantity}``."""
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        if order.state not in RETURNABLE_STATES:
            raise ValidationError(
                f"Cannot return items of order in {order.state.value} state"
            )
        if not quantities:
            raise ValidationError("Must specify at least one line to return")

        requested: list[tuple[OrderLine, Quantity]] = [
            (order.find_line(line_id), Quantity(qty)) for line_id, qty in quantities.items()
        ]
        for line, qty in requested:
            self._check_returnable(line, qty)

        movements = []
        for line, qty in requested:
            with self._ledger.locked(line.variant_id):
                # Re-check under the lock in case another return landed meanwhile.
                self._check_returnable(line, qty)
                movements.append(
                    self._ledger.append(
                        line.variant_id,
                        StockMovementType.RETURN,
                        qty.value,
                        order_line_id=line.id,
                    )
                )
        return [StockMovementDTO.from_domain(m) for m in movements]

    def _check_returnable(self, line: OrderLine, qty: Quantity) -> None:
        movements = self._ledger.list_for_order_line(line.id)
        sold = -sum(m.quantity for m in movements if m.type is StockMovementType.SALE)
        if sold == 0:
            raise ValidationError(
                f"Order line '{line.id}' has no recorded sale to return"
            )
        returned = sum(m.quantity for m in movements if m.type is StockMovementType.RETURN)
        if returned + qty.value > sold:
            raise ValidationError(
                f"Cannot return {qty.value} of order line '{line.id}' "
                f"(sold {sold}, already returned {returned})"
            )
