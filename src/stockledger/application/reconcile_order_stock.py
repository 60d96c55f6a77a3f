"""Application service: Reconcile Order Stock use case.

Re-runs the stock hook for an order that has already crossed the
settlement edge.  Used to recover when the process stopped between
committing the transition and finishing the per-line deductions, or to
retry lines that failed for lack of stock once stock has been corrected.
"""

from __future__ import annotations

from stockledger.application.dto import LineStockResult
from stockledger.application.order_stock_hook import OrderStockHook
from stockledger.domain.exceptions import EntityNotFoundError, ValidationError
from stockledger.domain.model.order import OrderState
from stockledger.domain.repository.order_repository import OrderRepository


class ReconcileOrderStockHandler:

    def __init__(self, order_repo: OrderRepository, hook: OrderStockHook) -> None:
        self._order_repo = order_repo
        self._hook = hook

    def handle(self, order_id: int) -> list[LineStockResult]:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        if order.settlement is None:
            raise ValidationError(f"Order #{order_id} has not settled payment")

        # A cancelled order only has its recorded sales put back.
        if order.state is OrderState.CANCELLED:
            return self._hook.record_cancellations(order)
        return self._hook.record_sales(order)
