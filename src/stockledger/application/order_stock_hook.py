"""Application service: Order Stock Hook.

Subscribes to the order state machine and turns order lifecycle edges
into stock movements:

- entering PaymentSettled records one SALE per line of a variant that
  tracks inventory;
- PaymentSettled -> Cancelled records a CANCELLATION per sold line,
  putting back whatever has not already been returned.

Both are idempotent per line: the check for an existing movement and
the append happen under the variant's lock, so re-running the hook
(retry, crash recovery) never deducts twice.  A line already marked
``stock_reconciled`` is never deducted again, and no SALE is written
once the order has been cancelled.  A line that cannot be
deducted is reported and logged; the remaining lines are still
processed and the order transition is never undone.
"""

from __future__ import annotations

import structlog

from stockledger.application.dto import LineStockOutcome, LineStockResult
from stockledger.domain.exceptions import EntityNotFoundError, InsufficientStockError
from stockledger.domain.model.order import Order, OrderLine, OrderState, OrderTransition
from stockledger.domain.model.stock_movement import StockMovementType
from stockledger.domain.repository.order_repository import OrderRepository
from stockledger.domain.service.stock_ledger import StockLedger
from stockledger.domain.service.stock_level import LockArena

logger = structlog.get_logger(__name__)


class OrderStockHook:

    def __init__(
        self,
        order_repo: OrderRepository,
        ledger: StockLedger,
        locks: LockArena | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._ledger = ledger
        self._locks = locks if locks is not None else LockArena()

    # --- Subscriber entry point -----------------------------------------------

    def __call__(self, order: Order, transition: OrderTransition) -> None:
        if transition.is_settlement:
            self.record_sales(order)
        elif transition.is_settled_cancellation:
            self.record_cancellations(order)

    # --- Settlement -----------------------------------------------------------

    def record_sales(self, order: Order) -> list[LineStockResult]:
        """Deduct stock for every line of a settled order."""
        results = [self._record_sale(order.id, line) for line in order.lines]
        self._mark_reconciled(order, results)

        failed = [r for r in results if r.failed]
        if failed:
            logger.warning(
                "Order settled with unreconciled stock",
                order_id=order.id,
                failed_lines=[r.line_id for r in failed],
            )
        return results

    def _record_sale(self, order_id: int, line: OrderLine) -> LineStockResult:
        try:
            with self._ledger.locked(line.variant_id) as variant:
                if self._has_movement(line, StockMovementType.SALE):
                    return LineStockResult(
                        line.id, line.variant_id, LineStockOutcome.ALREADY_RECORDED
                    )
                # A cancellation committed ahead of this settlement finds no SALE to undo.
                if self._is_cancelled(order_id):
                    return LineStockResult(
                        line.id, line.variant_id, LineStockOutcome.SKIPPED_CANCELLED
                    )
                # Reconciled without a SALE: skipped at settlement, never revisited.
                if line.stock_reconciled or not variant.track_inventory:
                    return LineStockResult(
                        line.id, line.variant_id, LineStockOutcome.SKIPPED_UNTRACKED
                    )
                movement = self._ledger.append(
                    line.variant_id,
                    StockMovementType.SALE,
                    -line.quantity.value,
                    order_line_id=line.id,
                )
        except InsufficientStockError as exc:
            logger.warning(
                "Insufficient stock at settlement",
                order_line_id=line.id,
                variant_id=line.variant_id,
                stock_on_hand=exc.stock_on_hand,
                quantity=line.quantity.value,
            )
            return LineStockResult(
                line.id, line.variant_id, LineStockOutcome.INSUFFICIENT_STOCK,
                message=str(exc),
            )
        except EntityNotFoundError as exc:
            logger.warning(
                "Order line refers to an unknown variant",
                order_line_id=line.id,
                variant_id=line.variant_id,
            )
            return LineStockResult(
                line.id, line.variant_id, LineStockOutcome.MISSING_VARIANT,
                message=str(exc),
            )

        return LineStockResult(
            line.id, line.variant_id, LineStockOutcome.RECORDED, movement_id=movement.id
        )

    # --- Cancellation after settlement ----------------------------------------

    def record_cancellations(self, order: Order) -> list[LineStockResult]:
        """Restore stock for the sold lines of a cancelled order."""
        return [self._record_cancellation(line) for line in order.lines]

    def _record_cancellation(self, line: OrderLine) -> LineStockResult:
        try:
            with self._ledger.locked(line.variant_id):
                movements = self._ledger.list_for_order_line(line.id)
                sold = -sum(m.quantity for m in movements if m.type is StockMovementType.SALE)
                if sold == 0:
                    return LineStockResult(
                        line.id, line.variant_id, LineStockOutcome.NOTHING_TO_RESTORE
                    )
                if any(m.type is StockMovementType.CANCELLATION for m in movements):
                    return LineStockResult(
                        line.id, line.variant_id, LineStockOutcome.ALREADY_RECORDED
                    )
                returned = sum(m.quantity for m in movements if m.type is StockMovementType.RETURN)
                outstanding = sold - returned
                if outstanding <= 0:
                    return LineStockResult(
                        line.id, line.variant_id, LineStockOutcome.NOTHING_TO_RESTORE
                    )
                movement = self._ledger.append(
                    line.variant_id,
                    StockMovementType.CANCELLATION,
                    outstanding,
                    order_line_id=line.id,
                )
        except EntityNotFoundError as exc:
            logger.warning(
                "Order line refers to an unknown variant",
                order_line_id=line.id,
                variant_id=line.variant_id,
            )
            return LineStockResult(
                line.id, line.variant_id, LineStockOutcome.MISSING_VARIANT,
                message=str(exc),
            )

        return LineStockResult(
            line.id, line.variant_id, LineStockOutcome.RECORDED, movement_id=movement.id
        )

    # --- Internal helpers -----------------------------------------------------

    def _has_movement(self, line: OrderLine, movement_type: StockMovementType) -> bool:
        return any(
            m.type is movement_type for m in self._ledger.list_for_order_line(line.id)
        )

    def _is_cancelled(self, order_id: int) -> bool:
        stored = self._order_repo.get_by_id(order_id)
        return stored is not None and stored.state is OrderState.CANCELLED

    def _mark_reconciled(self, order: Order, results: list[LineStockResult]) -> None:
        done = {r.line_id for r in results if not r.failed}
        for line in order.lines:
            if line.id in done:
                line.stock_reconciled = True

        # Reload under the order lock so a concurrent transition is not overwritten.
        with self._locks.lock_for(("order", order.id)):
            stored = self._order_repo.get_by_id(order.id)  # type: ignore[arg-type]
            if stored is None:
                raise EntityNotFoundError(f"Order #{order.id} not found")
            for line in stored.lines:
                if line.id in done:
                    line.stock_reconciled = True
            self._order_repo.save(stored)
