"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from stockledger.domain.model.order import Order, OrderLine, OrderState, OrderTransition
from stockledger.domain.model.value_objects import Quantity
from stockledger.domain.repository.order_repository import OrderRepository
from stockledger.infrastructure.persistence.json_file import JsonFile


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        orders = self._file.load()
        if not orders:
            return 1
        return max(o["id"] for o in orders) + 1

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._file.load():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def save(self, order: Order) -> None:
        with self._file.lock:
            orders = self._file.load()

            if order.id is None:
                order.id = self.next_id()

            # Upsert: replace if exists, otherwise append
            for i, raw in enumerate(orders):
                if raw["id"] == order.id:
                    orders[i] = self._to_raw(order)
                    break
            else:
                orders.append(self._to_raw(order))

            self._file.persist(orders)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "state": order.state.value,
            "created_at": order.created_at.isoformat(),
            "lines": [
                {
                    "id": line.id,
                    "variant_id": line.variant_id,
                    "quantity": line.quantity.value,
                    "stock_reconciled": line.stock_reconciled,
                }
                for line in order.lines
            ],
            "history": [
                {
                    "sequence": t.sequence,
                    "from_state": t.from_state.value,
                    "to_state": t.to_state.value,
                    "occurred_at": t.occurred_at.isoformat(),
                }
                for t in order.history
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        lines = [
            OrderLine(
                id=line["id"],
                variant_id=line["variant_id"],
                quantity=Quantity(line["quantity"]),
                stock_reconciled=line.get("stock_reconciled", False),
            )
            for line in raw["lines"]
        ]
        history = [
            OrderTransition(
                order_id=raw["id"],
                sequence=t["sequence"],
                from_state=OrderState(t["from_state"]),
                to_state=OrderState(t["to_state"]),
                occurred_at=datetime.fromisoformat(t["occurred_at"]),
            )
            for t in raw.get("history", [])
        ]
        return Order(
            id=raw["id"],
            lines=lines,
            state=OrderState(raw["state"]),
            history=history,
            created_at=datetime.fromisoformat(raw["created_at"]),
        )
