"""JSON-file-backed implementation of StockMovementRepository.

Rows are only ever appended, in insertion order.  Appends for one
variant happen under that variant's lock, so each variant's rows are in
ID order; rows of different variants may interleave out of ID order.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from stockledger.domain.model.stock_movement import StockMovement, StockMovementType
from stockledger.domain.repository.stock_movement_repository import (
    StockMovementRepository,
)
from stockledger.infrastructure.persistence.json_file import JsonFile


class JsonStockMovementRepository(StockMovementRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)
        self._last_issued = 0

    # --- StockMovementRepository interface ------------------------------------

    def next_id(self) -> int:
        with self._file.lock:
            records = self._file.load()
            highest = max((raw["id"] for raw in records), default=0)
            # IDs handed out but not yet appended must not be reissued.
            self._last_issued = max(highest, self._last_issued) + 1
            return self._last_issued

    def add(self, movement: StockMovement) -> None:
        with self._file.lock:
            records = self._file.load()
            records.append(self._to_raw(movement))
            self._file.persist(records)

    def list_for_variant(
        self, variant_id: str, skip: int = 0, take: int | None = None
    ) -> tuple[list[StockMovement], int]:
        rows = [raw for raw in self._file.load() if raw["variant_id"] == variant_id]
        end = None if take is None else skip + take
        return [self._to_domain(raw) for raw in rows[skip:end]], len(rows)

    def list_for_order_line(self, order_line_id: str) -> list[StockMovement]:
        return [
            self._to_domain(raw)
            for raw in self._file.load()
            if raw.get("order_line_id") == order_line_id
        ]

    def sum_for_variant(self, variant_id: str) -> int:
        return sum(
            raw["quantity"] for raw in self._file.load() if raw["variant_id"] == variant_id
        )

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(movement: StockMovement) -> dict:
        return {
            "id": movement.id,
            "variant_id": movement.variant_id,
            "type": movement.type.value,
            "quantity": movement.quantity,
            "order_line_id": movement.order_line_id,
            "created_at": movement.created_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> StockMovement:
        return StockMovement(
            id=raw["id"],
            variant_id=raw["variant_id"],
            type=StockMovementType(raw["type"]),
            quantity=raw["quantity"],
            order_line_id=raw.get("order_line_id"),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )
