"""Abstract repository for the append-only stock movement log."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.stock_movement import StockMovement


class StockMovementRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Reserve the next movement ID (strictly increasing)."""

    @abstractmethod
    def add(self, movement: StockMovement) -> None:
        """Append a movement.  Existing rows are never replaced."""

    @abstractmethod
    def list_for_variant(
        self, variant_id: str, skip: int = 0, take: int | None = None
    ) -> tuple[list[StockMovement], int]:
        """Return one page of a variant's movements (oldest first) and the total count."""

    @abstractmethod
    def list_for_order_line(self, order_line_id: str) -> list[StockMovement]:
        """Return every movement caused by an order line, oldest first."""

    @abstractmethod
    def sum_for_variant(self, variant_id: str) -> int:
        """Return the sum of all movement quantities for a variant."""
