"""Domain service: the StockMovement ledger.

The ledger is the only writer of stock movements and of a variant's
cached stock on hand.  ``append`` persists the movement and folds it into
the cache as one unit under the variant's lock; the cache can always be
rebuilt from the movement history.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.stock_movement import (
    PaginatedList,
    StockMovement,
    StockMovementType,
)
from stockledger.domain.model.variant import ProductVariant
from stockledger.domain.repository.stock_movement_repository import (
    StockMovementRepository,
)
from stockledger.domain.repository.variant_repository import VariantRepository
from stockledger.domain.service.stock_level import LockArena, StockLevelAccessor

logger = structlog.get_logger(__name__)


class StockLedger:

    def __init__(
        self,
        variant_repo: VariantRepository,
        movement_repo: StockMovementRepository,
        locks: LockArena | None = None,
    ) -> None:
        self._variant_repo = variant_repo
        self._movement_repo = movement_repo
        self._stock_level = StockLevelAccessor(variant_repo, locks)

    @contextmanager
    def locked(self, variant_id: str) -> Iterator[ProductVariant]:
        """Hold a variant's lock across several ledger calls.

        The lock is re-entrant, so ``append`` may be called inside.
        """
        with self._stock_level.locked(variant_id) as variant:
            yield variant

    def append(
        self,
        variant_id: str,
        movement_type: StockMovementType,
        quantity: int,
        order_line_id: str | None = None,
    ) -> StockMovement:
        """Record a movement and apply it to the variant's stock on hand.

        Raises ValidationError for a malformed movement (zero quantity,
        wrong sign, missing order line) and InsufficientStockError when a
        tracked variant would go negative.  Nothing is written in either case.
        """
        StockMovement.check_shape(movement_type, quantity, order_line_id)

        with self._stock_level.locked(variant_id) as variant:
            self._stock_level.ensure_can_apply(variant, quantity)

            movement = StockMovement.record(
                movement_id=self._movement_repo.next_id(),
                variant_id=variant_id,
                movement_type=movement_type,
                quantity=quantity,
                order_line_id=order_line_id,
            )
            self._movement_repo.add(movement)
            variant.apply_movement(quantity)
            self._variant_repo.save(variant)

        logger.info(
            "Stock movement recorded",
            movement_id=movement.id,
            variant_id=variant_id,
            movement_type=movement_type.value,
            quantity=quantity,
            stock_on_hand=variant.stock_on_hand,
        )
        return movement

    def list_for_variant(
        self, variant_id: str, skip: int = 0, take: int | None = None
    ) -> PaginatedList[StockMovement]:
        """Return a page of the variant's history, oldest first."""
        if skip < 0:
            raise ValidationError("skip cannot be negative")
        if take is not None and take < 0:
            raise ValidationError("take cannot be negative")
        items, total = self._movement_repo.list_for_variant(variant_id, skip, take)
        return PaginatedList(items=items, total_items=total)

    def list_for_order_line(self, order_line_id: str) -> list[StockMovement]:
        return self._movement_repo.list_for_order_line(order_line_id)

    def stock_on_hand_from_history(self, variant_id: str) -> int:
        return self._movement_repo.sum_for_variant(variant_id)

    def rebuild_stock_on_hand(self, variant_id: str) -> ProductVariant:
        """Reset the cached stock on hand to the sum of the variant's movements."""
        with self._stock_level.locked(variant_id) as variant:
            rebuilt = self._movement_repo.sum_for_variant(variant_id)
            if rebuilt != variant.stock_on_hand:
                logger.warning(
                    "Stock on hand disagreed with movement history",
                    variant_id=variant_id,
                    cached=variant.stock_on_hand,
                    rebuilt=rebuilt,
                )
                variant.stock_on_hand = rebuilt
                self._variant_repo.save(variant)
            return variant
