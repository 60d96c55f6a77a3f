"""Domain service: Stock Level accessor.

Owns the per-variant unit of atomicity.  Every change to a variant's
stock on hand happens while holding that variant's lock, and the
non-negative check is made under the same lock, so two writers against
one variant serialize while writers against different variants never
wait on each other.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from stockledger.domain.exceptions import EntityNotFoundError, InsufficientStockError
from stockledger.domain.model.variant import ProductVariant
from stockledger.domain.repository.variant_repository import VariantRepository

logger = structlog.get_logger(__name__)


def would_violate_invariant(variant: ProductVariant, delta: int) -> bool:
    """True iff the variant tracks inventory and *delta* would take it below zero."""
    return variant.would_go_negative(delta)


class LockArena:
    """Arena of re-entrant locks, one per key (variant ID, order ID).

    The arena's own guard is held only while looking up or creating an
    entry, never while a variant's work runs.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[object, threading.RLock] = {}

    def lock_for(self, key: object) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock


class StockLevelAccessor:

    def __init__(
        self,
        variant_repo: VariantRepository,
        locks: LockArena | None = None,
    ) -> None:
        self._variant_repo = variant_repo
        self._locks = locks if locks is not None else LockArena()

    @contextmanager
    def locked(self, variant_id: str) -> Iterator[ProductVariant]:
        """Hold the variant's lock and yield a freshly loaded copy of it."""
        with self._locks.lock_for(variant_id):
            variant = self._variant_repo.get_by_id(variant_id)
            if variant is None:
                raise EntityNotFoundError(f"Variant '{variant_id}' not found")
            yield variant

    def ensure_can_apply(self, variant: ProductVariant, delta: int) -> None:
        """Raise InsufficientStockError if *delta* breaks the invariant.

        Callers must hold the variant's lock.
        """
        if would_violate_invariant(variant, delta):
            logger.warning(
                "Stock change rejected",
                variant_id=variant.id,
                stock_on_hand=variant.stock_on_hand,
                delta=delta,
            )
            raise InsufficientStockError(variant.id, variant.stock_on_hand, delta)
