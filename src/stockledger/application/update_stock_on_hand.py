"""Application service: Update Stock On Hand use case.

Administrative stock corrections are diff-based: the caller states the
stock level it wants, and the ledger records a single ADJUSTMENT for the
difference.  Asking for the current level records nothing.

Each variant is its own unit of work.  In a batch, a failure on one
variant is reported in that variant's result and never rolls back the
movements already committed for its siblings.
"""

from __future__ import annotations

import structlog

from stockledger.application.dto import (
    StockMovementDTO,
    StockUpdateRequest,
    StockUpdateResult,
    VariantDTO,
)
from stockledger.domain.exceptions import DomainException, ValidationError
from stockledger.domain.model.stock_movement import StockMovement, StockMovementType
from stockledger.domain.repository.variant_repository import VariantRepository
from stockledger.domain.service.stock_ledger import StockLedger

logger = structlog.get_logger(__name__)


class UpdateStockOnHandHandler:

    def __init__(self, variant_repo: VariantRepository, ledger: StockLedger) -> None:
        self._variant_repo = variant_repo
        self._ledger = ledger

    def handle(
        self,
        variant_id: str,
        stock_on_hand: int | None = None,
        track_inventory: bool | None = None,
    ) -> StockUpdateResult:
        """Set a variant's stock on hand and/or its tracking flag.

        Raises ValidationError for a negative ``stock_on_hand`` before the
        ledger is touched, whatever the variant's tracking flag.
        """
        if stock_on_hand is not None and stock_on_hand < 0:
            raise ValidationError("stockOnHand cannot be a negative value")

        movement: StockMovement | None = None
        with self._ledger.locked(variant_id) as variant:
            if track_inventory is not None and track_inventory != variant.track_inventory:
                variant.set_track_inventory(track_inventory)
                self._variant_repo.save(variant)
                logger.info(
                    "Inventory tracking changed",
                    variant_id=variant_id,
                    track_inventory=track_inventory,
                )

            if stock_on_hand is not None:
                delta = stock_on_hand - variant.stock_on_hand
                if delta != 0:
                    movement = self._ledger.append(
                        variant_id, StockMovementType.ADJUSTMENT, delta
                    )

            updated = self._variant_repo.get_by_id(variant_id)

        return StockUpdateResult(
            variant_id=variant_id,
            variant=VariantDTO.from_domain(updated),  # type: ignore[arg-type]
            movement=StockMovementDTO.from_domain(movement) if movement else None,
        )

    def handle_batch(self, requests: list[StockUpdateRequest]) -> list[StockUpdateResult]:
        """Apply several updates, reporting one result per variant."""
        results: list[StockUpdateResult] = []
        for request in requests:
            try:
                result = self.handle(
                    request.variant_id,
                    stock_on_hand=request.stock_on_hand,
                    track_inventory=request.track_inventory,
                )
            except DomainException as exc:
                logger.warning(
                    "Stock update failed",
                    variant_id=request.variant_id,
                    error=str(exc),
                )
                result = StockUpdateResult(variant_id=request.variant_id, error=str(exc))
            results.append(result)
        return results
