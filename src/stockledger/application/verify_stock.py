"""Application service: Verify Stock use case.

Recomputes every variant's stock from its movement history and reports
the variants whose cached stock on hand disagrees.  With ``repair`` the
cache is rebuilt from history.
"""

from __future__ import annotations

from stockledger.application.dto import StockDiscrepancyDTO, VariantDTO
from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.repository.variant_repository import VariantRepository
from stockledger.domain.service.stock_ledger import StockLedger


class VerifyStockHandler:

    def __init__(self, variant_repo: VariantRepository, ledger: StockLedger) -> None:
        self._variant_repo = variant_repo
        self._ledger = ledger

    def handle(self, repair: bool = False) -> list[StockDiscrepancyDTO]:
        discrepancies: list[StockDiscrepancyDTO] = []
        for listed in self._variant_repo.list_all():
            # Cache and history are only comparable between appends.
            with self._ledger.locked(listed.id) as variant:
                from_history = self._ledger.stock_on_hand_from_history(variant.id)
                if from_history == variant.stock_on_hand:
                    continue
                discrepancies.append(
                    StockDiscrepancyDTO(
                        variant_id=variant.id,
                        cached=variant.stock_on_hand,
                        from_history=from_history,
                    )
                )
                if repair:
                    self._ledger.rebuild_stock_on_hand(variant.id)
        return discrepancies

    def rebuild(self, variant_id: str) -> VariantDTO:
        """Rebuild one variant's stock on hand from its history."""
        if self._variant_repo.get_by_id(variant_id) is None:
            raise EntityNotFoundError(f"Variant '{variant_id}' not found")
        return VariantDTO.from_domain(self._ledger.rebuild_stock_on_hand(variant_id))
