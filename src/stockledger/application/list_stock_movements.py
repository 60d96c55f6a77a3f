"""Application service: List Stock Movements use case (query).

Offset-paginated history of one variant, oldest movement first.
"""

from __future__ import annotations

from stockledger.application.dto import StockMovementDTO, StockMovementPageDTO
from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.repository.variant_repository import VariantRepository
from stockledger.domain.service.stock_ledger import StockLedger


class ListStockMovementsHandler:

    def __init__(self, variant_repo: VariantRepository, ledger: StockLedger) -> None:
        self._variant_repo = variant_repo
        self._ledger = ledger

    def handle(
        self, variant_id: str, skip: int = 0, take: int | None = None
    ) -> StockMovementPageDTO:
        if self._variant_repo.get_by_id(variant_id) is None:
            raise EntityNotFoundError(f"Variant '{variant_id}' not found")

        page = self._ledger.list_for_variant(variant_id, skip=skip, take=take)
        return StockMovementPageDTO(
            items=[StockMovementDTO.from_domain(m) for m in page.items],
            total_items=page.total_items,
        )
