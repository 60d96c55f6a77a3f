"""Application service: List Variants use case (query)."""

from __future__ import annotations

from stockledger.application.dto import VariantDTO
from stockledger.domain.repository.variant_repository import VariantRepository


class ListVariantsHandler:

    def __init__(self, variant_repo: VariantRepository) -> None:
        self._variant_repo = variant_repo

    def handle(self) -> list[VariantDTO]:
        return [VariantDTO.from_domain(v) for v in self._variant_repo.list_all()]
