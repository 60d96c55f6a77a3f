"""Application service: Add Variant use case."""

from __future__ import annotations

from stockledger.application.dto import VariantDTO
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.variant import ProductVariant
from stockledger.domain.repository.variant_repository import VariantRepository


class AddVariantHandler:

    def __init__(self, variant_repo: VariantRepository) -> None:
        self._variant_repo = variant_repo

    def handle(self, name: str, track_inventory: bool = True) -> VariantDTO:
        """Add a new variant to the catalog with no stock and no history."""
        if not name or not name.strip():
            raise ValidationError("Variant name is required")

        variant = ProductVariant(
            id=self._variant_repo.next_id(),
            name=name.strip(),
            track_inventory=track_inventory,
        )
        self._variant_repo.save(variant)
        return VariantDTO.from_domain(variant)
