"""Abstract repository for ProductVariant aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, in-memory) live in the
infrastructure layer and the test fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.variant import ProductVariant


class VariantRepository(ABC):

    @abstractmethod
    def next_id(self) -> str:
        """Generate the next unique variant ID."""

    @abstractmethod
    def get_by_id(self, variant_id: str) -> ProductVariant | None:
        """Return a variant by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[ProductVariant]:
        """Return every variant in the catalog."""

    @abstractmethod
    def save(self, variant: ProductVariant) -> None:
        """Persist a new or updated variant."""
