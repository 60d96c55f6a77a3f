"""JSON-file-backed implementation of VariantRepository."""

from __future__ import annotations

from pathlib import Path

from stockledger.domain.model.variant import ProductVariant
from stockledger.domain.repository.variant_repository import VariantRepository
from stockledger.infrastructure.persistence.json_file import JsonFile


class JsonVariantRepository(VariantRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- VariantRepository interface ------------------------------------------

    def next_id(self) -> str:
        records = self._file.load()
        if not records:
            return "1"
        return str(max(int(raw["id"]) for raw in records) + 1)

    def get_by_id(self, variant_id: str) -> ProductVariant | None:
        for raw in self._file.load():
            if raw["id"] == variant_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[ProductVariant]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def save(self, variant: ProductVariant) -> None:
        with self._file.lock:
            records = self._file.load()
            for i, raw in enumerate(records):
                if raw["id"] == variant.id:
                    records[i] = self._to_raw(variant)
                    break
            else:
                records.append(self._to_raw(variant))
            self._file.persist(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(variant: ProductVariant) -> dict:
        return {
            "id": variant.id,
            "name": variant.name,
            "stock_on_hand": variant.stock_on_hand,
            "track_inventory": variant.track_inventory,
        }

    @staticmethod
    def _to_domain(raw: dict) -> ProductVariant:
        return ProductVariant(
            id=raw["id"],
            name=raw["name"],
            stock_on_hand=raw.get("stock_on_hand", 0),
            track_inventory=raw.get("track_inventory", True),
        )
