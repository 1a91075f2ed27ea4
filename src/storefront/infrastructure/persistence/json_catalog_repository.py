"""JSON-file-backed implementation of CatalogRepository."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

from storefront.domain.model.catalog import CatalogItem, PricingTier
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.catalog_repository import CatalogRepository


class JsonCatalogRepository(CatalogRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- CatalogRepository interface ------------------------------------------

    def get_by_id(self, item_id: str) -> CatalogItem | None:
        return self._load().get(item_id)

    def list_all(self) -> list[CatalogItem]:
        return list(self._load().values())

    def save(self, item: CatalogItem) -> None:
        items = self._load()
        items[item.id] = item
        self._persist(items)

    # --- Serialization helpers ------------------------------------------------

    def _load(self) -> dict[str, CatalogItem]:
        raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        return {entry["id"]: self._to_domain(entry) for entry in raw}

    def _persist(self, items: dict[str, CatalogItem]) -> None:
        raw = [self._to_raw(item) for item in items.values()]
        self._file_path.write_text(
            json.dumps(raw, indent=2) + "\n", encoding="utf-8"
        )

    @staticmethod
    def _to_domain(entry: dict) -> CatalogItem:
        currency = entry.get("currency", "PKR")
        return CatalogItem(
            id=entry["id"],
            name=entry["name"],
            base_price=Money(Decimal(entry["price"]), currency),
            sale_price=_money(entry.get("sale_price"), currency),
            tiers=[
                PricingTier(
                    label=t["label"],
                    base_price=Money(Decimal(t["price"]), currency),
                    sale_price=_money(t.get("sale_price"), currency),
                    stock=t.get("stock", 0),
                )
                for t in entry.get("tiers", [])
            ],
            category_id=entry.get("category_id"),
            weight_grams=entry.get("weight_grams"),
            is_active=entry.get("is_active", True),
        )

    @staticmethod
    def _to_raw(item: CatalogItem) -> dict:
        return {
            "id": item.id,
            "name": item.name,
            "price": str(item.base_price.amount),
            "sale_price": str(item.sale_price.amount) if item.sale_price else None,
            "currency": item.base_price.currency,
            "tiers": [
                {
                    "label": t.label,
                    "price": str(t.base_price.amount),
                    "sale_price": str(t.sale_price.amount) if t.sale_price else None,
                    "stock": t.stock,
                }
                for t in item.tiers
            ],
            "category_id": item.category_id,
            "weight_grams": item.weight_grams,
            "is_active": item.is_active,
        }

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")


def _money(value: str | None, currency: str) -> Money | None:
    return Money(Decimal(value), currency) if value is not None else None
