"""Catalog items as seen by the pricing engine.

Catalog CRUD lives elsewhere; this core only reads items to resolve
prices and snapshot them into orders.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from storefront.domain.model.value_objects import Money


@dataclass
class PricingTier:
    """A named price/stock bucket on an item (e.g. an age range)."""

    label: str
    base_price: Money
    sale_price: Money | None = None
    stock: int = 0


@dataclass
class CatalogItem:
    """A purchasable item.

    When ``tiers`` is non-empty, a tier label selects the base and manual
    sale price; otherwise the top-level prices apply.
    """

    id: str
    name: str
    base_price: Money
    sale_price: Money | None = None
    tiers: list[PricingTier] = field(default_factory=list)
    category_id: str | None = None
    weight_grams: int | None = None
    is_active: bool = True

    def tier_for(self, label: str | None) -> PricingTier | None:
        if label is None:
            return None
        for tier in self.tiers:
            if tier.label == label:
                return tier
        return None

    def price_pair(self, tier_label: str | None) -> tuple[Money, Money | None]:
        """Return ``(base_price, manual_sale_price)`` for a tier selection.

        An unknown tier label falls back to the item's top-level prices.
        """
        tier = self.tier_for(tier_label)
        if tier is not None:
            return tier.base_price, tier.sale_price
        return self.base_price, self.sale_price
