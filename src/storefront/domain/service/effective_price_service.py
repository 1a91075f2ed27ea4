"""Domain service: the price a customer actually pays.

Two discount mechanisms compete for every (item, tier) pair: a sale price
set by hand in the catalog and the best running campaign.  The lowest
price wins, so a customer never sees a worse price than either mechanism
alone would give, and re-resolving the same inputs always gives the same
answer.  Checkout snapshots the result into the order line.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from storefront.domain.model.campaign import Campaign
from storefront.domain.model.catalog import CatalogItem
from storefront.domain.model.value_objects import Money
from storefront.domain.service import campaign_resolver, discount_calculator
from storefront.domain.service.active_campaign_cache import ActiveCampaignCache


@dataclass(frozen=True)
class ResolvedPrice:
    """Final unit price for one (item, tier) pair at one point in time.

    ``campaign`` is set only when the campaign's price is the one charged.
    """

    item_id: str
    tier_label: str | None
    base_price: Money
    manual_sale_price: Money | None
    dynamic_price: Money | None
    unit_price: Money
    campaign: Campaign | None = None

    @property
    def is_discounted(self) -> bool:
        return self.unit_price < self.base_price


def resolve_price(
    item: CatalogItem,
    tier_label: str | None,
    active_campaigns: Sequence[Campaign],
) -> ResolvedPrice:
    tier = item.tier_for(tier_label)
    base_price, manual_sale_price = item.price_pair(tier_label)

    candidates = [base_price]
    if (
        manual_sale_price is not None
        and manual_sale_price.amount > 0
        and manual_sale_price < base_price
    ):
        candidates.append(manual_sale_price)

    campaign = campaign_resolver.resolve(item, active_campaigns)
    dynamic_price = None
    if campaign is not None:
        dynamic_price = discount_calculator.apply(base_price, campaign)
        if dynamic_price < base_price:
            candidates.append(dynamic_price)

    unit_price = min(candidates)
    contributing = (
        campaign
        if dynamic_price is not None
        and dynamic_price < base_price
        and unit_price == dynamic_price
        else None
    )
    return ResolvedPrice(
        item_id=item.id,
        tier_label=tier.label if tier is not None else None,
        base_price=base_price,
        manual_sale_price=manual_sale_price,
        dynamic_price=dynamic_price,
        unit_price=unit_price,
        campaign=contributing,
    )


class EffectivePriceService:

    def __init__(self, campaign_cache: ActiveCampaignCache) -> None:
        self._campaign_cache = campaign_cache

    def price_for(self, item: CatalogItem, tier_label: str | None = None) -> Money:
        return self.resolve(item, tier_label).unit_price

    def resolve(self, item: CatalogItem, tier_label: str | None = None) -> ResolvedPrice:
        return resolve_price(item, tier_label, self._campaign_cache.get_active())

    def resolve_tiers(self, item: CatalogItem) -> list[ResolvedPrice]:
        """Resolve every tier of an item against a single campaign snapshot."""
        active = self._campaign_cache.get_active()
        return [resolve_price(item, tier.label, active) for tier in item.tiers]
