"""Domain service: pick the campaign that applies to an item.

Campaigns arrive sorted by descending priority; the first eligible one
wins.  Pure function, no I/O.
"""

from __future__ import annotations

from collections.abc import Iterable

from storefront.domain.model.campaign import AllItems, ByCategory, ByItem, Campaign
from storefront.domain.model.catalog import CatalogItem


def resolve(item: CatalogItem, active_campaigns: Iterable[Campaign]) -> Campaign | None:
    for campaign in active_campaigns:
        if campaign.is_exhausted:
            continue
        if item.id in campaign.excluded_item_ids:
            continue
        if matches_scope(campaign, item):
            return campaign
    return None


def matches_scope(campaign: Campaign, item: CatalogItem) -> bool:
    match campaign.scope:
        case AllItems():
            return True
        case ByCategory(category_ids=category_ids):
            return item.category_id is not None and item.category_id in category_ids
        case ByItem(item_ids=item_ids):
            return item.id in item_ids
        case _:
            raise TypeError(f"Unhandled campaign scope {campaign.scope!r}")
