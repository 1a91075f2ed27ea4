"""Application service: List Catalog use case (query).

Decorates every active item with the price a shopper would pay right
now, per tier, plus the cheapest and dearest tier for "from Rs ..."
labels.
"""

from __future__ import annotations

from storefront.application.dto import CatalogPriceDTO, to_price_quote_dto
from storefront.domain.repository.catalog_repository import CatalogRepository
from storefront.domain.service.effective_price_service import EffectivePriceService


class ListCatalogHandler:

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        price_service: EffectivePriceService,
    ) -> None:
        self._catalog_repo = catalog_repo
        self._price_service = price_service

    def handle(self) -> list[CatalogPriceDTO]:
        listing: list[CatalogPriceDTO] = []
        for item in self._catalog_repo.list_all():
            if not item.is_active:
                continue

            top = self._price_service.resolve(item)
            tiers = self._price_service.resolve_tiers(item)
            tier_prices = [t.unit_price for t in tiers] or [top.unit_price]

            listing.append(
                CatalogPriceDTO(
                    item_id=item.id,
                    name=item.name,
                    price=to_price_quote_dto(top),
                    tiers=[to_price_quote_dto(t) for t in tiers],
                    min_price=str(min(tier_prices)),
                    max_price=str(max(tier_prices)),
                )
            )
        return listing
