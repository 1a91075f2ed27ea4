"""Application service: Quote Price use case (query).

Consumed by cart and checkout flows to show and fix line prices.
"""

from __future__ import annotations

from storefront.application.dto import PriceQuoteDTO, to_price_quote_dto
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.repository.catalog_repository import CatalogRepository
from storefront.domain.service.effective_price_service import EffectivePriceService


class QuotePriceHandler:

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        price_service: EffectivePriceService,
    ) -> None:
        self._catalog_repo = catalog_repo
        self._price_service = price_service

    def handle(self, item_id: str, tier_label: str | None = None) -> PriceQuoteDTO:
        item = self._catalog_repo.get_by_id(item_id)
        if item is None:
            raise EntityNotFoundError(f"Item not found: '{item_id}'")
        return to_price_quote_dto(self._price_service.resolve(item, tier_label))
