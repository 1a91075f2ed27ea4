"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from storefront.application.create_order import CreateOrderHandler
from storefront.application.order_lifecycle import OrderLifecycle
from storefront.domain.service.active_campaign_cache import ActiveCampaignCache
from storefront.domain.service.effective_price_service import EffectivePriceService
from storefront.infrastructure.notifications.logging_notifier import LoggingNotifier
from storefront.infrastructure.persistence.json_campaign_repository import (
    JsonCampaignRepository,
)
from storefront.infrastructure.persistence.json_catalog_repository import (
    JsonCatalogRepository,
)
from storefront.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)

DATA_DIR_ENV = "STOREFRONT_DATA_DIR"

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


def data_dir() -> Path:
    configured = os.environ.get(DATA_DIR_ENV)
    return Path(configured) if configured else _DEFAULT_DATA_DIR


def catalog_repository() -> JsonCatalogRepository:
    return JsonCatalogRepository(data_dir() / "catalog.json")


def order_repository() -> JsonOrderRepository:
    return _order_repository(data_dir())


def campaign_cache() -> ActiveCampaignCache:
    return _campaign_cache(data_dir())


def price_service() -> EffectivePriceService:
    return EffectivePriceService(campaign_cache())


def notifier() -> LoggingNotifier:
    return LoggingNotifier()


def create_order_handler() -> CreateOrderHandler:
    return CreateOrderHandler(
        order_repo=order_repository(),
        catalog_repo=catalog_repository(),
        price_service=price_service(),
        notifier=notifier(),
    )


def order_lifecycle() -> OrderLifecycle:
    return _order_lifecycle(data_dir())


# One instance per data directory: the cache, the order file lock and the
# per-order locks are shared by every caller in the process.


@lru_cache(maxsize=None)
def _order_repository(directory: Path) -> JsonOrderRepository:
    return JsonOrderRepository(directory / "orders.json")


@lru_cache(maxsize=None)
def _campaign_cache(directory: Path) -> ActiveCampaignCache:
    return ActiveCampaignCache(JsonCampaignRepository(directory / "campaigns.json"))


@lru_cache(maxsize=None)
def _order_lifecycle(directory: Path) -> OrderLifecycle:
    return OrderLifecycle(order_repo=_order_repository(directory), notifier=notifier())
