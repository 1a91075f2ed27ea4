"""JSON-file-backed implementation of CampaignRepository."""

from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from storefront.domain.model.campaign import (
    AllItems,
    ByCategory,
    ByItem,
    Campaign,
    CampaignScope,
    DiscountKind,
)
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.campaign_repository import CampaignRepository


class JsonCampaignRepository(CampaignRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- CampaignRepository interface -----------------------------------------

    def list_live(self, at: datetime) -> list[Campaign]:
        return [c for c in self._load() if c.is_live_at(at)]

    def save(self, campaign: Campaign) -> None:
        campaigns = self._load()
        for i, existing in enumerate(campaigns):
            if existing.id == campaign.id:
                campaigns[i] = campaign
                break
        else:
            campaigns.append(campaign)
        self._file_path.write_text(
            json.dumps([self._to_raw(c) for c in campaigns], indent=2) + "\n",
            encoding="utf-8",
        )

    # --- Serialization --------------------------------------------------------

    def _load(self) -> list[Campaign]:
        raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        return [self._to_domain(entry) for entry in raw]

    @staticmethod
    def _to_domain(entry: dict) -> Campaign:
        max_discount = entry.get("max_discount")
        return Campaign(
            id=entry["id"],
            name=entry["name"],
            kind=DiscountKind(entry["kind"]),
            value=Decimal(entry["value"]),
            start_at=datetime.fromisoformat(entry["start_at"]),
            end_at=datetime.fromisoformat(entry["end_at"]),
            scope=_scope_from_raw(entry.get("scope", {"type": "all"})),
            excluded_item_ids=frozenset(entry.get("excluded_item_ids", [])),
            max_discount=Money(Decimal(max_discount)) if max_discount is not None else None,
            usage_limit=entry.get("usage_limit"),
            usage_count=entry.get("usage_count", 0),
            priority=entry.get("priority", 0),
            is_active=entry.get("is_active", True),
        )

    @staticmethod
    def _to_raw(campaign: Campaign) -> dict:
        return {
            "id": campaign.id,
            "name": campaign.name,
            "kind": campaign.kind.value,
            "value": str(campaign.value),
            "start_at": campaign.start_at.isoformat(),
            "end_at": campaign.end_at.isoformat(),
            "scope": _scope_to_raw(campaign.scope),
            "excluded_item_ids": sorted(campaign.excluded_item_ids),
            "max_discount": (
                str(campaign.max_discount.amount) if campaign.max_discount else None
            ),
            "usage_limit": campaign.usage_limit,
            "usage_count": campaign.usage_count,
            "priority": campaign.priority,
            "is_active": campaign.is_active,
        }

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")


def _scope_from_raw(raw: dict) -> CampaignScope:
    match raw.get("type"):
        case "all":
            return AllItems()
        case "by-category":
            return ByCategory(frozenset(raw.get("ids", [])))
        case "by-item":
            return ByItem(frozenset(raw.get("ids", [])))
        case other:
            raise ValueError(f"Unknown campaign scope type {other!r}")


def _scope_to_raw(scope: CampaignScope) -> dict:
    match scope:
        case AllItems():
            return {"type": "all"}
        case ByCategory(category_ids=ids):
            return {"type": "by-category", "ids": sorted(ids)}
        case ByItem(item_ids=ids):
            return {"type": "by-item", "ids": sorted(ids)}
        case _:
            raise TypeError(f"Unhandled campaign scope {scope!r}")
