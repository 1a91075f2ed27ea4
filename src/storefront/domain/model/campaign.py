"""Promotional campaigns.

A campaign is a time-boxed, priority-ranked discount rule created by an
administrator.  This core only reads campaigns; redemption counting
happens elsewhere.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money


class DiscountKind(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


# ---------------------------------------------------------------------------
# Eligibility scope: a closed union, matched exhaustively by the resolver.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AllItems:
    pass


@dataclass(frozen=True)
class ByCategory:
    category_ids: frozenset[str]


@dataclass(frozen=True)
class ByItem:
    item_ids: frozenset[str]


CampaignScope = AllItems | ByCategory | ByItem


@dataclass
class Campaign:
    """A promotional discount rule.

    Invariants:
    - ``percentage`` values lie in ``[0, 100]``
    - ``max_discount`` only applies to percentage campaigns
    - ``usage_limit``, when set, is positive
    - ``start_at`` is not after ``end_at``
    """

    id: str
    name: str
    kind: DiscountKind
    value: Decimal
    start_at: datetime
    end_at: datetime
    scope: CampaignScope = field(default_factory=AllItems)
    excluded_item_ids: frozenset[str] = frozenset()
    max_discount: Money | None = None
    usage_limit: int | None = None
    usage_count: int = 0
    priority: int = 0
    is_active: bool = True

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValidationError(f"Campaign '{self.name}' has a negative discount value")
        if self.kind is DiscountKind.PERCENTAGE and self.value > 100:
            raise ValidationError(
                f"Campaign '{self.name}' discounts more than 100 percent"
            )
        if self.kind is DiscountKind.FIXED and self.max_discount is not None:
            raise ValidationError(
                f"Campaign '{self.name}': a discount cap only applies to percentage campaigns"
            )
        if self.usage_limit is not None and self.usage_limit <= 0:
            raise ValidationError(f"Campaign '{self.name}' usage limit must be positive")
        if self.start_at > self.end_at:
            raise ValidationError(f"Campaign '{self.name}' ends before it starts")

    def is_live_at(self, moment: datetime) -> bool:
        return self.is_active and self.start_at <= moment <= self.end_at

    @property
    def is_exhausted(self) -> bool:
        return self.usage_limit is not None and self.usage_count >= self.usage_limit
