"""Domain service: apply a campaign's discount to a single price."""

from __future__ import annotations

from decimal import Decimal

from storefront.domain.model.campaign import Campaign, DiscountKind
from storefront.domain.model.value_objects import Money, round_to_whole


def apply(base_price: Money, campaign: Campaign | None) -> Money:
    """Return ``base_price`` reduced by ``campaign``.

    Percentage discounts are clamped to the campaign's cap.  The result is
    floored at zero and rounded half-up to a whole currency unit.  With no
    campaign, or a zero price, the base price comes back unchanged.
    """
    if campaign is None or base_price.amount <= 0:
        return base_price

    if campaign.kind is DiscountKind.PERCENTAGE:
        discount = base_price.amount * campaign.value / Decimal(100)
        if campaign.max_discount is not None and discount > campaign.max_discount.amount:
            discount = campaign.max_discount.amount
    elif campaign.kind is DiscountKind.FIXED:
        discount = campaign.value
    else:
        raise TypeError(f"Unhandled discount kind {campaign.kind!r}")

    discounted = max(Decimal(0), base_price.amount - discount)
    return Money(round_to_whole(discounted), base_price.currency)
