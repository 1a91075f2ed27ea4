"""Domain service: weight-based shipping charges.

Items are made to order, so the parcel is only weighed after production.
The admin records the weight and the charge is billed per started
kilogram.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money

RATE_PER_KG = Money(Decimal("350"))
GRAMS_PER_KG = 1000


@dataclass(frozen=True)
class ShippingQuote:
    weight_grams: int
    billed_kg: int
    cost: Money


def cost_for(weight_grams: int, rate_per_kg: Money = RATE_PER_KG) -> ShippingQuote:
    """Bill ``ceil(weight_grams / 1000)`` kilograms at ``rate_per_kg``."""
    if not isinstance(weight_grams, int) or isinstance(weight_grams, bool):
        raise ValidationError(
            f"Weight must be a whole number of grams, got {weight_grams!r}"
        )
    if weight_grams < 0:
        raise ValidationError("Weight cannot be negative")

    billed_kg = -(-weight_grams // GRAMS_PER_KG)
    return ShippingQuote(
        weight_grams=weight_grams,
        billed_kg=billed_kg,
        cost=rate_per_kg * billed_kg,
    )
