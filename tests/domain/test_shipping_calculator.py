"""Unit tests for weight-based shipping charges."""

import pytest

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money
from storefront.domain.service import shipping_calculator


class TestCostFor:

    def test_weight_rounded_up_to_whole_kg(self):
        quote = shipping_calculator.cost_for(2300)
        assert quote.billed_kg == 3
        assert quote.cost == Money.of(1050)
        assert quote.weight_grams == 2300

    def test_exact_kilograms_not_rounded(self):
        quote = shipping_calculator.cost_for(2000)
        assert quote.billed_kg == 2
        assert quote.cost == Money.of(700)

    def test_one_gram_bills_a_kilogram(self):
        assert shipping_calculator.cost_for(1).billed_kg == 1

    def test_zero_weight_is_free(self):
        quote = shipping_calculator.cost_for(0)
        assert quote.billed_kg == 0
        assert quote.cost.is_zero

    def test_custom_rate(self):
        assert shipping_calculator.cost_for(1500, Money.of(200)).cost == Money.of(400)

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError, match="negative"):
            shipping_calculator.cost_for(-1)

    def test_fractional_grams_rejected(self):
        with pytest.raises(ValidationError, match="whole number"):
            shipping_calculator.cost_for(2.5)

    def test_same_weight_same_quote(self):
        assert shipping_calculator.cost_for(2300) == shipping_calculator.cost_for(2300)
