"""
Tests: bracket pricing engine.

Run with:
    pytest tests/test_pricing.py -v
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from groupbuy.catalog import PriceBracket
from groupbuy.pricing import (
    PricingEngine,
    current_price,
    floor_price,
    next_bracket,
    safe_number,
    safe_to_fixed,
    sort_brackets,
)

LADDER = [
    {"minQuantity": 1, "maxQuantity": 9, "pricePerUnit": 10},
    {"minQuantity": 10, "maxQuantity": 49, "pricePerUnit": 8},
    {"minQuantity": 50, "maxQuantity": None, "pricePerUnit": 5},
]


class TestCurrentPrice:
    @pytest.mark.parametrize(
        "demand, expected",
        [(1, 10), (5, 10), (9, 10), (10, 8), (49, 8), (50, 5), (1000, 5)],
    )
    def test_ladder(self, demand, expected):
        assert current_price(LADDER, demand) == Decimal(expected)

    def test_empty_brackets_give_zero(self):
        assert current_price([], 5) == 0
        assert current_price(None, 5) == 0

    @pytest.mark.parametrize("demand", [0, -1, -100, None, "junk"])
    def test_no_demand_uses_entry_tier(self, demand):
        assert current_price(LADDER, demand) == current_price(LADDER, 1) == Decimal(10)

    def test_gap_degrades_to_last_bracket(self):
        gapped = [
            {"minQuantity": 1, "maxQuantity": 5, "pricePerUnit": 10},
            {"minQuantity": 20, "maxQuantity": None, "pricePerUnit": 4},
        ]
        assert current_price(gapped, 10) == Decimal(4)

    def test_demand_beyond_bounded_brackets(self):
        bounded = [
            {"minQuantity": 1, "maxQuantity": 9, "pricePerUnit": 10},
            {"minQuantity": 10, "maxQuantity": 19, "pricePerUnit": 9},
        ]
        assert current_price(bounded, 500) == Decimal(9)

    def test_unsorted_input_is_not_mutated(self):
        shuffled = [LADDER[2], LADDER[0], LADDER[1]]
        assert current_price(shuffled, 12) == Decimal(8)
        assert shuffled == [LADDER[2], LADDER[0], LADDER[1]]

    def test_same_min_quantity_cheapest_first(self):
        tied = [
            {"minQuantity": 1, "maxQuantity": None, "pricePerUnit": 7},
            {"minQuantity": 1, "maxQuantity": None, "pricePerUnit": 5},
        ]
        assert current_price(tied, 3) == Decimal(5)
        assert current_price(list(reversed(tied)), 3) == Decimal(5)

    def test_multiple_open_brackets_first_match_wins(self):
        brackets = [
            {"minQuantity": 10, "maxQuantity": None, "pricePerUnit": 8},
            {"minQuantity": 1, "maxQuantity": None, "pricePerUnit": 10},
        ]
        assert current_price(brackets, 20) == Decimal(10)

    def test_zero_max_quantity_is_open_ended(self):
        assert current_price([{"minQuantity": 1, "maxQuantity": 0, "pricePerUnit": 3}], 100) == Decimal(3)

    def test_malformed_fields_are_coerced(self):
        brackets = [
            {"minQuantity": "abc", "maxQuantity": "5", "pricePerUnit": "oops"},
            {"minQuantity": "6", "maxQuantity": None, "pricePerUnit": "2.5"},
        ]
        assert current_price(brackets, 3) == Decimal(0)
        assert current_price(brackets, 7) == Decimal("2.5")

    def test_missing_keys_do_not_raise(self):
        assert current_price([{}], 5) == Decimal(0)
        assert current_price([{"pricePerUnit": 4}], 5) == Decimal(4)

    def test_negative_price_is_clamped(self):
        assert current_price([{"minQuantity": 1, "pricePerUnit": -5}], 2) == Decimal(0)

    def test_numeric_string_demand(self):
        assert current_price(LADDER, "12") == Decimal(8)

    def test_orm_and_model_brackets(self):
        rows = [
            SimpleNamespace(min_quantity=1, max_quantity=9, price_per_unit=Decimal("10.00")),
            SimpleNamespace(min_quantity=10, max_quantity=None, price_per_unit=Decimal("7.50")),
        ]
        models = [PriceBracket.model_validate(r) for r in rows]
        assert current_price(rows, 15) == Decimal("7.50")
        assert current_price(models, 15) == Decimal("7.50")

    def test_repeated_calls_are_identical(self):
        first = [current_price(LADDER, d) for d in range(0, 60)]
        second = [current_price(LADDER, d) for d in range(0, 60)]
        assert first == second

    def test_every_demand_maps_to_a_bracket_price(self):
        prices = {Decimal(b["pricePerUnit"]) for b in LADDER}
        for demand in range(1, 200):
            assert current_price(LADDER, demand) in prices


class TestNextBracket:
    def test_ladder(self):
        assert next_bracket(LADDER, 5) == {"minQuantity": 10, "maxQuantity": 49, "pricePerUnit": 8}
        assert next_bracket(LADDER, 10) == {"minQuantity": 50, "maxQuantity": None, "pricePerUnit": 5}
        assert next_bracket(LADDER, 50) is None

    def test_zero_demand_points_at_entry_tier(self):
        assert next_bracket(LADDER, 0) is LADDER[0]

    def test_empty(self):
        assert next_bracket([], 3) is None
        assert next_bracket(None, 3) is None

    def test_returns_input_object(self):
        shuffled = [LADDER[2], LADDER[1], LADDER[0]]
        assert next_bracket(shuffled, 20) is LADDER[2]


class TestFloorPrice:
    def test_ladder(self):
        assert floor_price(LADDER) == Decimal(5)

    def test_empty(self):
        assert floor_price([]) == 0
        assert floor_price(None) == 0

    def test_not_assumed_monotonic(self):
        brackets = [
            {"minQuantity": 50, "maxQuantity": None, "pricePerUnit": 12},
            {"minQuantity": 1, "maxQuantity": 9, "pricePerUnit": 10},
            {"minQuantity": 10, "maxQuantity": 49, "pricePerUnit": 3},
        ]
        assert floor_price(brackets) == Decimal(3)
        assert floor_price(list(reversed(brackets))) == Decimal(3)


class TestQuote:
    def test_quote_bundles_answers(self):
        quote = PricingEngine.quote(LADDER, 12)
        assert quote.current_price == Decimal(8)
        assert quote.next_bracket is LADDER[2]
        assert quote.next_price == Decimal(5)
        assert quote.next_min_quantity == Decimal(50)
        assert quote.units_to_next == Decimal(38)
        assert quote.floor_price == Decimal(5)
        assert quote.demand == Decimal(12)

    def test_quote_at_top_tier(self):
        quote = PricingEngine.quote(LADDER, 75)
        assert quote.next_bracket is None
        assert quote.next_price is None
        assert quote.units_to_next is None

    def test_quote_without_brackets(self):
        quote = PricingEngine.quote([], 3)
        assert quote.current_price == 0
        assert quote.floor_price == 0
        assert quote.next_bracket is None


class TestHelpers:
    @pytest.mark.parametrize(
        "value, expected",
        [(5, Decimal(5)), ("2.50", Decimal("2.50")), (None, Decimal(0)), ("x", Decimal(0)),
         (float("nan"), Decimal(0)), (float("inf"), Decimal(0)), (True, Decimal(0))],
    )
    def test_safe_number(self, value, expected):
        assert safe_number(value) == expected

    def test_safe_to_fixed(self):
        assert safe_to_fixed(Decimal("8")) == "8.00"
        assert safe_to_fixed("2.005") == "2.01"
        assert safe_to_fixed("abc") == "0.00"
        assert safe_to_fixed(7, decimals=0) == "7"

    def test_safe_to_fixed_huge_values(self):
        # Yli 28 merkitsevää numeroa ei saa kaataa muotoilua
        assert safe_to_fixed(Decimal("1e30")) == "1" + "0" * 30 + ".00"
        assert safe_to_fixed(Decimal("123456789012345678901234567.891")) == "123456789012345678901234567.89"
        assert safe_to_fixed(Decimal("1e999")) == "0.00"
        assert safe_to_fixed("-1e40") == "0.00"

    def test_sort_brackets(self):
        assert sort_brackets([LADDER[2], LADDER[0], LADDER[1]]) == LADDER
        assert sort_brackets(None) == []
