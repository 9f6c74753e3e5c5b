"""
Tests: priceable entities and active price context resolution.
"""

import logging
from decimal import Decimal
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from groupbuy import config
from groupbuy.catalog import (
    PriceBracket,
    SimpleProduct,
    Variant,
    VariantedProduct,
    active_variants,
    can_add_to_cart,
    default_variant,
    filter_active_products,
    find_variant,
    is_product_active,
    is_variant_active,
    product_status,
    quote_with_alert,
    resolve_active_price_context,
    to_priceable,
)


def bracket(lo, hi, price):
    return PriceBracket(min_quantity=lo, max_quantity=hi, price_per_unit=Decimal(price))


@pytest.fixture
def mug():
    return SimpleProduct(
        id=1,
        name="Mug",
        booking_amount=Decimal("20"),
        images=["mug.png"],
        price_ranges=[bracket(1, 9, "120"), bracket(10, None, "99")],
        total_ordered_quantity=12,
    )


@pytest.fixture
def jacket():
    return VariantedProduct(
        id=2,
        name="Jacket",
        variants=[
            Variant(
                id=10,
                name="Black",
                booking_amount=Decimal("150"),
                images=["black.png"],
                is_active=False,
                total_ordered_quantity=3,
                price_ranges=[bracket(1, None, "900")],
            ),
            Variant(
                id=11,
                name="Navy",
                booking_amount=Decimal("140"),
                images=["navy.png"],
                total_ordered_quantity=25,
                price_ranges=[bracket(1, 19, "950"), bracket(20, None, "880")],
            ),
        ],
    )


class TestResolveActivePriceContext:
    def test_simple_product(self, mug):
        ctx = resolve_active_price_context(mug)
        assert ctx.brackets == mug.price_ranges
        assert ctx.demand == 12
        assert ctx.booking_amount == Decimal("20")
        assert ctx.images == ["mug.png"]
        assert ctx.variant_id is None
        assert ctx.quote().current_price == Decimal("99")

    def test_unselected_variant_gives_no_pricing(self, jacket):
        ctx = resolve_active_price_context(jacket, policy=config.POLICY_NONE)
        assert ctx.brackets == []
        assert ctx.demand == 0
        assert ctx.booking_amount == 0
        assert not ctx.has_pricing
        quote = ctx.quote()
        assert quote.current_price == 0
        assert quote.next_bracket is None
        assert quote.floor_price == 0

    def test_first_active_policy_previews_active_variant(self, jacket):
        ctx = resolve_active_price_context(jacket, policy=config.POLICY_FIRST_ACTIVE)
        assert ctx.variant_id == 11
        assert ctx.demand == 25
        assert ctx.quote().current_price == Decimal("880")

    def test_selected_variant_wins_over_policy(self, jacket):
        black = find_variant(jacket, 10)
        ctx = resolve_active_price_context(jacket, black, policy=config.POLICY_FIRST_ACTIVE)
        assert ctx.variant_id == 10
        assert ctx.booking_amount == Decimal("150")
        assert ctx.images == ["black.png"]

    def test_default_policy_comes_from_config(self, jacket, monkeypatch):
        monkeypatch.setattr(config, "UNSELECTED_VARIANT_POLICY", config.POLICY_FIRST_ACTIVE)
        assert resolve_active_price_context(jacket).variant_id == 11
        monkeypatch.setattr(config, "UNSELECTED_VARIANT_POLICY", config.POLICY_NONE)
        assert resolve_active_price_context(jacket).variant_id is None


class TestActivity:
    def test_varianted_product_requires_variants(self):
        with pytest.raises(ValidationError):
            VariantedProduct(id=3, name="Empty", variants=[])

    def test_active_helpers(self, mug, jacket):
        assert [v.id for v in active_variants(jacket)] == [11]
        assert active_variants(mug) == []
        assert is_product_active(mug)
        assert is_product_active(jacket)

        jacket.variants[1].is_active = False
        assert not is_product_active(jacket)
        assert filter_active_products([mug, jacket]) == [mug]

    def test_missing_active_flag_counts_as_active(self):
        variant = Variant(id=1, name="Plain", is_active=None)
        assert is_variant_active(variant)

    def test_default_variant_falls_back_to_first(self, jacket):
        assert default_variant(jacket).id == 11
        jacket.variants[1].is_active = False
        assert default_variant(jacket).id == 10

    def test_can_add_to_cart(self, mug, jacket):
        assert can_add_to_cart(mug)
        assert not can_add_to_cart(jacket)
        assert not can_add_to_cart(jacket, find_variant(jacket, 10))
        assert can_add_to_cart(jacket, find_variant(jacket, 11))

        mug.is_active = False
        assert not can_add_to_cart(mug)

    def test_product_status(self, jacket):
        assert product_status(jacket) == {
            "is_active": True,
            "has_active_variants": True,
            "total_variants": 2,
            "active_variants": 1,
            "can_be_purchased": True,
        }


class TestToPriceable:
    def test_simple_row(self):
        row = SimpleNamespace(
            id=5,
            name="Cap",
            description=None,
            is_active=True,
            created_at=None,
            has_variants=False,
            booking_amount=Decimal("30.00"),
            images=None,
            price_ranges=[SimpleNamespace(min_quantity=1, max_quantity=None, price_per_unit=Decimal("199.00"))],
            variants=[],
        )
        product = to_priceable(row, product_demand={5: 7})
        assert isinstance(product, SimpleProduct)
        assert product.total_ordered_quantity == 7
        assert product.images == []
        assert product.price_ranges[0].price_per_unit == Decimal("199.00")

    def test_varianted_row(self):
        variant = SimpleNamespace(
            id=8,
            name="Red",
            booking_amount=Decimal("10"),
            images=["red.png"],
            is_active=True,
            price_ranges=[],
        )
        row = SimpleNamespace(
            id=6,
            name="Scarf",
            description="Wool",
            is_active=True,
            created_at=None,
            has_variants=True,
            variants=[variant],
        )
        product = to_priceable(row, variant_demand={8: 4})
        assert isinstance(product, VariantedProduct)
        assert product.variants[0].total_ordered_quantity == 4


class TestAlerts:
    def test_missing_brackets_are_logged(self, caplog):
        product = SimpleProduct(id=9, name="Poster", booking_amount=Decimal("5"))
        with caplog.at_level(logging.WARNING, logger="groupbuy.catalog"):
            quote = quote_with_alert(product, resolve_active_price_context(product))
        assert quote.current_price == 0
        assert "no price brackets" in caplog.text

    def test_unselected_variant_is_not_an_alert(self, jacket, caplog):
        with caplog.at_level(logging.WARNING, logger="groupbuy.catalog"):
            quote_with_alert(jacket, resolve_active_price_context(jacket, policy=config.POLICY_NONE))
        assert caplog.text == ""
