"""
Tests: price range validation at data entry.
"""

from decimal import Decimal

import pytest

from groupbuy.admin import validate_price_ranges, validate_product
from groupbuy.errors import ValidationFailed
from groupbuy.schemas import PriceRangeIn, ProductIn, VariantIn


def pr(lo, hi, price):
    return PriceRangeIn(min_quantity=lo, max_quantity=hi, price_per_unit=Decimal(price))


def test_well_formed_ladder_passes():
    validate_price_ranges([pr(10, 49, "8"), pr(1, 9, "10"), pr(50, None, "5")])


def test_gap_is_allowed():
    validate_price_ranges([pr(1, 5, "10"), pr(20, None, "4")])


@pytest.mark.parametrize(
    "ranges, message",
    [
        ([], "At least one price range"),
        ([pr(0, 5, "10")], "at least 1"),
        ([pr(5, 2, "10")], "must not be below"),
        ([pr(1, None, "0")], "must be positive"),
        ([pr(1, None, "10"), pr(5, None, "8")], "open-ended"),
        ([pr(1, 5, "10"), pr(1, 9, "8")], "Duplicate minimum quantity"),
        ([pr(1, 10, "10"), pr(5, None, "8")], "overlap"),
    ],
)
def test_malformed_ladders_are_rejected(ranges, message):
    with pytest.raises(ValidationFailed) as exc:
        validate_price_ranges(ranges)
    assert message in exc.value.detail


def test_varianted_product_needs_variants():
    with pytest.raises(ValidationFailed):
        validate_product(ProductIn(name="Tee", has_variants=True, variants=[]))


def test_simple_product_needs_booking_amount():
    with pytest.raises(ValidationFailed):
        validate_product(ProductIn(name="Cap", price_ranges=[pr(1, None, "10")]))


def test_variant_brackets_are_checked():
    payload = ProductIn(
        name="Tee",
        has_variants=True,
        variants=[VariantIn(name="S", booking_amount=Decimal("5"), price_ranges=[pr(3, 1, "10")])],
    )
    with pytest.raises(ValidationFailed) as exc:
        validate_product(payload)
    assert "variant S" in exc.value.detail


def test_amounts_must_fit_the_money_columns():
    with pytest.raises(ValidationFailed) as exc:
        validate_price_ranges([pr(1, None, "1e30")])
    assert "must not exceed" in exc.value.detail

    validate_price_ranges([pr(1, None, "99999999.99")])

    with pytest.raises(ValidationFailed):
        validate_product(
            ProductIn(name="Cap", booking_amount=Decimal("100000000"), price_ranges=[pr(1, None, "10")])
        )
    with pytest.raises(ValidationFailed):
        validate_product(ProductIn(
            name="Tee",
            has_variants=True,
            variants=[VariantIn(name="S", booking_amount=Decimal("1e12"), price_ranges=[pr(1, None, "10")])],
        ))
