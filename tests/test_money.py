"""Unit tests for major/minor unit conversion."""

from decimal import Decimal

import pytest

from donutsme.common.money import (
    format_minor_units,
    format_total,
    parse_display_value,
    parse_major_amount,
    parse_payout_amount,
    to_minor_units,
)


@pytest.mark.parametrize(
    "amount, expected",
    [
        ("12.50", 1250),
        (10, 1000),
        ("0.01", 1),
        ("1.005", 101),
        ("1.004", 100),
        (19.99, 1999),
    ],
)
def test_to_minor_units_rounds_half_up(amount, expected):
    assert to_minor_units(parse_major_amount(amount)) == expected


@pytest.mark.parametrize("amount", [None, "", "abc", "NaN", "Infinity", True])
def test_parse_major_amount_rejects_non_numbers(amount):
    assert parse_major_amount(amount) is None


def test_format_minor_units_accepts_stored_strings():
    assert format_minor_units("2500") == "25.00"
    assert format_minor_units(5) == "0.05"


def test_display_values_default_to_zero():
    assert parse_display_value(None) == Decimal(0)
    assert parse_display_value("garbage") == Decimal(0)
    assert format_total(parse_display_value("1.2") + parse_display_value("3.456")) == "4.66"


def test_payout_amount_overflow_is_invalid():
    """Amounts past the decimal context's precision or exponent range are rejected, not raised."""

    assert parse_payout_amount("12.50") == 1250
    assert parse_payout_amount("1e30") is None
    assert parse_payout_amount("123456789012345678901234567890") is None
    assert parse_payout_amount("1e999999") is None
    assert parse_payout_amount("0.004") is None
