"""Tests for statement amount parsing."""

import pytest
from decimal import Decimal

from statementflow.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("123.45", Decimal("123.45")),
        ("123,45", Decimal("123.45")),
        ("-150.50", Decimal("-150.50")),
        ("R$ 1.234,56", Decimal("1234.56")),
        ("-R$ 150,50", Decimal("-150.50")),
        ("$1,234.56", Decimal("1234.56")),
        ("1.234.567,89", Decimal("1234567.89")),
        ("(45.00)", Decimal("-45.00")),
        ("150,50-", Decimal("-150.50")),
        ("+10,00", Decimal("10.00")),
        ("0", Decimal("0")),
    ],
)
def test_parse_amount(raw, expected):
    """Test the formats banks use in CSV exports."""
    assert parse_amount(raw) == expected


def test_rightmost_separator_is_decimal():
    """Test that the last of ',' and '.' decides the decimal separator."""
    assert parse_amount("1,000.5") == Decimal("1000.5")
    assert parse_amount("1.000,5") == Decimal("1000.5")


@pytest.mark.parametrize("raw", ["", "   ", "abc", "12a", "1.2.3-4"])
def test_parse_amount_invalid(raw):
    """Test that unparseable amounts raise ValueError."""
    with pytest.raises(ValueError):
        parse_amount(raw)
