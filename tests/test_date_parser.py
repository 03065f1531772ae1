"""Tests for statement date parsing."""

import pytest
from datetime import date

from statementflow.utils.date_parser import parse_ofx_date, parse_statement_date, shift_months


def test_parse_day_first_slash():
    """Test parsing DD/MM/YYYY."""
    assert parse_statement_date("12/01/2024") == date(2024, 1, 12)


def test_parse_day_first_dash():
    """Test parsing DD-MM-YYYY."""
    assert parse_statement_date("12-01-2024") == date(2024, 1, 12)


def test_parse_iso():
    """Test parsing YYYY-MM-DD."""
    assert parse_statement_date("2024-01-12") == date(2024, 1, 12)


def test_parse_strips_whitespace():
    """Test surrounding whitespace is ignored."""
    assert parse_statement_date("  05/02/2024 ") == date(2024, 2, 5)


@pytest.mark.parametrize("raw", ["12/01/24", "2024/13/01", "31/02/2024", "yesterday", ""])
def test_parse_invalid(raw):
    """Test that ambiguous or impossible dates raise ValueError."""
    with pytest.raises(ValueError):
        parse_statement_date(raw)


def test_parse_ofx_date_short():
    """Test parsing an 8-digit OFX date."""
    assert parse_ofx_date("20240112") == date(2024, 1, 12)


def test_parse_ofx_date_with_time_and_zone():
    """Test that time and timezone suffixes are ignored."""
    assert parse_ofx_date("20240112093000[-3:BRT]") == date(2024, 1, 12)
    assert parse_ofx_date("20240112093000.000") == date(2024, 1, 12)


@pytest.mark.parametrize("raw", ["2024", "2024XX12", "20241340"])
def test_parse_ofx_date_invalid(raw):
    """Test that malformed OFX dates raise ValueError."""
    with pytest.raises(ValueError):
        parse_ofx_date(raw)


def test_shift_months_clamps_to_month_end():
    """Test moving a date forward keeps it inside the target month."""
    assert shift_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert shift_months(date(2023, 11, 15), 2) == date(2024, 1, 15)
