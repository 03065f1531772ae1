"""Date parsing utilities for bank statement fields."""

import re
from datetime import date

from dateutil.relativedelta import relativedelta


_NUMERIC_DATE = re.compile(r"^(\d{1,4})[/-](\d{1,2})[/-](\d{1,4})$")
_OFX_DATE = re.compile(r"^(\d{4})(\d{2})(\d{2})")


def parse_statement_date(date_str: str) -> date:
    """Parse a CSV statement date.

    Supports ``DD/MM/YYYY``, ``DD-MM-YYYY`` and ``YYYY-MM-DD``. The layout is
    decided by which outer group exceeds 31: a leading group above 31 is a
    year, otherwise the trailing group is.

    Args:
        date_str: Date string

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip()
    match = _NUMERIC_DATE.match(date_str)
    if match is None:
        raise ValueError(f"Could not parse date '{date_str}'")

    first, middle, last = (int(group) for group in match.groups())
    if first > 31:
        year, month, day = first, middle, last
    elif last > 31:
        year, month, day = last, middle, first
    else:
        raise ValueError(f"Could not parse date '{date_str}': no year component")

    try:
        return date(year, month, day)
    except ValueError as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_ofx_date(date_str: str) -> date:
    """Parse an OFX ``DTPOSTED`` value (``YYYYMMDD[hhmmss[.xxx]][tz]``).

    Raises:
        ValueError: If the value has no valid 8-digit date prefix
    """
    cleaned = re.sub(r"\[.*\]", "", date_str).strip()
    match = _OFX_DATE.match(cleaned)
    if match is None:
        raise ValueError(f"Invalid OFX date '{date_str}'")
    year, month, day = (int(group) for group in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise ValueError(f"Invalid OFX date '{date_str}': {e}")


def shift_months(value: date, months: int) -> date:
    """Move a date forward by whole months, clamping to the month's end."""
    return value + relativedelta(months=months)
