"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse a statement amount string into a signed Decimal.

    Handles various formats:
    - "123.45", "123,45"
    - "R$ 1.234,56", "$1,234.56"
    - "-150.50", "-R$ 150,50"
    - "(123.45)" (negative in parentheses)
    - "150.50-" (trailing minus)

    The decimal separator is whichever of ``,`` and ``.`` occurs last in the
    cleaned string; every other occurrence of either is a thousands separator.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount, negative for debits

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and whitespace
    amount_str = re.sub(r"R\$|[$€£¥\s]", "", amount_str)

    if amount_str.startswith("-"):
        is_negative = True
        amount_str = amount_str[1:]
    elif amount_str.endswith("-"):
        is_negative = True
        amount_str = amount_str[:-1]
    elif amount_str.startswith("+"):
        amount_str = amount_str[1:]

    last_comma = amount_str.rfind(",")
    last_dot = amount_str.rfind(".")
    if last_comma > last_dot:
        amount_str = amount_str.replace(".", "").replace(",", ".")
    elif last_dot > last_comma:
        amount_str = amount_str.replace(",", "")

    if not re.fullmatch(r"\d+(\.\d+)?|\.\d+", amount_str):
        raise ValueError(f"Could not parse amount '{amount_str}'")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    return -amount if is_negative else amount
