"""Transaction fingerprinting for deduplication.

The hash is deliberately stricter than categorization matching: it covers
the raw description, so two lines that clean to the same text but differ in
any raw character are distinct transactions.
"""

import hashlib
from datetime import date
from decimal import Decimal

_CENTS = Decimal("0.01")


def format_amount(amount: Decimal) -> str:
    """Render a signed amount with at least two decimal places and no rounding.

    Trailing zeros beyond the cents are dropped, so 150.5 and 150.500 render
    the same while 10.004 and 10.00 stay distinct.
    """
    value = Decimal(amount).normalize()
    if value.as_tuple().exponent > -2:
        value = value.quantize(_CENTS)
    return format(value, "f")


def transaction_hash(account_id: int, amount: Decimal, txn_date: date, description_raw: str) -> str:
    """Generate the deduplication key for a transaction.

    Args:
        account_id: Owning account ID
        amount: Signed amount (negative for expenses)
        txn_date: Posting date
        description_raw: Description exactly as parsed

    Returns:
        SHA-256 hex digest of ``account|amount|YYYY-MM-DD|description``
    """
    fingerprint = f"{account_id}|{format_amount(amount)}|{txn_date.isoformat()}|{description_raw}"
    return hashlib.sha256(fingerprint.encode("utf-8")).hexdigest()
