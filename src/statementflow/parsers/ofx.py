"""OFX/QFX statement parser.

Bank OFX exports are frequently SGML rather than XML: closing tags are
optional and a few banks emit ``TAG:value`` pairs instead. Fields are
therefore pulled out with tolerant regular expressions rather than an XML
parser.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Iterator, Optional

from statementflow.domain.entities import Direction, ParsedTransaction
from statementflow.domain.errors import LineSkipped, ParseError
from statementflow.parsers.base import BankParser, ParserInfo
from statementflow.utils.date_parser import parse_ofx_date

NO_DESCRIPTION = "No description"

TRANSACTION_BLOCK = re.compile(
    r"<STMTTRN>(.*?)(?=</STMTTRN>|<STMTTRN>|</BANKTRANLIST>|\Z)",
    re.IGNORECASE | re.DOTALL,
)

INCOME_TYPES = {"CREDIT", "DEP", "INT", "DIV"}
EXPENSE_TYPES = {"DEBIT", "POS", "XFER", "CHECK", "PAYMENT", "ATM", "FEE", "SRVCHG"}


def extract_field(block: str, tag: str) -> Optional[str]:
    """Read one field from a transaction block.

    Accepts ``<TAG>value</TAG>``, an unclosed ``<TAG>value`` and ``TAG:value``.
    """
    # Only the closed form may span lines; the others stop at the line end.
    patterns = (
        (rf"<{tag}>(.*?)</{tag}>", re.IGNORECASE | re.DOTALL),
        (rf"<{tag}>([^<\r\n]*)", re.IGNORECASE),
        (rf"^[ \t]*{tag}:([^\r\n]*)", re.IGNORECASE | re.MULTILINE),
    )
    for pattern, flags in patterns:
        match = re.search(pattern, block, flags)
        if match:
            value = match.group(1).strip()
            if value:
                return value
    return None


def parse_ofx_amount(value: str) -> Decimal:
    """Parse TRNAMT, which is a plain decimal with an optional comma separator."""
    try:
        return Decimal(value.replace(",", "."))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value}")


def build_description(name: Optional[str], memo: Optional[str]) -> str:
    if name and memo and name != memo:
        return f"{name} - {memo}"
    return name or memo or NO_DESCRIPTION


class OfxParser(BankParser):
    """Parses OFX and QFX statements from any bank."""

    info = ParserInfo(
        bank_code="GENERIC_OFX",
        bank_name="Generic OFX",
        file_format="ofx",
        description="OFX/QFX statements exported by most banks",
    )

    def supports(self, filename: str, content: str) -> bool:
        if filename.lower().endswith((".ofx", ".qfx")):
            return True
        return "<OFX>" in content.upper()

    def _records(self, content: str) -> Iterator[tuple[int, str]]:
        found = False
        for match in TRANSACTION_BLOCK.finditer(content):
            found = True
            yield content.count("\n", 0, match.start()) + 1, match.group(1)
        if not found:
            raise ParseError("No STMTTRN blocks found in OFX file")

    def _parse_record(self, line_number: int, block: str) -> Optional[ParsedTransaction]:
        posted = extract_field(block, "DTPOSTED")
        if not posted:
            raise LineSkipped("Missing DTPOSTED", line_number)
        amount_str = extract_field(block, "TRNAMT")
        if not amount_str:
            raise LineSkipped("Missing TRNAMT", line_number)

        try:
            txn_date = parse_ofx_date(posted)
            amount = parse_ofx_amount(amount_str)
        except ValueError as e:
            raise LineSkipped(str(e), line_number)
        if amount == 0:
            return None

        trn_type = (extract_field(block, "TRNTYPE") or "").upper()
        if trn_type in INCOME_TYPES:
            direction = Direction.INCOME
        elif trn_type in EXPENSE_TYPES:
            direction = Direction.EXPENSE
        else:
            direction = Direction.EXPENSE if amount < 0 else Direction.INCOME

        name = extract_field(block, "NAME")
        memo = extract_field(block, "MEMO")
        return ParsedTransaction(
            date=txn_date,
            description=self._describe(name, memo),
            amount=abs(amount),
            direction=direction,
            external_id=extract_field(block, "FITID"),
            extra=self._extra(block, trn_type, name, memo),
        )

    def _describe(self, name: Optional[str], memo: Optional[str]) -> str:
        return build_description(name, memo)

    def _extra(
        self, block: str, trn_type: str, name: Optional[str], memo: Optional[str]
    ) -> dict[str, str]:
        """Bank-specific metadata stored alongside the transaction."""
        extra = {}
        if trn_type:
            extra["trntype"] = trn_type
        return extra
