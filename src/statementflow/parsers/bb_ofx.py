"""Banco do Brasil OFX statement parser."""

import re
from typing import Optional

from statementflow.domain.entities import ParsedTransaction
from statementflow.parsers.base import ParserInfo
from statementflow.parsers.ofx import NO_DESCRIPTION, OfxParser, extract_field

BALANCE_MARKERS = ("saldo anterior", "saldo do dia", "saldo parcial")

MIN_YEAR = 1900
MAX_YEAR = 2100

# Fund and unit tickers such as MXRF11 or TAEE11
_TICKER = re.compile(r"([A-Z]{4}\d{2})")

# First match wins.
_CATEGORY_RULES = (
    (re.compile(r"rende f[aá]cil"), "BB_RENDE_FACIL"),
    (re.compile(r"proventos|rendimento"), "INCOME_DISTRIBUTION"),
    (re.compile(r"\bpix\b"), "PIX"),
    (re.compile(r"\b(?:ted|doc)\b"), "TRANSFER"),
    (re.compile(r"d[eé]bito autom[aá]tico"), "AUTOMATIC_DEBIT"),
    (re.compile(r"tarifa|taxa"), "FEE"),
)


def is_balance_row(name: Optional[str]) -> bool:
    """Return True for the balance lines BB mixes into the transaction list."""
    if not name:
        return False
    lowered = name.lower()
    return any(marker in lowered for marker in BALANCE_MARKERS)


class BbOfxParser(OfxParser):
    """Parses Banco do Brasil checking account OFX exports.

    BB lists the opening and daily balances as transactions, sometimes with
    placeholder dates such as ``00021130``; those rows are dropped.
    """

    info = ParserInfo(
        bank_code="BB_OFX",
        bank_name="Banco do Brasil",
        file_format="ofx",
        description="Banco do Brasil checking account statement (OFX)",
    )

    def supports(self, filename: str, content: str) -> bool:
        if not filename.lower().endswith(".ofx"):
            return False
        lowered = content.lower()
        return "banco do brasil" in lowered or ("<org>" in lowered and "brasil" in lowered)

    def _parse_record(self, line_number: int, block: str) -> Optional[ParsedTransaction]:
        if is_balance_row(extract_field(block, "NAME")):
            return None
        transaction = super()._parse_record(line_number, block)
        if transaction is None or not MIN_YEAR <= transaction.date.year <= MAX_YEAR:
            return None
        return transaction

    def _describe(self, name: Optional[str], memo: Optional[str]) -> str:
        parts = []
        if name:
            parts.append(name)
        if memo and (not name or memo.lower() not in name.lower()):
            parts.append(memo)
        return " - ".join(parts) or NO_DESCRIPTION

    def _extra(
        self, block: str, trn_type: str, name: Optional[str], memo: Optional[str]
    ) -> dict[str, str]:
        extra = super()._extra(block, trn_type, name, memo)
        check_number = extract_field(block, "CHECKNUM")
        if check_number:
            extra["check_number"] = check_number
        if memo:
            extra["memo"] = memo
            match = _TICKER.search(memo)
            if match:
                extra["ticker"] = match.group(1)

        text = f"{name or ''} {memo or ''}".lower()
        for pattern, category in _CATEGORY_RULES:
            if pattern.search(text):
                extra["bank_category"] = category
                break
        return extra
