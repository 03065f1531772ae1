"""Banco Inter OFX statement parser."""

import re
from typing import Optional

from statementflow.parsers.base import ParserInfo
from statementflow.parsers.ofx import OfxParser, extract_field

# Inter's bank number is 077; its exports name the institution in ORG.
_INTER_SIGNATURE = re.compile(
    r"banco inter|<bankid>\s*0*77\b|<org>[^<\r\n]*\binter\b", re.IGNORECASE
)


class InterOfxParser(OfxParser):
    """Parses Banco Inter checking account and card OFX exports."""

    info = ParserInfo(
        bank_code="INTER_OFX",
        bank_name="Banco Inter",
        file_format="ofx",
        description="Banco Inter checking account or card statement (OFX)",
    )

    def supports(self, filename: str, content: str) -> bool:
        if not filename.lower().endswith(".ofx"):
            return False
        return _INTER_SIGNATURE.search(content) is not None

    def _extra(
        self, block: str, trn_type: str, name: Optional[str], memo: Optional[str]
    ) -> dict[str, str]:
        extra = super()._extra(block, trn_type, name, memo)
        check_number = extract_field(block, "CHECKNUM")
        if check_number:
            extra["check_number"] = check_number
        if memo:
            extra["memo"] = memo
        return extra
