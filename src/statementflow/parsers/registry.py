"""Parser lookup by bank code and automatic format detection."""

from typing import Optional

from statementflow.domain.errors import ParseError, ValidationError, unsupported_bank
from statementflow.logger import get_logger
from statementflow.parsers.base import BankParser, ParserInfo
from statementflow.parsers.bb_ofx import BbOfxParser
from statementflow.parsers.c6_account import C6AccountCsvParser
from statementflow.parsers.c6_card import C6CardCsvParser
from statementflow.parsers.generic_csv import GenericCsvParser
from statementflow.parsers.inter_ofx import InterOfxParser
from statementflow.parsers.nubank import NubankCsvParser
from statementflow.parsers.ofx import OfxParser

logger = get_logger(__name__)

AUTO = "AUTO"

# Detection order: bank-specific signatures first, generic formats last.
PARSERS: tuple[BankParser, ...] = (
    C6CardCsvParser(),
    C6AccountCsvParser(),
    NubankCsvParser(),
    BbOfxParser(),
    InterOfxParser(),
    OfxParser(),
    GenericCsvParser(),
)

_BY_CODE = {parser.info.bank_code: parser for parser in PARSERS}


def list_parsers() -> list[ParserInfo]:
    """Return the description of every registered parser."""
    return [parser.info for parser in PARSERS]


def get_parser(bank_code: str) -> BankParser:
    """Look up a parser by bank code.

    Raises:
        ValidationError: If no parser is registered under the code
    """
    parser = _BY_CODE.get(bank_code.upper())
    if parser is None:
        raise ValidationError(unsupported_bank(bank_code))
    return parser


def detect_parser(filename: str, content: str) -> BankParser:
    """Pick the first parser whose signature matches the file.

    Raises:
        ParseError: If no parser recognizes the file
    """
    for parser in PARSERS:
        if parser.supports(filename, content):
            logger.info("Detected statement format %s for %s", parser.info.bank_code, filename)
            return parser
    raise ParseError(
        f"Could not detect the format of '{filename}'. Choose the bank explicitly."
    )


def resolve_parser(bank_code: Optional[str], filename: str, content: str) -> BankParser:
    """Return the parser for an explicit bank code, or detect it for ``AUTO``."""
    if not bank_code or bank_code.upper() == AUTO:
        return detect_parser(filename, content)
    return get_parser(bank_code)
