"""Statement file parsers."""

from statementflow.parsers.base import BankParser, ParseReport, ParserInfo
from statementflow.parsers.bb_ofx import BbOfxParser
from statementflow.parsers.c6_account import C6AccountCsvParser
from statementflow.parsers.c6_card import C6CardCsvParser
from statementflow.parsers.generic_csv import GenericCsvParser
from statementflow.parsers.inter_ofx import InterOfxParser
from statementflow.parsers.nubank import NubankCsvParser
from statementflow.parsers.ofx import OfxParser
from statementflow.parsers.registry import (
    AUTO,
    detect_parser,
    get_parser,
    list_parsers,
    resolve_parser,
)

__all__ = [
    "AUTO",
    "BankParser",
    "BbOfxParser",
    "C6AccountCsvParser",
    "C6CardCsvParser",
    "GenericCsvParser",
    "InterOfxParser",
    "NubankCsvParser",
    "OfxParser",
    "ParseReport",
    "ParserInfo",
    "detect_parser",
    "get_parser",
    "list_parsers",
    "resolve_parser",
]
