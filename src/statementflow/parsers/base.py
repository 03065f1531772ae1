"""Base class shared by all statement parsers."""

import csv
import io
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Union

from statementflow.domain.entities import ParsedTransaction
from statementflow.domain.errors import LineSkipped, ParseError, no_transactions_found
from statementflow.logger import get_logger

logger = get_logger(__name__)

RawContent = Union[bytes, str]


@dataclass(frozen=True)
class ParserInfo:
    """Public description of a parser."""

    bank_code: str
    bank_name: str
    file_format: str
    description: str


@dataclass
class ParseReport:
    """Transactions recovered from a file plus the lines that were skipped."""

    transactions: list[ParsedTransaction] = field(default_factory=list)
    skipped_lines: list[LineSkipped] = field(default_factory=list)


def decode_content(raw: RawContent) -> str:
    """Decode statement bytes, falling back to Latin-1 for legacy bank exports."""
    if isinstance(raw, str):
        return raw
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def read_csv_rows(content: str, delimiter: str) -> list[tuple[int, list[str]]]:
    """Split CSV text into (line number, stripped cells), dropping blank rows."""
    rows = []
    reader = csv.reader(io.StringIO(content), delimiter=delimiter)
    for row in reader:
        cells = [cell.strip() for cell in row]
        if any(cells):
            rows.append((reader.line_num, cells))
    return rows


class BankParser(ABC):
    """Turns the bytes of one statement file into parsed transactions.

    Subclasses enumerate records and parse them one at a time. A record that
    cannot be parsed raises LineSkipped and is left out; a record that parses
    to ``None`` (zero amounts, marker rows) is ignored silently. A file that
    yields no transaction at all raises ParseError.
    """

    info: ParserInfo

    def supports(self, filename: str, content: str) -> bool:
        """Return True if the file looks like this parser's format."""
        return False

    @abstractmethod
    def _records(self, content: str) -> Iterator[tuple[int, Any]]:
        """Yield (line number, record) pairs for every candidate transaction."""

    @abstractmethod
    def _parse_record(self, line_number: int, record: Any) -> Optional[ParsedTransaction]:
        """Parse one record, raising LineSkipped when it is malformed."""

    def parse(self, raw: RawContent) -> list[ParsedTransaction]:
        """Parse a statement file.

        Raises:
            ParseError: If the file holds no recoverable transaction
        """
        return self.parse_report(raw).transactions

    def parse_report(self, raw: RawContent) -> ParseReport:
        """Parse a statement file, also returning the skipped lines."""
        content = decode_content(raw)
        if not content.strip():
            raise ParseError(f"Empty {self.info.file_format.upper()} file")

        report = ParseReport()
        for line_number, record in self._records(content):
            try:
                transaction = self._parse_record(line_number, record)
            except LineSkipped as skipped:
                if skipped.line_number is None:
                    skipped = LineSkipped(skipped.reason, line_number)
                logger.warning("[%s] Skipping %s", self.info.bank_code, skipped)
                report.skipped_lines.append(skipped)
                continue
            if transaction is not None:
                report.transactions.append(transaction)

        if not report.transactions:
            raise ParseError(no_transactions_found(self.info.file_format.upper()))

        logger.info(
            "[%s] Parsed %d transactions (%d lines skipped)",
            self.info.bank_code,
            len(report.transactions),
            len(report.skipped_lines),
        )
        return report
