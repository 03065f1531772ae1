"""Generic bank CSV parser with column layout auto-detection."""

from decimal import Decimal
from typing import Iterator, Optional

from statementflow.domain.entities import Direction, ParsedTransaction
from statementflow.domain.errors import LineSkipped
from statementflow.parsers.base import BankParser, ParserInfo, read_csv_rows
from statementflow.utils.amount_parser import parse_amount
from statementflow.utils.date_parser import parse_statement_date

NO_DESCRIPTION = "No description"

HEADER_PREFIXES = ("date", "data", "descri")

EXPENSE_TYPES = {"D", "DEBIT", "DEBITO", "DÉBITO", "EXPENSE", "SAIDA", "SAÍDA"}
INCOME_TYPES = {"C", "CREDIT", "CREDITO", "CRÉDITO", "INCOME", "ENTRADA"}


def detect_delimiter(content: str) -> str:
    """Pick the delimiter from the first non-blank line."""
    first_line = next((line for line in content.splitlines() if line.strip()), "")
    for candidate in (";", "\t"):
        if candidate in first_line:
            return candidate
    return ","


def is_header_row(cells: list[str]) -> bool:
    """A header has no date in its first cell and a date/description label."""
    try:
        parse_statement_date(cells[0])
        return False
    except ValueError:
        pass
    return any(cell.lower().startswith(HEADER_PREFIXES) for cell in cells)


def direction_for_type(type_str: str) -> Direction:
    """Map a free-text type column to a direction.

    Known tokens win; otherwise a type starting with D (debit, despesa) or
    mentioning "expense" is an expense and anything else is income.
    """
    token = type_str.strip().upper()
    if token in EXPENSE_TYPES:
        return Direction.EXPENSE
    if token in INCOME_TYPES:
        return Direction.INCOME
    if token.startswith("D") or "EXPENSE" in token:
        return Direction.EXPENSE
    return Direction.INCOME


def _is_amount_cell(value: str) -> bool:
    if not value:
        return True
    try:
        parse_amount(value)
    except ValueError:
        return False
    return True


def _optional_amount(value: str, line_number: int) -> Decimal:
    if not value:
        return Decimal("0")
    try:
        return parse_amount(value)
    except ValueError as e:
        raise LineSkipped(str(e), line_number)


class GenericCsvParser(BankParser):
    """Parses CSV exports in one of three column layouts.

    Layouts, chosen by column count:
    - date, description, signed amount
    - date, description, debit, credit
    - date, description, free-text type (D/C, Despesa/Receita, ...), amount

    A four-column row is read as debit/credit when its third cell is empty
    or numeric, and as typed otherwise.
    """

    info = ParserInfo(
        bank_code="GENERIC_CSV",
        bank_name="Generic CSV",
        file_format="csv",
        description="Any bank CSV with date, description and amount columns",
    )

    def supports(self, filename: str, content: str) -> bool:
        return filename.lower().endswith(".csv")

    def _records(self, content: str) -> Iterator[tuple[int, list[str]]]:
        rows = read_csv_rows(content, detect_delimiter(content))
        if rows and is_header_row(rows[0][1]):
            rows = rows[1:]
        yield from rows

    def _parse_record(self, line_number: int, cells: list[str]) -> Optional[ParsedTransaction]:
        if len(cells) == 3:
            return self._parse_signed(line_number, cells)
        if len(cells) == 4:
            if _is_amount_cell(cells[2]):
                return self._parse_debit_credit(line_number, cells)
            return self._parse_typed(line_number, cells)
        raise LineSkipped(f"Unexpected column count {len(cells)}", line_number)

    def _parse_date(self, line_number: int, value: str):
        try:
            return parse_statement_date(value)
        except ValueError as e:
            raise LineSkipped(str(e), line_number)

    def _parse_signed(self, line_number: int, cells: list[str]) -> Optional[ParsedTransaction]:
        date_str, description, amount_str = cells
        txn_date = self._parse_date(line_number, date_str)
        try:
            amount = parse_amount(amount_str)
        except ValueError as e:
            raise LineSkipped(str(e), line_number)
        if amount == 0:
            return None
        return ParsedTransaction(
            date=txn_date,
            description=description or NO_DESCRIPTION,
            amount=abs(amount),
            direction=Direction.EXPENSE if amount < 0 else Direction.INCOME,
        )

    def _parse_debit_credit(self, line_number: int, cells: list[str]) -> Optional[ParsedTransaction]:
        date_str, description, debit_str, credit_str = cells
        txn_date = self._parse_date(line_number, date_str)
        debit = _optional_amount(debit_str, line_number)
        credit = _optional_amount(credit_str, line_number)

        if debit != 0:
            amount, direction = abs(debit), Direction.EXPENSE
        elif credit != 0:
            amount, direction = abs(credit), Direction.INCOME
        else:
            return None
        return ParsedTransaction(
            date=txn_date,
            description=description or NO_DESCRIPTION,
            amount=amount,
            direction=direction,
        )

    def _parse_typed(self, line_number: int, cells: list[str]) -> Optional[ParsedTransaction]:
        date_str, description, type_str, amount_str = cells
        txn_date = self._parse_date(line_number, date_str)
        try:
            amount = parse_amount(amount_str)
        except ValueError as e:
            raise LineSkipped(str(e), line_number)
        if amount == 0:
            return None
        return ParsedTransaction(
            date=txn_date,
            description=description or NO_DESCRIPTION,
            amount=abs(amount),
            direction=direction_for_type(type_str),
            extra={"type": type_str},
        )
