"""Nubank CSV export parser."""

from typing import Iterator, Optional

from statementflow.domain.entities import Direction, ParsedTransaction
from statementflow.domain.errors import LineSkipped, ParseError
from statementflow.parsers.base import BankParser, ParserInfo, read_csv_rows
from statementflow.utils.amount_parser import parse_amount
from statementflow.utils.date_parser import parse_statement_date

NO_DESCRIPTION = "No description"

REQUIRED_COLUMNS = ("date", "title", "amount")


class NubankCsvParser(BankParser):
    """Parses Nubank ``date,category,title,amount`` exports.

    Columns are located by header name. Negative amounts are expenses.
    """

    info = ParserInfo(
        bank_code="NUBANK_CSV",
        bank_name="Nubank",
        file_format="csv",
        description="Nubank card statement or account export (CSV)",
    )

    def supports(self, filename: str, content: str) -> bool:
        if not filename.lower().endswith(".csv"):
            return False
        first_line = content.lstrip("﻿").split("\n", 1)[0].lower()
        return all(column in first_line for column in REQUIRED_COLUMNS)

    def _records(self, content: str) -> Iterator[tuple[int, dict[str, str]]]:
        rows = read_csv_rows(content, ",")
        if not rows:
            return
        header = [cell.lower() for cell in rows[0][1]]
        missing = [column for column in REQUIRED_COLUMNS if column not in header]
        if missing:
            raise ParseError(f"Missing required columns: {', '.join(missing)}")

        for line_number, cells in rows[1:]:
            yield line_number, dict(zip(header, cells))

    def _parse_record(self, line_number: int, row: dict[str, str]) -> Optional[ParsedTransaction]:
        date_str = row.get("date", "")
        amount_str = row.get("amount", "")
        if not date_str or not amount_str:
            raise LineSkipped("Missing date or amount", line_number)

        try:
            txn_date = parse_statement_date(date_str)
            amount = parse_amount(amount_str)
        except ValueError as e:
            raise LineSkipped(str(e), line_number)
        if amount == 0:
            return None

        extra = {}
        if row.get("category"):
            extra["bank_category"] = row["category"]
        return ParsedTransaction(
            date=txn_date,
            description=row.get("title") or NO_DESCRIPTION,
            amount=abs(amount),
            direction=Direction.EXPENSE if amount < 0 else Direction.INCOME,
            extra=extra,
        )
