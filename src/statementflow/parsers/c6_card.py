"""C6 Bank credit card statement parser (semicolon CSV)."""

import re
from typing import Iterator, Optional

from statementflow.domain.entities import Direction, ParsedTransaction
from statementflow.domain.errors import LineSkipped
from statementflow.parsers.base import BankParser, ParserInfo, read_csv_rows
from statementflow.utils.amount_parser import parse_amount
from statementflow.utils.date_parser import parse_statement_date, shift_months

NO_DESCRIPTION = "No description"

# Data de Compra;Nome no Cartão;Final do Cartão;Categoria;Descrição;Parcela;
# Valor (em US$);Cotação (em R$);Valor (em R$)
COLUMN_COUNT = 9

PAYMENT_MARKER = "PAGAMENTO"

_INSTALLMENT = re.compile(r"^(\d+)\s*/\s*(\d+)$")
_DUPLICATED_MERCHANT = re.compile(r"^(.+?)\s*\*\s*\1$", re.IGNORECASE)


def clean_merchant(description: str) -> str:
    """Collapse card tokenizer artifacts such as ``UBER   *UBER``."""
    desc = description.strip()
    match = _DUPLICATED_MERCHANT.match(desc)
    if match:
        desc = match.group(1)
    else:
        desc = re.sub(r"\s*\*\s*", " ", desc)
    desc = re.sub(r"\s+", " ", desc).strip()
    return desc or NO_DESCRIPTION


class C6CardCsvParser(BankParser):
    """Parses C6 Bank card statements.

    Charges are reported as positive values and refunds (estornos) as
    negative ones, so the sign is inverted. Card payments are income.
    Installment purchases carry the original purchase date; the posted
    date is moved forward to the current installment's month.
    """

    info = ParserInfo(
        bank_code="C6_CSV",
        bank_name="C6 Bank",
        file_format="csv",
        description="C6 Bank credit card statement (CSV)",
    )

    def supports(self, filename: str, content: str) -> bool:
        if not filename.lower().endswith(".csv"):
            return False
        first_line = content.lstrip("﻿").split("\n", 1)[0].lower()
        return (
            "data de compra" in first_line
            and "final do cart" in first_line
            and "valor (em r$)" in first_line
        )

    def _records(self, content: str) -> Iterator[tuple[int, list[str]]]:
        rows = read_csv_rows(content, ";")
        if rows and "data de compra" in rows[0][1][0].lower():
            rows = rows[1:]
        yield from rows

    def _parse_record(self, line_number: int, cells: list[str]) -> Optional[ParsedTransaction]:
        if len(cells) < COLUMN_COUNT:
            raise LineSkipped(
                f"Expected {COLUMN_COUNT} columns, found {len(cells)}", line_number
            )
        (
            purchase_date,
            holder,
            card_digits,
            bank_category,
            description,
            installment,
            usd_value,
            fx_rate,
            brl_value,
        ) = cells[:COLUMN_COUNT]

        try:
            txn_date = parse_statement_date(purchase_date)
            amount = parse_amount(brl_value)
        except ValueError as e:
            raise LineSkipped(str(e), line_number)
        if amount == 0:
            return None

        description = clean_merchant(description)
        if amount < 0 or PAYMENT_MARKER in description.upper():
            direction = Direction.INCOME
        else:
            direction = Direction.EXPENSE

        extra = {
            "card_last_digits": card_digits,
            "card_holder": holder,
            "bank_category": bank_category,
            "installment": installment,
            "purchase_date": txn_date.isoformat(),
        }
        if usd_value and usd_value != "0":
            extra["usd_amount"] = usd_value
            extra["fx_rate"] = fx_rate

        match = _INSTALLMENT.match(installment)
        if match and int(match.group(1)) > 1:
            txn_date = shift_months(txn_date, int(match.group(1)) - 1)

        return ParsedTransaction(
            date=txn_date,
            description=description,
            amount=abs(amount),
            direction=direction,
            extra=extra,
        )
