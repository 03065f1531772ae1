"""C6 Bank checking account statement parser (comma CSV)."""

import re
from decimal import Decimal
from typing import Iterator, Optional

from statementflow.domain.entities import Direction, ParsedTransaction
from statementflow.domain.errors import LineSkipped, ParseError
from statementflow.parsers.base import BankParser, ParserInfo, read_csv_rows
from statementflow.utils.amount_parser import parse_amount
from statementflow.utils.date_parser import parse_statement_date

NO_DESCRIPTION = "No description"

HEADER_MARKER = "data lançamento"

# Data Lançamento,Data Contábil,Título,Descrição,Entrada(R$),Saída(R$),Saldo do Dia(R$)
COLUMN_COUNT = 7

REVERSAL_MARKERS = ("pix estornado", "pix recusado")

_TRANSACTION_TYPES = (
    (("pix enviado",), "PIX_SENT"),
    (("pix recebido",), "PIX_RECEIVED"),
    (("debito de cartao", "débito de cartão"), "DEBIT_CARD"),
    (("recebimento salario", "recebimento salário"), "SALARY"),
    (("resgate de cdb",), "CDB_REDEMPTION"),
    (("emissao de cdb", "emissão de cdb"), "CDB_INVESTMENT"),
    (("pgto fat cartao", "fatura"), "CARD_BILL_PAYMENT"),
)

_PIX_COUNTERPARTY = re.compile(
    r"pix (?:enviado|recebido)(?: c6)? (?:para|de) (.+)", re.IGNORECASE
)


def clean_description(title: str, details: str) -> str:
    """Combine the title and detail columns into one description.

    The title is dropped when the details already contain it, and the
    ``BRA`` country suffix of card purchases is removed.
    """
    title = title.replace('"', "").strip()
    details = details.replace('"', "").strip()
    if title.lower() in details.lower():
        desc = details
    elif title and details:
        desc = f"{title} - {details}"
    else:
        desc = details or title
    desc = re.sub(r"\s+", " ", desc)
    desc = re.sub(r"BRA$", "", desc, flags=re.IGNORECASE).strip()
    return desc or NO_DESCRIPTION


def transaction_type(title: str, details: str) -> Optional[str]:
    title = title.lower()
    details = details.lower()
    for markers, code in _TRANSACTION_TYPES:
        for marker in markers:
            if marker in title or (code.startswith("PIX") and marker in details):
                return code
    return None


def _optional_amount(value: str, line_number: int) -> Decimal:
    if not value:
        return Decimal("0")
    try:
        return parse_amount(value)
    except ValueError as e:
        raise LineSkipped(str(e), line_number)


class C6AccountCsvParser(BankParser):
    """Parses C6 Bank checking account statements.

    The export opens with a few lines describing the account and period;
    rows start after the ``Data Lançamento`` header. Credits and debits sit
    in separate columns. Reversed or refused Pix transfers are listed as
    marker rows and are ignored.
    """

    info = ParserInfo(
        bank_code="C6_CONTA_CSV",
        bank_name="C6 Bank - Conta Corrente",
        file_format="csv",
        description="C6 Bank checking account statement (CSV)",
    )

    def supports(self, filename: str, content: str) -> bool:
        if not filename.lower().endswith(".csv"):
            return False
        lowered = content.lower()
        if "extrato de conta corrente c6" in lowered or "c6 bank" in lowered:
            return True
        return (
            HEADER_MARKER in lowered
            and "entrada(r$)" in lowered
            and "saída(r$)" in lowered
        )

    def _records(self, content: str) -> Iterator[tuple[int, list[str]]]:
        rows = read_csv_rows(content, ",")
        for index, (_, cells) in enumerate(rows):
            if HEADER_MARKER in ",".join(cells).lower():
                yield from rows[index + 1:]
                return
        raise ParseError(
            "Header not found. Make sure this is a C6 Bank checking account statement."
        )

    def _parse_record(self, line_number: int, cells: list[str]) -> Optional[ParsedTransaction]:
        if len(cells) < COLUMN_COUNT:
            raise LineSkipped(
                f"Expected {COLUMN_COUNT} columns, found {len(cells)}", line_number
            )
        posted, booked, title, details, credit_str, debit_str = cells[:COLUMN_COUNT - 1]

        marker_text = f"{title} {details}".lower()
        if any(marker in marker_text for marker in REVERSAL_MARKERS):
            return None

        try:
            txn_date = parse_statement_date(posted)
        except ValueError as e:
            raise LineSkipped(str(e), line_number)
        credit = _optional_amount(credit_str, line_number)
        debit = _optional_amount(debit_str, line_number)

        if credit != 0:
            amount, direction = abs(credit), Direction.INCOME
        elif debit != 0:
            amount, direction = abs(debit), Direction.EXPENSE
        else:
            return None

        extra = {"posting_date": posted, "booking_date": booked, "title": title}
        kind = transaction_type(title, details)
        if kind:
            extra["transaction_type"] = kind
        match = _PIX_COUNTERPARTY.search(details)
        if match:
            extra["pix_counterparty"] = match.group(1).strip()

        return ParsedTransaction(
            date=txn_date,
            description=clean_description(title, details),
            amount=amount,
            direction=direction,
            extra=extra,
        )
