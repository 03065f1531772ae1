"""Description normalization for categorization cache keys."""

import re

# Applied in order; each rule replaces its matches with a space.
_RULES: tuple[re.Pattern[str], ...] = (
    # Embedded dates: 2024-01-12, 12/01/2024, 12/01, 12-01-24
    re.compile(r"\b\d{4}-\d{2}-\d{2}\b"),
    re.compile(r"\b\d{1,2}[/.-]\d{1,2}(?:[/.-]\d{2,4})?\b"),
    # Merchant tokenizer artifacts, e.g. UBER* TRIP
    re.compile(r"\*+"),
    re.compile(r"-+"),
    # Document numbers
    re.compile(r"\d{10,}"),
    # Alphanumeric codes mixing letters and digits, e.g. AB12CD34
    re.compile(r"\b(?=[A-Z]*\d)(?=\d*[A-Z])[A-Z0-9]{6,}\b"),
    # Masked card suffixes
    re.compile(r"\b\d{4}\b"),
    # Installment markers: PARCELA 2/10, PARC 02 DE 10, 2/10
    re.compile(r"\bPARC(?:ELA)?\.?\s*\d{1,2}\s*(?:/|DE)\s*\d{1,2}\b"),
    re.compile(r"\b\d{1,2}/\d{1,2}\b"),
    # Payment prefix words
    re.compile(
        r"^\s*(?:(?:PAGAMENTO|PAGTO|PGTO|PAG|COMPRA|DEBITO|DÉBITO|CREDITO|CRÉDITO)\b\.?\s*)+"
    ),
    re.compile(r"\bCOMP\d+\b"),
)

_WHITESPACE = re.compile(r"\s+")


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _apply_rules(text: str) -> str:
    for pattern in _RULES:
        text = pattern.sub(" ", text)
    return _collapse(text)


def clean_description(description_raw: str) -> str:
    """Return the canonical form of a raw statement description.

    Uppercases and strips dates, asterisks, hyphens, document numbers,
    alphanumeric codes, card suffixes, installment markers, payment prefixes
    and ``COMP<digits>`` tokens, then collapses whitespace. Rules are applied
    until the text stops changing, so ``clean_description`` is idempotent.

    A description made only of noise keeps its whitespace-collapsed
    uppercase form rather than becoming empty.
    """
    original = _collapse(description_raw.upper())
    text = original
    previous = None
    while text != previous:
        previous = text
        text = _apply_rules(text)
    return text or original
