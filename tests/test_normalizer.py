"""Tests for description normalization."""

import re

import pytest

from statementflow.domain.normalizer import clean_description


def test_card_descriptor_is_cleaned():
    """Test a tokenized card descriptor with date and card suffix."""
    cleaned = clean_description("UBER* TRIP 12/01 4821")

    assert cleaned == "UBER TRIP"
    assert "*" not in cleaned
    assert "12/01" not in cleaned
    assert not re.search(r"\b\d{4}\b", cleaned)
    assert "  " not in cleaned


def test_uppercases_and_collapses_whitespace():
    assert clean_description("  uber    trip ") == "UBER TRIP"


def test_strips_payment_prefix():
    """Test that leading payment words are removed."""
    assert clean_description("COMPRA SUPERMERCADO ABC") == "SUPERMERCADO ABC"
    assert clean_description("PAGAMENTO PIX 12345678901 JOAO") == "PIX JOAO"


def test_strips_installment_marker():
    assert clean_description("NETFLIX.COM PARCELA 2 DE 10") == "NETFLIX.COM"


def test_strips_embedded_dates():
    assert clean_description("IFOOD 2024-01-12 PEDIDO") == "IFOOD PEDIDO"


def test_strips_alphanumeric_codes_and_comp_tokens():
    assert clean_description("PADARIA AB12CD34 COMP99") == "PADARIA"


def test_strips_hyphens():
    assert clean_description("POSTO - SHELL") == "POSTO SHELL"


def test_noise_only_keeps_original():
    """Test a description made only of noise is not cleaned to nothing."""
    assert clean_description("12/01/2024") == "12/01/2024"


@pytest.mark.parametrize(
    "raw",
    [
        "UBER* TRIP 12/01 4821",
        "COMPRA SUPERMERCADO ABC",
        "PAG*JoseDaSilva 02/10",
        "PGTO PGTO COMPRA 1234 5678",
        "MERCADOLIVRE*ML PARC 01/03",
        "12/01/2024",
        "",
    ],
)
def test_clean_is_idempotent(raw):
    """Test clean(clean(x)) == clean(x)."""
    once = clean_description(raw)
    assert clean_description(once) == once
