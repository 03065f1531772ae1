"""Tests for statement ingestion."""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from statementflow.classifiers import LLMClassifier
from statementflow.domain.categorization import CategorizationEngine
from statementflow.domain.entities import Direction, ParsedTransaction, RawTransaction
from statementflow.domain.errors import NotFoundError, ParseError, ValidationError
from statementflow.domain.ingestion import IngestionService, normalize_for_import


def raw(description, amount, txn_date=date(2024, 2, 5)):
    return RawTransaction(date=txn_date, description_raw=description, amount=Decimal(amount))


class TestNormalizeForImport:
    """Tests for sign normalization."""

    def test_expense_becomes_negative(self):
        parsed = ParsedTransaction(
            date=date(2024, 2, 5),
            description="LOJA XYZ",
            amount=Decimal("99.00"),
            direction=Direction.EXPENSE,
            external_id="F1",
            extra={"type": "D"},
        )
        result = normalize_for_import(parsed)

        assert result.amount == Decimal("-99.00")
        assert result.description_raw == "LOJA XYZ"
        assert result.external_id == "F1"
        assert result.extra == {"type": "D"}

    def test_income_stays_positive(self):
        parsed = ParsedTransaction(
            date=date(2024, 2, 5),
            description="PIX RECEBIDO",
            amount=Decimal("10.00"),
            direction=Direction.INCOME,
        )
        assert normalize_for_import(parsed).amount == Decimal("10.00")


class TestImportBatch:
    """Tests for IngestionService.import_batch."""

    def test_imports_and_categorizes(self, temp_db, ingestion_service, sample_account, categories):
        summary = ingestion_service.import_batch(
            "alice",
            sample_account.id,
            [raw("NETFLIX.COM", "-39.90"), raw("PIX RECEBIDO JOAO", "200.00")],
        )

        assert summary == {
            "imported": 2,
            "duplicates_skipped": 0,
            "total_processed": 2,
            "needs_review": 0,
            "transfers_linked": 0,
        }
        stored = temp_db.list_transactions(account_id=sample_account.id)
        assert [txn.category_id for txn in stored] == [categories["Assinaturas"], categories["Receita"]]
        assert stored[0].amount == Decimal("-39.90")
        assert stored[0].category_confidence == 0.95
        assert stored[0].needs_review is False

    def test_reimport_skips_everything(self, ingestion_service, sample_account, categories):
        """Test importing the same lines twice stores them once."""
        lines = [raw("NETFLIX.COM", "-39.90"), raw("UBER* TRIP", "-12.00")]
        ingestion_service.import_batch("alice", sample_account.id, lines)

        summary = ingestion_service.import_batch("alice", sample_account.id, lines)

        assert summary["imported"] == 0
        assert summary["duplicates_skipped"] == 2
        assert summary["total_processed"] == 2

    def test_duplicates_inside_one_batch(self, temp_db, ingestion_service, sample_account, categories):
        lines = [raw("NETFLIX.COM", "-39.90"), raw("NETFLIX.COM", "-39.90"), raw("NETFLIX.COM ", "-39.90")]

        summary = ingestion_service.import_batch("alice", sample_account.id, lines)

        # Trailing space changes the raw description, so it is a distinct line
        assert summary["imported"] == 2
        assert summary["duplicates_skipped"] == 1
        assert len(temp_db.list_transactions(user_id="alice")) == 2

    def test_same_line_in_other_account_is_not_duplicate(
        self, ingestion_service, account_service, sample_account, categories
    ):
        other_id = account_service.create_account("alice", "Savings", "Test Bank")
        line = [raw("NETFLIX.COM", "-39.90")]

        ingestion_service.import_batch("alice", sample_account.id, line)
        summary = ingestion_service.import_batch("alice", other_id, line)

        assert summary["imported"] == 1

    def test_low_confidence_lines_need_review(self, temp_db, sample_account, categories):
        service = IngestionService(temp_db, engine=CategorizationEngine(temp_db))

        summary = service.import_batch("alice", sample_account.id, [raw("LOJA XYZ", "-99.00")])

        assert summary["needs_review"] == 1
        txn = temp_db.list_transactions(user_id="alice")[0]
        assert txn.category_id == categories["Uncategorized"]
        assert txn.category_confidence == 0.1
        assert txn.needs_review is True

    def test_wrong_owner_is_rejected(self, ingestion_service, sample_account):
        with pytest.raises(NotFoundError):
            ingestion_service.import_batch("bob", sample_account.id, [raw("NETFLIX.COM", "-39.90")])

    def test_missing_account_is_rejected(self, ingestion_service):
        with pytest.raises(NotFoundError):
            ingestion_service.import_batch("alice", 999, [raw("NETFLIX.COM", "-39.90")])

    def test_links_transfers_between_accounts(self, temp_db, ingestion_service, account_service, categories):
        checking = account_service.create_account("alice", "Checking", "Bank A")
        savings = account_service.create_account("alice", "Savings", "Bank B")

        ingestion_service.import_batch("alice", checking, [raw("TED ENVIADA", "-300.00")])
        summary = ingestion_service.import_batch("alice", savings, [raw("TED RECEBIDA", "300.00")])

        assert summary["transfers_linked"] == 1
        out_txn, in_txn = temp_db.list_transactions(user_id="alice")
        assert out_txn.transfer_id == in_txn.id
        assert in_txn.transfer_id == out_txn.id

    def test_transfer_failure_does_not_fail_import(self, temp_db, engine, sample_account):
        detector = MagicMock()
        detector.detect.side_effect = RuntimeError("lock timeout")
        service = IngestionService(temp_db, engine=engine, transfer_detector=detector)

        summary = service.import_batch("alice", sample_account.id, [raw("NETFLIX.COM", "-39.90")])

        assert summary["imported"] == 1
        assert summary["transfers_linked"] == 0
        detector.detect.assert_called_once_with("alice")

    def test_detector_not_run_when_nothing_imported(self, temp_db, engine, sample_account):
        detector = MagicMock()
        service = IngestionService(temp_db, engine=engine, transfer_detector=detector)

        service.import_batch("alice", sample_account.id, [])

        detector.detect.assert_not_called()


class TestImportFile:
    """Tests for IngestionService.import_file."""

    def test_generic_csv(self, temp_db, ingestion_service, sample_account, categories, fixtures_dir):
        summary = ingestion_service.import_file(
            str(fixtures_dir / "generic_statement.csv"), "alice", sample_account.id
        )

        assert summary["bank_code"] == "GENERIC_CSV"
        assert summary["imported"] == 4
        assert summary["skipped_lines"] == []

        stored = {txn.description_raw: txn for txn in temp_db.list_transactions(user_id="alice")}
        assert stored["COMPRA SUPERMERCADO ABC"].amount == Decimal("-150.50")
        assert stored["COMPRA SUPERMERCADO ABC"].description_clean == "SUPERMERCADO ABC"
        assert stored["COMPRA SUPERMERCADO ABC"].category_id == categories["Alimentação"]
        assert stored["UBER* TRIP 06/02"].category_id == categories["Transporte"]
        assert stored["PIX RECEBIDO MARIA"].amount == Decimal("1500.00")
        assert stored["PIX RECEBIDO MARIA"].category_id == categories["Receita"]

    def test_reimport_file(self, ingestion_service, sample_account, categories, fixtures_dir):
        path = str(fixtures_dir / "generic_statement.csv")
        ingestion_service.import_file(path, "alice", sample_account.id)

        summary = ingestion_service.import_file(path, "alice", sample_account.id)

        assert summary["imported"] == 0
        assert summary["duplicates_skipped"] == 4

    def test_ofx_reports_skipped_lines(self, temp_db, ingestion_service, sample_account, categories, fixtures_dir):
        summary = ingestion_service.import_file(str(fixtures_dir / "extrato.ofx"), "alice", sample_account.id)

        assert summary["bank_code"] == "GENERIC_OFX"
        assert summary["imported"] == 2
        assert len(summary["skipped_lines"]) == 1

        salary = next(t for t in temp_db.list_transactions(user_id="alice") if t.external_id == "A2")
        assert salary.amount == Decimal("2500.00")
        assert salary.extra["trntype"] == "CREDIT"

    def test_explicit_bank_code(self, ingestion_service, sample_account, categories, fixtures_dir):
        summary = ingestion_service.import_file(
            str(fixtures_dir / "nubank.csv"), "alice", sample_account.id, bank_code="nubank_csv"
        )
        assert summary["bank_code"] == "NUBANK_CSV"

    def test_detects_c6_account_statement(self, temp_db, ingestion_service, sample_account, categories, fixtures_dir):
        summary = ingestion_service.import_file(str(fixtures_dir / "c6_conta.csv"), "alice", sample_account.id)

        assert summary["bank_code"] == "C6_CONTA_CSV"
        assert summary["imported"] == 4
        assert len(summary["skipped_lines"]) == 1

        pix = next(
            t for t in temp_db.list_transactions(user_id="alice")
            if t.description_raw == "Pix enviado para JOAO LIMA"
        )
        assert pix.amount == Decimal("-1200.00")
        assert pix.extra["pix_counterparty"] == "JOAO LIMA"

    def test_unknown_bank_code(self, ingestion_service, sample_account, fixtures_dir):
        with pytest.raises(ValidationError):
            ingestion_service.import_file(
                str(fixtures_dir / "nubank.csv"), "alice", sample_account.id, bank_code="ITAU"
            )

    def test_empty_file(self, ingestion_service, sample_account, tmp_path):
        empty = tmp_path / "empty.csv"
        empty.write_text("")

        with pytest.raises(ParseError):
            ingestion_service.import_file(str(empty), "alice", sample_account.id)

    def test_missing_file(self, ingestion_service, sample_account, tmp_path):
        with pytest.raises(FileNotFoundError):
            ingestion_service.import_file(str(tmp_path / "missing.csv"), "alice", sample_account.id)

    def test_nothing_persisted_on_parse_error(self, temp_db, ingestion_service, sample_account, tmp_path):
        bad = tmp_path / "bad.csv"
        bad.write_text("not;a;date\nstill;not;valid\n")

        with pytest.raises(ParseError):
            ingestion_service.import_file(str(bad), "alice", sample_account.id)
        assert temp_db.list_transactions(user_id="alice") == []


def test_empty_classifier_reply_does_not_block_import(temp_db, sample_account, categories):
    """Test a reply with no choices still imports the line as Uncategorized."""
    with patch("statementflow.classifiers.llm.OpenAI") as mock_openai:
        response = MagicMock()
        response.choices = []
        mock_openai.return_value.chat.completions.create.return_value = response
        engine = CategorizationEngine(temp_db, classifier=LLMClassifier(api_key="sk-test"))
        service = IngestionService(temp_db, engine=engine)

        summary = service.import_batch("alice", sample_account.id, [raw("LOJA XYZ", "-99.00")])

    assert summary["imported"] == 1
    assert summary["needs_review"] == 1
    txn = temp_db.list_transactions(user_id="alice")[0]
    assert txn.category_id == categories["Uncategorized"]
    assert txn.category_confidence == 0.1
