"""Tests for the account, category and transaction services."""

from datetime import date
from decimal import Decimal

import pytest

from statementflow.domain.category import DEFAULT_CATEGORIES, UNCATEGORIZED, CategoryService
from statementflow.domain.entities import RawTransaction
from statementflow.domain.errors import ConflictError, NotFoundError, ValidationError
from statementflow.domain.transaction import TransactionService


class TestAccountService:
    def test_create_account(self, account_service):
        account_id = account_service.create_account(user_id="alice", name="Checking", bank_name="C6 Bank")

        account = account_service.get_account(account_id)
        assert account.name == "Checking"
        assert account.bank_name == "C6 Bank"
        assert account.user_id == "alice"

    def test_duplicate_name_for_same_user(self, account_service, sample_account):
        with pytest.raises(ConflictError):
            account_service.create_account(user_id="alice", name="Checking", bank_name="Other")

    def test_same_name_for_other_user(self, account_service, sample_account):
        account_id = account_service.create_account(user_id="bob", name="Checking", bank_name="Other")
        assert account_id != sample_account.id

    def test_empty_name(self, account_service):
        with pytest.raises(ValidationError):
            account_service.create_account(user_id="alice", name="  ", bank_name="Bank")

    def test_list_accounts(self, account_service, sample_account):
        account_service.create_account(user_id="bob", name="Card", bank_name="Nubank")

        assert [acc.name for acc in account_service.list_accounts(user_id="alice")] == ["Checking"]
        assert len(account_service.list_accounts()) == 2


class TestCategoryService:
    def test_seed_defaults_once(self, temp_db):
        service = CategoryService(temp_db)

        assert service.seed_default_categories() == len(DEFAULT_CATEGORIES)
        assert service.seed_default_categories() == 0
        assert service.get_category_by_name(UNCATEGORIZED) is not None

    def test_seed_fills_gaps(self, temp_db):
        service = CategoryService(temp_db)
        service.create_category("Transporte", color="#000000")

        assert service.seed_default_categories() == len(DEFAULT_CATEGORIES) - 1
        assert service.get_category_by_name("Transporte").color == "#000000"

    def test_create_duplicate(self, temp_db):
        service = CategoryService(temp_db)
        service.create_category("Pets")

        with pytest.raises(ConflictError):
            service.create_category("Pets")

    def test_get_and_list(self, temp_db, categories):
        service = CategoryService(temp_db)

        assert service.get_category(categories["Lazer"]).name == "Lazer"
        assert len(service.list_categories()) == len(DEFAULT_CATEGORIES)


class TestTransactionService:
    @pytest.fixture
    def imported(self, temp_db, engine, ingestion_service, sample_account, categories):
        ingestion_service.import_batch(
            "alice",
            sample_account.id,
            [RawTransaction(date(2024, 2, 8), "LOJA XYZ 0412", Decimal("-99.00"))],
        )
        return temp_db.list_transactions(user_id="alice")[0]

    def test_recategorize(self, temp_db, engine, imported, categories):
        service = TransactionService(temp_db, engine=engine)

        updated = service.recategorize("alice", imported.id, "lazer")

        assert updated.category_id == categories["Lazer"]
        assert updated.category_confidence == 1.0
        assert updated.needs_review is False

    def test_correction_applies_to_future_lines(self, temp_db, engine, ingestion_service, sample_account, imported):
        """Test the next line with the same clean description uses the correction."""
        TransactionService(temp_db, engine=engine).recategorize("alice", imported.id, "Lazer")

        result = engine.categorize("LOJA XYZ 9981", user_id="alice")

        assert result.category_name == "Lazer"
        assert result.confidence == 1.0

    def test_recategorize_unknown_category(self, temp_db, engine, imported):
        with pytest.raises(NotFoundError):
            TransactionService(temp_db, engine=engine).recategorize("alice", imported.id, "Groceries")

    def test_recategorize_other_users_transaction(self, temp_db, engine, imported):
        with pytest.raises(NotFoundError):
            TransactionService(temp_db, engine=engine).recategorize("bob", imported.id, "Lazer")

    def test_list_needing_review(self, temp_db, engine, imported):
        service = TransactionService(temp_db, engine=engine)
        assert service.list_needing_review("alice") == []

        temp_db.update_transaction_category(imported.id, None, 0.3, needs_review=True)

        assert [txn.id for txn in service.list_needing_review("alice")] == [imported.id]
        assert service.get_transaction(imported.id).category_confidence == 0.3
        assert len(service.list_transactions(user_id="alice")) == 1
