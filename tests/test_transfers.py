"""Tests for transfer pair detection."""

import gc
from datetime import date, datetime
from decimal import Decimal

from statementflow.domain.entities import NewTransaction, Transaction
from statementflow.domain.hashing import transaction_hash
from statementflow.domain.transfers import TransferDetector, find_transfer_pairs


def make_txn(txn_id, amount, txn_date=date(2024, 1, 15), account_id=1, transfer_id=None):
    return Transaction(
        id=txn_id,
        user_id="alice",
        account_id=account_id,
        external_id=None,
        hash=f"hash-{txn_id}",
        description_raw=f"LINE {txn_id}",
        description_clean=f"LINE {txn_id}",
        amount=Decimal(amount),
        date=txn_date,
        category_id=None,
        category_confidence=None,
        needs_review=True,
        transfer_id=transfer_id,
        extra={},
        imported_at=datetime(2024, 1, 20),
    )


def pair_ids(pairs):
    return [(debit.id, credit.id) for debit, credit in pairs]


class TestFindTransferPairs:
    """Tests for the pure pairing function."""

    def test_pairs_opposite_amounts_on_same_date(self):
        pairs = find_transfer_pairs([make_txn(1, "-500.00"), make_txn(2, "500.00")])
        assert pair_ids(pairs) == [(1, 2)]

    def test_single_transaction_has_no_pair(self):
        assert find_transfer_pairs([make_txn(1, "-500.00")]) == []

    def test_different_dates_are_not_paired(self):
        pairs = find_transfer_pairs(
            [make_txn(1, "-500.00"), make_txn(2, "500.00", txn_date=date(2024, 1, 16))]
        )
        assert pairs == []

    def test_same_sign_is_not_paired(self):
        assert find_transfer_pairs([make_txn(1, "-500.00"), make_txn(2, "-500.00")]) == []

    def test_different_amounts_are_not_paired(self):
        assert find_transfer_pairs([make_txn(1, "-500.00"), make_txn(2, "499.99")]) == []

    def test_four_members_make_two_pairs_in_id_order(self):
        """Test each debit takes the first free credit by id."""
        txns = [
            make_txn(4, "100.00"),
            make_txn(1, "-100.00"),
            make_txn(3, "-100.00"),
            make_txn(2, "100.00"),
        ]
        assert pair_ids(find_transfer_pairs(txns)) == [(1, 2), (3, 4)]

    def test_three_members_leave_one_unpaired(self):
        txns = [make_txn(1, "-100.00"), make_txn(2, "100.00"), make_txn(3, "100.00")]
        assert pair_ids(find_transfer_pairs(txns)) == [(1, 2)]

    def test_already_linked_transactions_are_skipped(self):
        txns = [
            make_txn(1, "-100.00", transfer_id=9),
            make_txn(2, "100.00"),
            make_txn(3, "-100.00"),
        ]
        assert pair_ids(find_transfer_pairs(txns)) == [(3, 2)]

    def test_zero_amounts_are_ignored(self):
        assert find_transfer_pairs([make_txn(1, "0.00"), make_txn(2, "0.00")]) == []

    def test_distinct_accounts_required(self):
        """Test same-account pairs are rejected when accounts must differ."""
        txns = [
            make_txn(1, "-100.00", account_id=1),
            make_txn(2, "100.00", account_id=1),
            make_txn(3, "100.00", account_id=2),
        ]
        assert pair_ids(find_transfer_pairs(txns)) == [(1, 2)]
        assert pair_ids(find_transfer_pairs(txns, require_distinct_accounts=True)) == [(1, 3)]


def store(db, user_id, account_id, amount, description, txn_date=date(2024, 3, 10)):
    amount = Decimal(amount)
    saved, _ = db.save_transaction(
        NewTransaction(
            user_id=user_id,
            account_id=account_id,
            hash=transaction_hash(account_id, amount, txn_date, description),
            description_raw=description,
            description_clean=description,
            amount=amount,
            date=txn_date,
        )
    )
    return saved.id


class TestTransferDetector:
    """Tests for linking pairs in the database."""

    def test_links_pair_both_ways(self, temp_db, account_service):
        checking = account_service.create_account("alice", "Checking", "Bank A")
        savings = account_service.create_account("alice", "Savings", "Bank B")
        out_id = store(temp_db, "alice", checking, "-250.00", "TED ENVIADA")
        in_id = store(temp_db, "alice", savings, "250.00", "TED RECEBIDA")

        linked = TransferDetector(temp_db).detect("alice")

        assert linked == 1
        assert temp_db.get_transaction(out_id).transfer_id == in_id
        assert temp_db.get_transaction(in_id).transfer_id == out_id

    def test_detection_is_idempotent(self, temp_db, account_service):
        account_id = account_service.create_account("alice", "Checking", "Bank A")
        store(temp_db, "alice", account_id, "-250.00", "TED ENVIADA")
        store(temp_db, "alice", account_id, "250.00", "TED RECEBIDA")
        detector = TransferDetector(temp_db)

        assert detector.detect("alice") == 1
        assert detector.detect("alice") == 0

    def test_other_users_are_not_paired(self, temp_db, account_service):
        alice = account_service.create_account("alice", "Checking", "Bank A")
        bob = account_service.create_account("bob", "Checking", "Bank A")
        store(temp_db, "alice", alice, "-250.00", "PIX ENVIADO")
        store(temp_db, "bob", bob, "250.00", "PIX RECEBIDO")

        assert TransferDetector(temp_db).detect("alice") == 0
        assert TransferDetector(temp_db).detect("bob") == 0

    def test_distinct_accounts_option(self, temp_db, account_service):
        account_id = account_service.create_account("alice", "Checking", "Bank A")
        store(temp_db, "alice", account_id, "-80.00", "ESTORNO")
        store(temp_db, "alice", account_id, "80.00", "ESTORNO CREDITO")

        assert TransferDetector(temp_db, require_distinct_accounts=True).detect("alice") == 0


def test_lock_is_shared_per_user():
    """Test detectors serialize on one lock per user."""
    first = TransferDetector._lock_for("alice")
    second = TransferDetector._lock_for("alice")
    other = TransferDetector._lock_for("bob")

    assert first is second
    assert first is not other
    with first:
        assert second.locked()
    assert not second.locked()


def test_unused_user_locks_are_released():
    """Test the lock map does not keep an entry per user forever."""
    lock = TransferDetector._lock_for("carol")
    assert "carol" in TransferDetector._locks

    del lock
    gc.collect()

    assert "carol" not in TransferDetector._locks
