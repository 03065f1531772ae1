"""Transfer pair detection between a user's own transactions."""

import threading
import weakref
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable

from statementflow.database.base import Database
from statementflow.domain.entities import Transaction
from statementflow.logger import get_logger

logger = get_logger(__name__)


def find_transfer_pairs(
    transactions: Iterable[Transaction], require_distinct_accounts: bool = False
) -> list[tuple[Transaction, Transaction]]:
    """Pair debits with credits of the same absolute amount on the same date.

    Transactions already linked are left alone. Inside a (date, amount)
    bucket, debits and credits are taken in ascending id order and each one
    is paired at most once, with the first available partner.

    Args:
        transactions: Candidate transactions of a single user
        require_distinct_accounts: Only pair transactions of different accounts

    Returns:
        List of (debit, credit) pairs
    """
    buckets: dict[tuple[date, Decimal], list[Transaction]] = defaultdict(list)
    for txn in transactions:
        if txn.transfer_id is not None or txn.amount == 0:
            continue
        buckets[(txn.date, abs(txn.amount))].append(txn)

    pairs = []
    for members in buckets.values():
        if len(members) < 2:
            continue
        members.sort(key=lambda txn: txn.id)
        debits = [txn for txn in members if txn.amount < 0]
        credits = [txn for txn in members if txn.amount > 0]
        paired_credit_ids: set[int] = set()

        for debit in debits:
            for credit in credits:
                if credit.id in paired_credit_ids:
                    continue
                if require_distinct_accounts and credit.account_id == debit.account_id:
                    continue
                pairs.append((debit, credit))
                paired_credit_ids.add(credit.id)
                break
    return pairs


class _UserLock:
    """A lock that can be held in a weak-value map."""

    __slots__ = ("_lock", "__weakref__")

    def __init__(self):
        self._lock = threading.Lock()

    def __enter__(self):
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info):
        self._lock.release()

    def locked(self) -> bool:
        return self._lock.locked()


class TransferDetector:
    """Links transfer pairs in the stored transactions of one user.

    Runs for the same user are serialized; runs for different users may
    proceed in parallel.
    """

    # Entries disappear once no detector run holds them.
    _locks: "weakref.WeakValueDictionary[str, _UserLock]" = weakref.WeakValueDictionary()
    _locks_guard = threading.Lock()

    def __init__(self, db: Database, require_distinct_accounts: bool = False):
        """Initialize the detector.

        Args:
            db: Database instance
            require_distinct_accounts: Only pair transactions of different accounts
        """
        self.db = db
        self.require_distinct_accounts = require_distinct_accounts

    @classmethod
    def _lock_for(cls, user_id: str) -> _UserLock:
        with cls._locks_guard:
            return cls._locks.setdefault(user_id, _UserLock())

    def detect(self, user_id: str) -> int:
        """Find and link the user's transfer pairs.

        Returns:
            Number of pairs linked in this run
        """
        with self._lock_for(user_id):
            transactions = self.db.list_transactions(user_id=user_id)
            pairs = find_transfer_pairs(transactions, self.require_distinct_accounts)
            for debit, credit in pairs:
                self.db.link_transfer(debit.id, credit.id)
                logger.debug(
                    "Linked transfer %d <-> %d (%s on %s)",
                    debit.id,
                    credit.id,
                    abs(debit.amount),
                    debit.date.isoformat(),
                )
        if pairs:
            logger.info("Linked %d transfer pairs for user %s", len(pairs), user_id)
        return len(pairs)
