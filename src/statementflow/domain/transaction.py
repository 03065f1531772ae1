"""Transaction domain service."""

from typing import Optional
from statementflow.database.base import Database
from statementflow.domain.categorization import USER_DEFINED_CONFIDENCE, CategorizationEngine
from statementflow.domain.entities import Transaction as TransactionEntity
from statementflow.domain.errors import (
    NotFoundError,
    category_name_not_found,
    transaction_not_found,
)


class TransactionService:
    """Service for reading and correcting stored transactions."""

    def __init__(self, db: Database, engine: Optional[CategorizationEngine] = None):
        """Initialize transaction service.

        Args:
            db: Database instance
            engine: Engine used to record user corrections
        """
        self.db = db
        self.engine = engine or CategorizationEngine(db)

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        user_id: Optional[str] = None,
        account_id: Optional[int] = None,
    ) -> list[TransactionEntity]:
        """List transactions ordered by date."""
        return self.db.list_transactions(user_id=user_id, account_id=account_id)

    def list_needing_review(self, user_id: str) -> list[TransactionEntity]:
        """List the user's transactions whose category confidence is below threshold."""
        return self.db.list_transactions(user_id=user_id, needs_review=True)

    def recategorize(self, user_id: str, transaction_id: int, category_name: str) -> TransactionEntity:
        """Assign a category by hand.

        The transaction becomes fully confident and leaves the review queue,
        and the choice is remembered for future lines with the same clean
        description for this user.

        Args:
            user_id: User making the correction
            transaction_id: Transaction ID
            category_name: Category name (case-insensitive)

        Returns:
            The updated transaction

        Raises:
            NotFoundError: If the transaction (for this user) or the category doesn't exist
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None or txn.user_id != user_id:
            raise NotFoundError(transaction_not_found(transaction_id))

        category = self.db.find_category_by_name(category_name)
        if category is None:
            category = next(
                (cat for cat in self.db.list_categories() if cat.name.lower() == category_name.lower()),
                None,
            )
        if category is None:
            raise NotFoundError(category_name_not_found(category_name))

        self.db.update_transaction_category(
            transaction_id,
            category.id,
            USER_DEFINED_CONFIDENCE,
            needs_review=False,
        )
        self.engine.record_user_correction(user_id, txn.description_raw, category.id)
        return self.db.get_transaction(transaction_id)
