"""Account domain service."""

from typing import Optional
from statementflow.database.base import Database
from statementflow.domain.entities import Account as AccountEntity
from statementflow.domain.errors import ConflictError, ValidationError


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(self, user_id: str, name: str, bank_name: str) -> int:
        """Create a new account.

        Args:
            user_id: Owner of the account
            name: Account name, unique per user
            bank_name: Bank name

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If the user already has an account with that name
        """
        if not name.strip():
            raise ValidationError("Account name must not be empty")

        for acc in self.db.list_accounts(user_id=user_id):
            if acc.name == name:
                raise ConflictError(f"Account with name '{name}' already exists")

        return self.db.create_account(user_id=user_id, name=name, bank_name=bank_name)

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def list_accounts(self, user_id: Optional[str] = None) -> list[AccountEntity]:
        """List accounts, optionally only those of one user."""
        return self.db.list_accounts(user_id=user_id)
