"""Abstract database interface (the repository consumed by the domain)."""

from abc import ABC, abstractmethod
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from statementflow.domain.entities import (
    Account,
    Category,
    Transaction,
    NewTransaction,
    CategorizationCacheEntry,
)


class Database(ABC):
    """Abstract database interface for statementflow."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(self, user_id: str, name: str, bank_name: str) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self, user_id: Optional[str] = None) -> list[Account]:
        """List accounts, optionally only those owned by a user."""
        pass

    # Category operations
    @abstractmethod
    def create_category(self, name: str, color: str = "#808080") -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def find_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by exact name."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List all categories ordered by name."""
        pass

    # Transaction operations
    @abstractmethod
    def find_transaction_by_hash(self, transaction_hash: str) -> Optional[Transaction]:
        """Get a transaction by its deduplication hash."""
        pass

    @abstractmethod
    def save_transaction(self, transaction: NewTransaction) -> tuple[Transaction, bool]:
        """Insert a transaction unless its hash already exists.

        Returns the stored transaction and True when it was created, or the
        existing row and False when the hash was already present. Must stay
        correct when two imports race on the same hash.
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: Optional[str] = None,
        account_id: Optional[int] = None,
        needs_review: Optional[bool] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, ordered by date then ID."""
        pass

    @abstractmethod
    def update_transaction_category(
        self,
        transaction_id: int,
        category_id: Optional[int],
        confidence: Optional[float],
        needs_review: bool,
    ) -> None:
        """Update the categorization fields of a transaction."""
        pass

    @abstractmethod
    def link_transfer(self, first_id: int, second_id: int) -> None:
        """Point two transactions at each other as a transfer pair."""
        pass

    # Categorization cache operations
    @abstractmethod
    def find_cache_entry(
        self, description_clean: str, user_id: Optional[str]
    ) -> Optional[CategorizationCacheEntry]:
        """Exact lookup on (description_clean, user_id); None user is the global tier."""
        pass

    @abstractmethod
    def upsert_cache_entry(
        self,
        description_clean: str,
        user_id: Optional[str],
        category_id: int,
        confidence_score: float,
        is_user_defined: bool = False,
    ) -> None:
        """Atomically insert or update the entry keyed by (description_clean, user_id).

        An automatic write (``is_user_defined=False``) never overwrites an
        existing user-defined entry.
        """
        pass

    @abstractmethod
    def record_cache_hit(self, entry_id: int) -> None:
        """Increment the occurrence count of a cache entry."""
        pass
