"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ParseError(ValidationError):
    """A statement file has no recoverable transactions.

    Terminal for the import: nothing from the file is persisted.
    """


class LineSkipped(ValidationError):
    """A single malformed row inside an otherwise valid statement."""

    def __init__(self, reason: str, line_number: Optional[int] = None):
        self.reason = reason
        self.line_number = line_number
        if line_number is None:
            super().__init__(reason)
        else:
            super().__init__(f"Line {line_number}: {reason}")


class ClassifierError(DomainError):
    """The external classifier failed (transport, timeout or bad JSON)."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def category_name_not_found(name: str) -> str:
    """Return message for missing category by name."""
    return f"Category '{name}' not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def unsupported_bank(bank_code: str) -> str:
    """Return message for an unknown parser code."""
    return f"Unsupported bank format: {bank_code}"


def no_transactions_found(source: str) -> str:
    """Return message for a statement without recoverable rows."""
    return f"No valid transactions found in {source} file"
