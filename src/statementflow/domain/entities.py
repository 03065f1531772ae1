"""Domain model entities for statementflow.

These are pure data classes representing business concepts, independent of
database schema. The storage layer maps them to and from its own models.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


REVIEW_THRESHOLD = 0.8


class Direction(str, Enum):
    """Money flow of a parsed statement line."""

    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True)
class Account:
    """Bank account domain entity."""

    id: int
    user_id: str
    name: str
    bank_name: str
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Spending category reference data."""

    id: int
    name: str
    color: str
    created_at: datetime


@dataclass(frozen=True)
class ParsedTransaction:
    """A statement line as produced by a parser.

    ``amount`` is always unsigned; ``direction`` carries the sign.
    """

    date: date
    description: str
    amount: Decimal
    direction: Direction
    external_id: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RawTransaction:
    """A parsed line after sign normalization, ready for ingestion."""

    date: date
    description_raw: str
    amount: Decimal
    external_id: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NewTransaction:
    """Transaction payload that has not been persisted yet."""

    user_id: str
    account_id: int
    hash: str
    description_raw: str
    description_clean: str
    amount: Decimal
    date: date
    external_id: Optional[str] = None
    category_id: Optional[int] = None
    category_confidence: Optional[float] = None
    needs_review: bool = True
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Transaction:
    """Persisted transaction domain entity."""

    id: int
    user_id: str
    account_id: int
    external_id: Optional[str]
    hash: str
    description_raw: str
    description_clean: str
    amount: Decimal
    date: date
    category_id: Optional[int]
    category_confidence: Optional[float]
    needs_review: bool
    transfer_id: Optional[int]
    extra: dict[str, Any]
    imported_at: datetime


@dataclass(frozen=True)
class CategorizationCacheEntry:
    """Learned mapping from a clean description to a category.

    ``user_id`` of None is the shared global tier.
    """

    id: int
    description_clean: str
    user_id: Optional[str]
    category_id: int
    confidence_score: float
    occurrence_count: int
    is_user_defined: bool
    updated_at: datetime


def needs_review(confidence: float) -> bool:
    """Return True when a resolved confidence must be reviewed by a human."""
    return confidence < REVIEW_THRESHOLD
