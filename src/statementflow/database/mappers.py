"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including the translation of the
global cache tier (``user_id=None`` in the domain) to its storage scope.
"""

from typing import Optional

from statementflow.domain import entities as domain
from statementflow.database.models import (
    GLOBAL_SCOPE,
    Account as ORMAccount,
    Category as ORMCategory,
    Transaction as ORMTransaction,
    CategorizationCache as ORMCategorizationCache,
)


def scope_for(user_id: Optional[str]) -> str:
    """Return the storage scope for a cache tier."""
    return GLOBAL_SCOPE if user_id is None else user_id


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        user_id=orm_account.user_id,
        name=orm_account.name,
        bank_name=orm_account.bank_name,
        created_at=orm_account.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        color=orm_category.color,
        created_at=orm_category.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        account_id=orm_transaction.account_id,
        external_id=orm_transaction.external_id,
        hash=orm_transaction.hash,
        description_raw=orm_transaction.description_raw,
        description_clean=orm_transaction.description_clean,
        amount=orm_transaction.amount,
        date=orm_transaction.date,
        category_id=orm_transaction.category_id,
        category_confidence=orm_transaction.category_confidence,
        needs_review=orm_transaction.needs_review,
        transfer_id=orm_transaction.transfer_id,
        extra=dict(orm_transaction.extra or {}),
        imported_at=orm_transaction.imported_at,
    )


def new_transaction_to_orm(transaction: domain.NewTransaction) -> ORMTransaction:
    """Build an unsaved SQLAlchemy Transaction from a domain payload."""
    return ORMTransaction(
        user_id=transaction.user_id,
        account_id=transaction.account_id,
        external_id=transaction.external_id,
        hash=transaction.hash,
        description_raw=transaction.description_raw,
        description_clean=transaction.description_clean,
        amount=transaction.amount,
        date=transaction.date,
        category_id=transaction.category_id,
        category_confidence=transaction.category_confidence,
        needs_review=transaction.needs_review,
        extra=dict(transaction.extra),
    )


def cache_entry_to_domain(orm_entry: ORMCategorizationCache) -> domain.CategorizationCacheEntry:
    """Convert SQLAlchemy cache row to domain CategorizationCacheEntry."""
    return domain.CategorizationCacheEntry(
        id=orm_entry.id,
        description_clean=orm_entry.description_clean,
        user_id=orm_entry.user_id,
        category_id=orm_entry.category_id,
        confidence_score=orm_entry.confidence_score,
        occurrence_count=orm_entry.occurrence_count,
        is_user_defined=orm_entry.is_user_defined,
        updated_at=orm_entry.updated_at,
    )
