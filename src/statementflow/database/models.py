"""SQLAlchemy models for the statementflow database."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Float,
    Numeric,
    Boolean,
    UniqueConstraint,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()

# Cache scope stored for the shared tier; user scopes store the user id.
GLOBAL_SCOPE = ""


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Account(Base):
    """Bank account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    bank_name = Column(String, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_account_user_name"),)

    transactions = relationship("Transaction", back_populates="account", cascade="all, delete-orphan")


class Category(Base):
    """Category reference data."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    color = Column(String(20), default="#808080", nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    transactions = relationship("Transaction", back_populates="category")
    cache_entries = relationship("CategorizationCache", back_populates="category", cascade="all, delete-orphan")


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    external_id = Column(String, nullable=True)
    hash = Column(String, unique=True, nullable=False)
    description_raw = Column(String, nullable=False)
    description_clean = Column(String, nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    date = Column(Date, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    category_confidence = Column(Float, nullable=True)
    needs_review = Column(Boolean, default=True, nullable=False)
    transfer_id = Column(Integer, ForeignKey("transactions.id", ondelete="SET NULL"), nullable=True)
    extra = Column(JSON, default=dict, nullable=False)
    imported_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (Index("ix_transactions_user_date_amount", "user_id", "date", "amount"),)

    account = relationship("Account", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")


class CategorizationCache(Base):
    """Learned description -> category mapping, global or per user."""

    __tablename__ = "categorization_cache"

    id = Column(Integer, primary_key=True)
    description_clean = Column(String, nullable=False)
    user_id = Column(String, nullable=True)
    scope = Column(String, nullable=False, default=GLOBAL_SCOPE)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False)
    confidence_score = Column(Float, nullable=False)
    occurrence_count = Column(Integer, default=1, nullable=False)
    is_user_defined = Column(Boolean, default=False, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    # NULL user ids never collide in a unique index, so uniqueness is on scope
    __table_args__ = (
        UniqueConstraint("description_clean", "scope", name="uq_cache_description_scope"),
    )

    category = relationship("Category", back_populates="cache_entries")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
