"""SQLAlchemy models for finance_aggregator database."""

from datetime import datetime, UTC
from decimal import Decimal
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session
from sqlalchemy.types import TypeDecorator

Base = declarative_base()


class ExactDecimal(TypeDecorator):
    """Decimal stored as its canonical string.

    SQLite keeps NUMERIC columns as binary floats, so amounts are persisted as
    text to round-trip exactly.
    """

    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


class User(Base):
    """Owner of accounts, transactions and custom categories."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    external_id = Column(String, unique=True, nullable=False)
    email = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Institution(Base):
    """Financial institution model."""

    __tablename__ = "institutions"

    id = Column(Integer, primary_key=True)
    external_id = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=True)
    domain = Column(String, nullable=True)
    url = Column(String, nullable=True)

    accounts = relationship("Account", back_populates="institution")


class Account(Base):
    """Bank account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    external_id = Column(String, unique=True, nullable=False)
    external_name = Column(String, nullable=True)
    institution_id = Column(Integer, ForeignKey("institutions.id"), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    currency = Column(String, default="USD", nullable=False)
    account_type = Column(String, nullable=True)
    mask = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    institution = relationship("Institution", back_populates="accounts")
    transactions = relationship("Transaction", back_populates="account")
    snapshots = relationship("Snapshot", back_populates="account")


class Category(Base):
    """Category model with hierarchical structure."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    ident = Column(String, unique=True, nullable=False)
    category_type = Column(String, default="expense", nullable=False)
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    sort_order = Column(Integer, default=0, nullable=False)
    # NULL for system-wide categories
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    parent = relationship("Category", remote_side=[id], backref="children")
    transactions = relationship("Transaction", back_populates="category")


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    external_id = Column(String, unique=True, nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    transaction_date = Column(Date, nullable=True)
    posted_date = Column(Date, nullable=True)
    amount = Column(ExactDecimal(), nullable=False)
    payee = Column(String, nullable=True)
    description = Column(String, nullable=True)
    memo = Column(String, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    transfer_pair_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    imported_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    account = relationship("Account", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")
    tags = relationship("TransactionTag", cascade="all, delete-orphan", lazy="selectin")


class TransactionTag(Base):
    """One tag on a transaction."""

    __tablename__ = "transaction_tags"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    tag = Column(String, nullable=False)

    __table_args__ = (UniqueConstraint("transaction_id", "tag", name="uq_transaction_tag"),)


class Snapshot(Base):
    """Account balance snapshot."""

    __tablename__ = "snapshots"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    date = Column(Date, nullable=False)
    balance = Column(ExactDecimal(), nullable=False)
    source = Column(String, nullable=False)

    # One snapshot per account, day and source
    __table_args__ = (UniqueConstraint("account_id", "date", "source", name="uq_snapshot_account_date_source"),)

    account = relationship("Account", back_populates="snapshots")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
