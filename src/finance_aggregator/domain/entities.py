"""Domain model entities for finance_aggregator.

These are pure data classes representing the canonical entity model that every
provider payload is translated into. They are independent of the database
schema, so the storage layer can change without touching the ingestion
pipeline.

Cross-entity links produced by the provider adapters are ``LookupRef`` values
(lookup-by-natural-key references). They are resolved to database ids only when
an ``EntityBatch`` is committed.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


class Provider(str, Enum):
    """Banking data providers with an adapter."""

    SIMPLEFIN = "simplefin"
    PLAID = "plaid"


class AccountType(str, Enum):
    """Account type."""

    CHEQUING = "chequing"
    CREDIT = "credit"
    SAVINGS = "savings"
    DEPOSITORY = "depository"
    LOAN = "loan"
    INVESTMENT = "investment"
    OTHER = "other"


class CategoryType(str, Enum):
    """Category type."""

    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"


class SnapshotSource(str, Enum):
    """Where a balance snapshot came from."""

    PROVIDER = "provider"
    MANUAL = "manual"
    CALCULATED = "calculated"


class TransactionTag(str, Enum):
    """Tags a user can put on a transaction."""

    INCOME = "income"
    TRANSFER = "transfer"


@dataclass(frozen=True)
class LookupRef:
    """Reference to another entity by a unique natural key.

    ``attribute`` names the identity attribute, e.g. ``"account/external-id"``.
    """

    attribute: str
    value: str

    @property
    def kind(self) -> str:
        """Entity kind the reference points at (``"account"`` etc.)."""
        return self.attribute.split("/", 1)[0]

    def __str__(self) -> str:
        return f"[{self.attribute} {self.value}]"


# A reference is either a resolved surrogate id or a deferred natural-key lookup
EntityRef = Union[int, LookupRef]


@dataclass(frozen=True)
class Institution:
    """Financial institution domain entity."""

    external_id: str
    name: Optional[str] = None
    domain: Optional[str] = None
    url: Optional[str] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class Account:
    """Bank account domain entity."""

    external_id: str
    external_name: Optional[str]
    institution: Optional[EntityRef]
    user: Optional[EntityRef] = None
    currency: str = "USD"
    account_type: Optional[AccountType] = None
    mask: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``amount`` follows one sign convention: negative is money out, positive is
    money in.
    """

    external_id: str
    account: EntityRef
    amount: Decimal
    posted_date: Optional[date] = None
    transaction_date: Optional[date] = None
    payee: Optional[str] = None
    description: Optional[str] = None
    memo: Optional[str] = None
    user: Optional[EntityRef] = None
    category_id: Optional[int] = None
    tags: frozenset[TransactionTag] = field(default_factory=frozenset)
    transfer_pair_id: Optional[int] = None
    id: Optional[int] = None
    imported_at: Optional[datetime] = None


@dataclass(frozen=True)
class Category:
    """Category domain entity with hierarchical structure.

    ``user_id`` is None for system-wide categories.
    """

    id: int
    name: str
    ident: str
    category_type: CategoryType
    parent_id: Optional[int] = None
    sort_order: int = 0
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Snapshot:
    """Account balance at a point in time, used for reconciliation."""

    account: EntityRef
    date: date
    balance: Decimal
    source: SnapshotSource = SnapshotSource.PROVIDER
    id: Optional[int] = None


@dataclass(frozen=True)
class Credential:
    """Provider access secret for one user.

    The secret is opaque to the ingestion pipeline: a SimpleFIN access URL or a
    Plaid access token.
    """

    provider: Provider
    secret: str
    user_id: str = "default"

    def __repr__(self) -> str:
        return f"Credential(provider={self.provider.value!r}, user_id={self.user_id!r})"


@dataclass
class EntityBatch:
    """Entities committed together in one atomic upsert."""

    institutions: list[Institution] = field(default_factory=list)
    accounts: list[Account] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    snapshots: list[Snapshot] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.institutions or self.accounts or self.transactions or self.snapshots)


@dataclass(frozen=True)
class DuplicateCandidate:
    """A transaction that shares its duplicate key with other transactions."""

    transaction: Transaction
    group_size: int
    same_account: bool = False
