"""Provider adapter and client interfaces."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional, Protocol

from finance_aggregator.domain.entities import (
    Account,
    Credential,
    Institution,
    Provider,
    Snapshot,
    Transaction,
)


@dataclass
class RawAccount:
    """One account record as fetched, with the institution it belongs to."""

    institution: dict[str, Any]
    account: dict[str, Any]


@dataclass
class RawTransaction:
    """One transaction record as fetched.

    ``account`` is the raw account record when the provider nests
    transactions under accounts (SimpleFIN), otherwise None.
    """

    account_id: Optional[str]
    record: dict[str, Any]
    account: Optional[dict[str, Any]] = None


@dataclass
class AccountFeed:
    accounts: list[RawAccount] = field(default_factory=list)
    # Partial failures the provider reported alongside the data
    errors: list[str] = field(default_factory=list)


@dataclass
class TransactionFeed:
    transactions: list[RawTransaction] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class ProviderAdapter(Protocol):
    """Pure transforms from one provider's payloads to canonical entities."""

    provider: Provider

    def parse_institution(self, raw: dict[str, Any]) -> Institution:
        ...

    def parse_account(self, raw: dict[str, Any], institution_id: str, user_id: str) -> Account:
        ...

    def parse_transaction(
        self, raw: dict[str, Any], user_id: str, account_id: Optional[str] = None
    ) -> Optional[Transaction]:
        """Return None when the provider marks the record pending."""
        ...

    def parse_snapshot(self, raw: dict[str, Any], as_of: date) -> Optional[Snapshot]:
        ...

    def should_skip_account(self, raw: dict[str, Any]) -> bool:
        ...


class ProviderClient(Protocol):
    """Fetches raw payloads from a provider API.

    Implementations raise ProviderError when the provider cannot be reached.
    """

    def fetch_accounts(self, credential: Credential) -> AccountFeed:
        ...

    def fetch_transactions(self, credential: Credential, start_date: date, end_date: date) -> TransactionFeed:
        ...
