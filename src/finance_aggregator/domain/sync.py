"""Sync orchestration: fetch, transform and upsert provider data.

A sync run moves through PENDING -> FETCHING -> TRANSFORMING -> PERSISTING ->
COMPLETED. Failing to fetch from the provider at all ends the run in FAILED
with one top-level error. Record-level failures (malformed records, records
whose references cannot be resolved) are counted and collected, and the run
carries on with the remaining records.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional, Union

from finance_aggregator.database.base import Database
from finance_aggregator.domain.entities import Credential, EntityBatch
from finance_aggregator.domain.errors import DomainError, ProviderError
from finance_aggregator.logger import get_logger
from finance_aggregator.providers import ProviderAdapter, ProviderClient, get_adapter
from finance_aggregator.utils.date_parser import calculate_date_range

logger = get_logger(__name__)

DEFAULT_SYNC_MONTHS = 6


class SyncState(str, Enum):
    """State of a sync run."""

    PENDING = "pending"
    FETCHING = "fetching"
    TRANSFORMING = "transforming"
    PERSISTING = "persisting"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (SyncState.COMPLETED, SyncState.FAILED)


@dataclass
class SyncResult:
    """Success and failure counts of one sync run.

    Merging results is commutative for counts and errors, so per-record
    results can be folded in any order.
    """

    success: dict[str, int] = field(default_factory=dict)
    failed: dict[str, int] = field(default_factory=dict)
    errors: list[dict[str, Any]] = field(default_factory=list)
    state: SyncState = SyncState.PENDING

    @classmethod
    def for_kinds(cls, *kinds: str) -> "SyncResult":
        return cls(success={k: 0 for k in kinds}, failed={k: 0 for k in kinds})

    def transition(self, state: SyncState) -> None:
        if self.state.is_terminal:
            raise ValueError(f"Sync run already {self.state.value}")
        self.state = state

    def record_success(self, kind: str, count: int = 1) -> None:
        self.success[kind] = self.success.get(kind, 0) + count

    def record_failure(self, kind: str, message: str, context: Optional[dict[str, Any]] = None) -> None:
        self.failed[kind] = self.failed.get(kind, 0) + 1
        self.record_error(message, {"kind": kind, **(context or {})})

    def record_error(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        self.errors.append({"message": message, "context": context or {}})

    def fail(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        """End the run with a single top-level error."""
        self.record_error(message, context)
        self.state = SyncState.FAILED

    def merge(self, other: "SyncResult") -> None:
        for kind, count in other.success.items():
            self.success[kind] = self.success.get(kind, 0) + count
        for kind, count in other.failed.items():
            self.failed[kind] = self.failed.get(kind, 0) + count
        self.errors.extend(other.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": dict(self.success),
            "failed": dict(self.failed),
            "errors": list(self.errors),
            "state": self.state.value,
        }


def _error_context(error: Exception) -> dict[str, Any]:
    if isinstance(error, DomainError):
        return error.context()
    return {"type": type(error).__name__}


class SyncService:
    """Runs account and transaction syncs for one provider."""

    def __init__(self, db: Database, client: ProviderClient, adapter: Union[ProviderAdapter, str]):
        """Initialize sync service.

        Args:
            db: Database instance
            client: Provider API client
            adapter: Provider adapter, or a provider name to look one up
        """
        self.db = db
        self.client = client
        self.adapter = get_adapter(adapter) if isinstance(adapter, str) else adapter

    def sync_accounts(self, credential: Credential, as_of: Optional[date] = None) -> SyncResult:
        """Fetch institutions and accounts and upsert them.

        Each account (with its institution and balance snapshot) is committed
        on its own, so one bad account does not affect the others.

        Returns:
            SyncResult with ``institutions`` and ``accounts`` counts
        """
        result = SyncResult.for_kinds("institutions", "accounts")
        as_of = as_of or date.today()
        provider = self.adapter.provider.value

        result.transition(SyncState.FETCHING)
        try:
            feed = self.client.fetch_accounts(credential)
        except ProviderError as e:
            logger.error("Failed to fetch %s accounts: %s", provider, e)
            result.record_failure("institutions", str(e), _error_context(e))
            result.state = SyncState.FAILED
            return result

        for message in feed.errors:
            result.record_error(message, {"type": "ProviderMessage", "provider": provider})

        result.transition(SyncState.TRANSFORMING)
        batches: list[tuple[str, EntityBatch]] = []
        for raw in feed.accounts:
            account_id = raw.account.get("id") or raw.account.get("account_id")
            if self.adapter.should_skip_account(raw.account):
                logger.debug("Skipping %s account %s", provider, account_id)
                continue
            try:
                institution = self.adapter.parse_institution(raw.institution)
                account = self.adapter.parse_account(raw.account, institution.external_id, credential.user_id)
                snapshot = self.adapter.parse_snapshot(raw.account, as_of)
            except Exception as e:
                logger.warning("Failed to parse %s account %s: %s", provider, account_id, e)
                result.record_failure("accounts", str(e), {"account_id": account_id, **_error_context(e)})
                continue
            batch = EntityBatch(
                institutions=[institution],
                accounts=[account],
                snapshots=[snapshot] if snapshot is not None else [],
            )
            batches.append((account.external_id, batch))

        result.transition(SyncState.PERSISTING)
        institutions_seen: set[str] = set()
        for account_id, batch in batches:
            try:
                self.db.upsert(batch)
            except DomainError as e:
                logger.warning("Failed to store %s account %s: %s", provider, account_id, e)
                result.record_failure("accounts", str(e), {"account_id": account_id, **_error_context(e)})
                continue
            result.record_success("accounts")
            institution_id = batch.institutions[0].external_id
            if institution_id not in institutions_seen:
                institutions_seen.add(institution_id)
                result.record_success("institutions")

        result.transition(SyncState.COMPLETED)
        logger.info(
            "Synced %s accounts: %d institutions, %d accounts, %d failed",
            provider,
            result.success["institutions"],
            result.success["accounts"],
            result.failed["accounts"],
        )
        return result

    def sync_transactions(
        self,
        credential: Credential,
        months_back: int = DEFAULT_SYNC_MONTHS,
        end_date: Optional[Union[str, date]] = None,
    ) -> SyncResult:
        """Fetch transactions in the window ending at end_date and upsert them.

        Pending transactions are dropped. Transactions are committed one at a
        time; accounts must already have been synced.

        Returns:
            SyncResult with a ``transactions`` count
        """
        result = SyncResult.for_kinds("transactions")
        provider = self.adapter.provider.value
        window = calculate_date_range(months_back, end_date)
        start = date.fromisoformat(window["start_date"])
        end = date.fromisoformat(window["end_date"])

        result.transition(SyncState.FETCHING)
        try:
            feed = self.client.fetch_transactions(credential, start, end)
        except ProviderError as e:
            logger.error("Failed to fetch %s transactions: %s", provider, e)
            result.fail(str(e), {"start_date": window["start_date"], "end_date": window["end_date"], **_error_context(e)})
            return result

        for message in feed.errors:
            result.record_error(message, {"type": "ProviderMessage", "provider": provider})

        result.transition(SyncState.TRANSFORMING)
        parsed = []
        pending = 0
        for raw in feed.transactions:
            if raw.account is not None and self.adapter.should_skip_account(raw.account):
                continue
            record_id = raw.record.get("id") or raw.record.get("transaction_id")
            try:
                txn = self.adapter.parse_transaction(raw.record, credential.user_id, account_id=raw.account_id)
            except Exception as e:
                logger.warning("Failed to parse %s transaction %s: %s", provider, record_id, e)
                result.record_failure("transactions", str(e), {"transaction_id": record_id, **_error_context(e)})
                continue
            if txn is None:
                pending += 1
                continue
            parsed.append(txn)

        result.transition(SyncState.PERSISTING)
        for txn in parsed:
            try:
                self.db.upsert(EntityBatch(transactions=[txn]))
            except DomainError as e:
                logger.warning("Failed to store %s transaction %s: %s", provider, txn.external_id, e)
                result.record_failure(
                    "transactions", str(e), {"transaction_id": txn.external_id, **_error_context(e)}
                )
                continue
            result.record_success("transactions")

        result.transition(SyncState.COMPLETED)
        logger.info(
            "Synced %s transactions %s..%s: %d stored, %d failed, %d pending skipped",
            provider,
            window["start_date"],
            window["end_date"],
            result.success["transactions"],
            result.failed["transactions"],
            pending,
        )
        return result

    def sync_all(
        self,
        credential: Credential,
        months_back: int = DEFAULT_SYNC_MONTHS,
        end_date: Optional[Union[str, date]] = None,
    ) -> dict[str, SyncResult]:
        """Sync accounts, then transactions (which reference the accounts)."""
        accounts = self.sync_accounts(credential)
        transactions = self.sync_transactions(credential, months_back=months_back, end_date=end_date)
        return {"accounts": accounts, "transactions": transactions}
