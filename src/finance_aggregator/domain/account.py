"""Account domain service."""

from typing import Optional
from finance_aggregator.database.base import Database
from finance_aggregator.domain.entities import Account as AccountEntity, Snapshot as SnapshotEntity
from finance_aggregator.domain.errors import NotFoundError


class AccountService:
    """Service for browsing synced accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def get_account_by_external_id(self, external_id: str) -> Optional[AccountEntity]:
        """Get account by the provider's account ID."""
        return self.db.get_account_by_external_id(external_id)

    def list_accounts(self, user_id: Optional[str] = None) -> list[AccountEntity]:
        """List accounts, optionally only those of one user."""
        return self.db.list_accounts(user_id=user_id)

    def resolve_account(self, account: str | int) -> int:
        """Resolve an account ID or external ID to an account ID.

        Raises:
            NotFoundError: If no account matches
        """
        if isinstance(account, int) or str(account).isdigit():
            found = self.db.get_account(int(account))
            if found is not None:
                return found.id
        found = self.db.get_account_by_external_id(str(account))
        if found is None:
            raise NotFoundError(f"Account '{account}' not found")
        return found.id

    def balance_history(self, account_id: int) -> list[SnapshotEntity]:
        """Balance snapshots recorded for an account, oldest first."""
        if self.db.get_account(account_id) is None:
            raise NotFoundError(f"Account {account_id} not found")
        return self.db.list_snapshots(account_id)
