"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any
from datetime import date

# Import entities directly to avoid circular import through domain/__init__.py
from finance_aggregator.domain.entities import (
    Account,
    Category,
    CategoryType,
    EntityBatch,
    Institution,
    Snapshot,
    Transaction,
    TransactionTag,
)


class Database(ABC):
    """Abstract database interface for finance_aggregator."""

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

    # Upsert
    @abstractmethod
    def upsert(self, batch: EntityBatch) -> dict[str, int]:
        """Insert or update a batch of entities atomically.

        Entities are keyed by their external ids. ``LookupRef`` references are
        resolved inside the same database transaction, after the entities they
        point at in the batch have been written, so a new account and its
        transactions can be submitted together. Re-upserting a transaction
        never overwrites its category or tags.

        Returns:
            Count of upserted entities per kind

        Raises:
            StorageConflict: If a reference cannot be resolved; nothing from the
                batch is committed
        """
        pass

    # Institution operations
    @abstractmethod
    def get_institution(self, external_id: str) -> Optional[Institution]:
        """Get institution by external ID."""
        pass

    @abstractmethod
    def list_institutions(self) -> list[Institution]:
        """List all institutions."""
        pass

    # Account operations
    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_external_id(self, external_id: str) -> Optional[Account]:
        """Get account by external ID."""
        pass

    @abstractmethod
    def list_accounts(self, user_id: Optional[str] = None) -> list[Account]:
        """List accounts, optionally only those owned by a user."""
        pass

    # Transaction operations
    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def get_transaction_by_external_id(self, external_id: str) -> Optional[Transaction]:
        """Get transaction by external ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        uncategorized: bool = False,
        user_id: Optional[str] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters.

        Args:
            start_date: Optional start date filter on the posted date
            end_date: Optional end date filter on the posted date
            account_id: Optional account ID filter
            category_id: Optional category ID filter
            uncategorized: If True, only return transactions without a category
            user_id: Optional owning user external ID filter
        """
        pass

    @abstractmethod
    def update_transaction_category(self, transaction_id: int, category_id: Optional[int]) -> None:
        """Update transaction category. None removes it."""
        pass

    @abstractmethod
    def update_transaction_tags(self, transaction_id: int, tags: set[TransactionTag]) -> None:
        """Replace the tags on a transaction."""
        pass

    @abstractmethod
    def set_transfer_pair(self, transaction_id: int, other_id: Optional[int]) -> None:
        """Link two transactions as one transfer, or unlink when other_id is None."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        name: str,
        ident: str,
        category_type: CategoryType,
        parent_id: Optional[int] = None,
        sort_order: int = 0,
        user_id: Optional[str] = None,
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_ident(self, ident: str) -> Optional[Category]:
        """Get category by its unique ident."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List all categories ordered by sort order and name."""
        pass

    @abstractmethod
    def update_category(self, category_id: int, **fields: Any) -> None:
        """Update category fields (name, ident, category_type, parent_id, sort_order)."""
        pass

    @abstractmethod
    def update_category_sort_orders(self, sort_orders: dict[int, int]) -> None:
        """Set the sort order of several categories in one commit.

        Raises NotFoundError, changing nothing, if any category is missing.
        """
        pass

    @abstractmethod
    def delete_category(self, category_id: int) -> None:
        """Delete a category."""
        pass

    @abstractmethod
    def count_category_transactions(self, category_id: int) -> int:
        """Count transactions assigned to a category."""
        pass

    # Snapshot operations
    @abstractmethod
    def list_snapshots(self, account_id: int) -> list[Snapshot]:
        """List balance snapshots for an account ordered by date."""
        pass

    # Stats
    @abstractmethod
    def count_entities(self) -> dict[str, int]:
        """Count institutions, accounts and transactions."""
        pass
