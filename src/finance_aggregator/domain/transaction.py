"""Transaction domain service."""

from typing import Optional
from datetime import date
from finance_aggregator.database.base import Database
from finance_aggregator.domain.duplicates import find_likely_duplicates
from finance_aggregator.domain.entities import (
    DuplicateCandidate,
    Transaction as TransactionEntity,
    TransactionTag,
)
from finance_aggregator.domain.errors import (
    NotFoundError,
    ValidationError,
    category_ident_not_found,
    category_not_found,
    transaction_not_found,
)


class TransactionService:
    """Service for browsing and categorizing transactions.

    Provider fields are read-only here; only category, tags and transfer
    pairing are user-editable.
    """

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def _require(self, transaction_id: int) -> TransactionEntity:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category_ident: Optional[str] = None,
        uncategorized: bool = False,
        user_id: Optional[str] = None,
    ) -> list[TransactionEntity]:
        """List transactions with optional filters.

        Raises:
            NotFoundError: If category_ident does not exist
        """
        category_id = None
        if category_ident is not None:
            category = self.db.get_category_by_ident(category_ident)
            if category is None:
                raise NotFoundError(category_ident_not_found(category_ident))
            category_id = category.id

        return self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
            category_id=category_id,
            uncategorized=uncategorized,
            user_id=user_id,
        )

    def update_category(self, transaction_id: int, category_id: Optional[int]) -> TransactionEntity:
        """Assign a category to a transaction, or remove it with None.

        Returns:
            The updated transaction

        Raises:
            NotFoundError: If transaction or category doesn't exist
        """
        self._require(transaction_id)
        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        self.db.update_transaction_category(transaction_id, category_id)
        return self._require(transaction_id)

    def update_tags(self, transaction_id: int, tags: set[TransactionTag | str]) -> TransactionEntity:
        """Replace the tags on a transaction.

        Raises:
            ValidationError: If a tag is not a known TransactionTag
        """
        self._require(transaction_id)
        try:
            parsed = {TransactionTag(tag) for tag in tags}
        except ValueError as e:
            valid = ", ".join(t.value for t in TransactionTag)
            raise ValidationError(f"{e}. Valid tags: {valid}") from e
        self.db.update_transaction_tags(transaction_id, parsed)
        return self._require(transaction_id)

    def link_transfer(self, transaction_id: int, other_id: int) -> None:
        """Mark two transactions as the two sides of one transfer.

        Both get the transfer tag.

        Raises:
            ValidationError: If the transactions are the same, or their amounts
                do not offset each other
        """
        if transaction_id == other_id:
            raise ValidationError("A transaction cannot be paired with itself")
        first = self._require(transaction_id)
        second = self._require(other_id)
        if first.amount != -second.amount:
            raise ValidationError(
                f"Transfer amounts must offset each other: {first.amount} and {second.amount}"
            )
        self.db.set_transfer_pair(transaction_id, other_id)
        for txn in (first, second):
            self.db.update_transaction_tags(txn.id, set(txn.tags) | {TransactionTag.TRANSFER})

    def unlink_transfer(self, transaction_id: int) -> None:
        """Remove a transfer pairing from both sides."""
        self._require(transaction_id)
        self.db.set_transfer_pair(transaction_id, None)

    def find_duplicates(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        user_id: Optional[str] = None,
    ) -> list[DuplicateCandidate]:
        """Find likely duplicate transactions among stored transactions."""
        transactions = self.db.list_transactions(start_date=start_date, end_date=end_date, user_id=user_id)
        return find_likely_duplicates(transactions)
