"""Database statistics."""

from finance_aggregator.database.base import Database


class StatsService:
    """Counts of stored entities."""

    def __init__(self, db: Database):
        self.db = db

    def get_stats(self) -> dict[str, int]:
        """Return counts of institutions, accounts and transactions."""
        return self.db.count_entities()
