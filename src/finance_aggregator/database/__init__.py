"""Database layer for finance_aggregator application."""

from finance_aggregator.database.base import Database
from finance_aggregator.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
