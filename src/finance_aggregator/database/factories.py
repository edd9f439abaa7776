"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from finance_aggregator.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks
            FINANCE_AGGREGATOR_DB_PATH environment variable, then defaults to
            ~/.finance_aggregator/finance.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("FINANCE_AGGREGATOR_DB_PATH")

    if database_path is None:
        db_dir = Path.home() / ".finance_aggregator"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "finance.db")

    return SQLAlchemyDatabase(f"sqlite:///{database_path}")


def create_database(database_url: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a database from a SQLAlchemy URL.

    Falls back to FINANCE_AGGREGATOR_DATABASE_URL, then to the SQLite default.
    """
    database_url = database_url or os.environ.get("FINANCE_AGGREGATOR_DATABASE_URL")
    if database_url is None:
        return create_sqlite_database()
    return SQLAlchemyDatabase(database_url)
