"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from couplebucks.database.sqlalchemy_db import SQLAlchemyDatabase
from couplebucks.domain.changes import ChangeFeed


def default_data_dir() -> Path:
    """Return ~/.couplebucks, creating it if needed."""
    data_dir = Path.home() / ".couplebucks"
    data_dir.mkdir(exist_ok=True)
    return data_dir


def create_sqlite_database(
    database_path: Optional[str] = None, changes: Optional[ChangeFeed] = None
) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks COUPLEBUCKS_DB_PATH
            environment variable, then defaults to ~/.couplebucks/couplebucks.db
        changes: Optional change feed shared with other components

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("COUPLEBUCKS_DB_PATH")

    if database_path is None:
        database_path = str(default_data_dir() / "couplebucks.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url, changes=changes)
