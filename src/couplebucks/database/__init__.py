"""Database layer for couplebucks application."""

from couplebucks.database.base import Database
from couplebucks.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
