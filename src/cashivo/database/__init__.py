"""Database layer for cashivo application."""

from cashivo.database.base import Database
from cashivo.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
