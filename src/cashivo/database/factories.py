"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from cashivo.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV = "CASHIVO_DB_PATH"


def default_database_path() -> Path:
    """Location used when neither an explicit path nor CASHIVO_DB_PATH is set."""
    return Path.home() / ".cashivo" / "cashivo.db"


def resolve_database_path(database_path: Optional[str] = None) -> Path:
    """Pick the SQLite file: explicit path, then CASHIVO_DB_PATH, then the default.

    ``~`` is expanded and the parent directory is created if missing.
    """
    raw = database_path or os.environ.get(DB_PATH_ENV)
    path = Path(raw).expanduser() if raw else default_database_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks CASHIVO_DB_PATH
            environment variable, then defaults to ~/.cashivo/cashivo.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    return SQLAlchemyDatabase(f"sqlite:///{resolve_database_path(database_path)}")
