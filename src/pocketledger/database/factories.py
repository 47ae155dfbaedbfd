"""Database factory functions for creating database instances."""

from pathlib import Path
from typing import Optional

from pocketledger.config import Settings
from pocketledger.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, defaults to
            ~/.pocketledger/pocketledger.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        db_dir = Path.home() / ".pocketledger"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "pocketledger.db")

    return SQLAlchemyDatabase(f"sqlite:///{database_path}")


def create_database(settings: Settings) -> SQLAlchemyDatabase:
    """Create the database backend selected by settings.

    The backend is resolved once here; callers receive a single
    ``Database`` and never look for alternatives.
    """
    if settings.database_url:
        return SQLAlchemyDatabase(settings.database_url)
    return create_sqlite_database(settings.database_path)
