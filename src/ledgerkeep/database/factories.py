"""Database factory functions."""

import os
from pathlib import Path
from typing import Optional

from ledgerkeep.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV = "LEDGERKEEP_DB_PATH"
DEFAULT_DB_PATH = Path.home() / ".ledgerkeep" / "ledgerkeep.db"


def resolve_database_path(database_path: Optional[str] = None) -> Path:
    """Pick the ledger file: explicit path, then $LEDGERKEEP_DB_PATH, then the default.

    The parent directory is created if missing.
    """
    raw = database_path or os.environ.get(DB_PATH_ENV)
    path = Path(raw).expanduser() if raw else DEFAULT_DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite-backed ledger store.

    Args:
        database_path: Path to the SQLite file; see resolve_database_path

    Returns:
        SQLAlchemyDatabase instance
    """
    return SQLAlchemyDatabase(f"sqlite:///{resolve_database_path(database_path)}")
