"""SQLite connection factory for the link store.

Provides configured connections with the sqlite3.Row row factory
(dict-like access). The schema is applied at API startup.
"""
import sqlite3
from collections.abc import Generator
from pathlib import Path


def get_connection(db_path: str) -> sqlite3.Connection:
    """Return a configured SQLite connection.

    Args:
        db_path: Path to the SQLite database file. Parent directories
                 are created if they do not exist.

    Note:
        The connection does not auto-close; callers must close it.
    """
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    return conn


def get_db() -> Generator[sqlite3.Connection, None, None]:
    """FastAPI dependency that yields a SQLite connection.

    Uses DEFAULT_DB_PATH from project config. The connection is
    closed when the request finishes.
    """
    from backend.app.config import DEFAULT_DB_PATH

    conn = get_connection(DEFAULT_DB_PATH)
    try:
        yield conn
    finally:
        conn.close()
