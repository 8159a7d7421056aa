"""Schema migration: applies numbered SQL files from migrations/ in order.

Idempotent: each migration name is recorded in schema_migrations and applied once.

Usage:
    python -m backend.app.db.migrate --db ./data/personalizer.db
"""
import argparse
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

SCHEMA_MIGRATIONS_TABLE = """
CREATE TABLE IF NOT EXISTS schema_migrations (
  name TEXT PRIMARY KEY,
  applied_at TEXT NOT NULL
);
"""

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def _migration_files() -> list[Path]:
    """Return sorted list of .sql files in migrations/ (0001_*.sql, 0002_*.sql, ...)."""
    if not MIGRATIONS_DIR.exists():
        return []
    return sorted(MIGRATIONS_DIR.glob("*.sql"))


def applied_migrations(conn: sqlite3.Connection) -> set[str]:
    conn.executescript(SCHEMA_MIGRATIONS_TABLE)
    rows = conn.execute("SELECT name FROM schema_migrations").fetchall()
    return {row[0] for row in rows}


def apply_schema(db_path: str) -> list[str]:
    """Apply all pending migrations in order; return the names applied by this call."""
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path))
    applied_now: list[str] = []
    try:
        done = applied_migrations(conn)
        conn.commit()
        for fp in _migration_files():
            name = fp.stem  # e.g. 0001_links
            if name in done:
                continue
            conn.executescript(fp.read_text(encoding="utf-8"))
            conn.execute(
                "INSERT INTO schema_migrations (name, applied_at) VALUES (?, ?)",
                (name, datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()
            applied_now.append(name)
            logger.info("Applied migration %s to %s", name, path)
    finally:
        conn.close()
    return applied_now


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Apply migrations to the link store SQLite database."
    )
    parser.add_argument(
        "--db",
        type=str,
        default="./data/personalizer.db",
        help="Path to SQLite database file",
    )
    args = parser.parse_args()
    applied = apply_schema(args.db)
    print(f"Migrations applied: {args.db} ({len(applied)} new)")


if __name__ == "__main__":
    main()
