"""Key-value link store: slug -> JSON object (``{"target": ..., **data}``)."""
from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any

logger = logging.getLogger(__name__)


def _decode(slug: str, raw: str | None) -> dict[str, Any] | None:
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Link %s holds invalid JSON; ignoring", slug)
        return None
    return value if isinstance(value, dict) else None


def get_link(conn: sqlite3.Connection, slug: str) -> dict[str, Any] | None:
    row = conn.execute("SELECT value_json FROM links WHERE slug = ?", (slug,)).fetchone()
    if row is None:
        return None
    return _decode(slug, row["value_json"])


def put_link(conn: sqlite3.Connection, slug: str, value: dict[str, Any]) -> None:
    """Insert or overwrite ``slug``."""
    conn.execute(
        """
        INSERT INTO links (slug, value_json) VALUES (?, ?)
        ON CONFLICT(slug) DO UPDATE SET value_json = excluded.value_json, updated_at = datetime('now')
        """,
        (slug, json.dumps(value)),
    )
    conn.commit()


def list_links(conn: sqlite3.Connection) -> list[dict[str, Any]]:
    """All links as ``{"slug": ..., **value}``, ordered by slug; unreadable rows are skipped."""
    out: list[dict[str, Any]] = []
    for row in conn.execute("SELECT slug, value_json FROM links ORDER BY slug").fetchall():
        value = _decode(row["slug"], row["value_json"])
        if value:
            out.append({"slug": row["slug"], **value})
    return out
