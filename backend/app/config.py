"""App config: data paths, story source selection, rendering engine, env overrides.

Story source: PERSONALIZER_STORY_SOURCE_URL (remote static assets) takes priority
over PERSONALIZER_STORY_DIR (local markdown files).
"""
from __future__ import annotations

import logging
import os

from shared.config import (
    DATA_ROOT,
    RENDER_ENGINE,
    SOURCE_TIMEOUT_SECONDS,
    STORY_DIR,
    STORY_METADATA_PATH,
    STORY_SOURCE_URL,
    TEMPLATE_DIR,
    _env_int,
)

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = os.environ.get("PERSONALIZER_DB_PATH", "").strip() or str(DATA_ROOT / "personalizer.db")

# Story pages are static for a given query string; let browsers and CDNs keep them for an hour.
CACHE_MAX_AGE = _env_int("PERSONALIZER_CACHE_MAX_AGE", 3600)

# Used in the "Shortened: ..." confirmation returned by POST /shorten
PUBLIC_BASE_URL = os.environ.get("PERSONALIZER_PUBLIC_BASE_URL", "https://thrd.me").strip().rstrip("/")

RENDER_ENGINES: tuple[str, ...] = ("basic", "markdown")


def resolved_config() -> dict[str, str]:
    """Effective configuration (no secrets) for startup logs and `personalizer doctor`."""
    return {
        "data_root": str(DATA_ROOT),
        "db_path": DEFAULT_DB_PATH,
        "story_dir": str(STORY_DIR),
        "story_metadata": str(STORY_METADATA_PATH),
        "story_source": STORY_SOURCE_URL or f"file://{STORY_DIR}",
        "source_timeout": f"{SOURCE_TIMEOUT_SECONDS:g}s",
        "render_engine": RENDER_ENGINE,
        "template_dir": str(TEMPLATE_DIR),
        "cache_max_age": str(CACHE_MAX_AGE),
    }


def _log_resolved_config() -> None:
    """Log resolved config at startup (no secrets)."""
    lines = ["Personalizer config:"]
    for key, value in resolved_config().items():
        lines.append(f"  {key}={value}")
    logger.info("\n".join(lines))
    if RENDER_ENGINE not in RENDER_ENGINES:
        logger.warning(
            "Unknown PERSONALIZER_RENDER_ENGINE=%r (expected one of %s)",
            RENDER_ENGINE,
            ", ".join(RENDER_ENGINES),
        )


def current_render_engine() -> str:
    """Render engine from the live environment (lets `personalizer serve --engine` apply after import)."""
    return os.environ.get("PERSONALIZER_RENDER_ENGINE", "").strip().lower() or RENDER_ENGINE
