"""Shared configuration constants used by the backend and the CLI."""
from __future__ import annotations

import os
from pathlib import Path


def _env_flag(name: str, default: bool = False) -> bool:
    """Read boolean env flag."""
    val = os.environ.get(name, "").strip().lower()
    if not val:
        return default
    return val in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# Project root: resolve relative to this file's location
_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _resolve_path(raw: str, default: Path) -> Path:
    if not raw:
        return default
    p = Path(raw)
    if p.is_absolute():
        return p
    return _PROJECT_ROOT / p


# Data directories (shared) - use absolute paths to avoid CWD dependency
DATA_ROOT = _resolve_path(os.environ.get("PERSONALIZER_DATA_ROOT", "").strip(), _PROJECT_ROOT / "data")
STORY_DIR = _resolve_path(os.environ.get("PERSONALIZER_STORY_DIR", "").strip(), DATA_ROOT / "books")
STORY_METADATA_PATH = _resolve_path(
    os.environ.get("PERSONALIZER_STORY_METADATA", "").strip(),
    DATA_ROOT / "static" / "stories.yaml",
)
TEMPLATE_DIR = _PROJECT_ROOT / "templates"

# Remote story assets: when set, stories are fetched as {url}/{key}.md instead of read from STORY_DIR
STORY_SOURCE_URL = os.environ.get("PERSONALIZER_STORY_SOURCE_URL", "").strip().rstrip("/")
SOURCE_TIMEOUT_SECONDS = float(_env_int("PERSONALIZER_SOURCE_TIMEOUT", 10))

# Rendering: "basic" (block renderer) or "markdown" (Python-Markdown + class injection)
RENDER_ENGINE = os.environ.get("PERSONALIZER_RENDER_ENGINE", "basic").strip().lower() or "basic"
