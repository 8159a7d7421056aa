"""Story metadata catalog loaded from stories.yaml, with module-level cache."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from backend.app.config import STORY_METADATA_PATH
from backend.app.models.story import StoryMetadata

logger = logging.getLogger(__name__)

_CATALOG_CACHE: dict[str, dict[str, StoryMetadata]] = {}


def _read_yaml(path: Path) -> Any:
    return yaml.safe_load(path.read_text(encoding="utf-8"))


def _coerce_entries(data: Any) -> list[dict[str, Any]]:
    """Accept either ``stories: [...]`` or a mapping of key -> fields."""
    if not isinstance(data, dict):
        return []
    stories = data.get("stories", data)
    if isinstance(stories, list):
        return [s for s in stories if isinstance(s, dict)]
    if isinstance(stories, dict):
        out = []
        for key, fields in stories.items():
            if isinstance(fields, dict):
                out.append({"key": key, **fields})
        return out
    return []


def load_story_catalog(path: Path | None = None) -> dict[str, StoryMetadata]:
    """Load all story definitions, keyed by story key."""
    catalog_path = Path(path) if path is not None else STORY_METADATA_PATH
    cache_key = str(catalog_path)
    cached = _CATALOG_CACHE.get(cache_key)
    if cached is not None:
        return cached

    if not catalog_path.exists():
        logger.warning("Story catalog missing: %s", catalog_path)
        return {}

    stories: dict[str, StoryMetadata] = {}
    for entry in _coerce_entries(_read_yaml(catalog_path)):
        try:
            story = StoryMetadata.model_validate(entry)
        except ValidationError as e:
            # Log validation errors but don't crash
            logger.warning(f"Failed to validate story {entry.get('key')}: {e}")
            continue
        if story.key in stories:
            logger.warning("Duplicate story key %s in %s; keeping the first entry", story.key, catalog_path)
            continue
        stories[story.key] = story

    logger.info("Loaded %d stories from %s", len(stories), catalog_path)
    _CATALOG_CACHE[cache_key] = stories
    return stories


def get_story_metadata(story_key: str, path: Path | None = None) -> StoryMetadata | None:
    """Return metadata for ``story_key``, or None when the key is unknown."""
    return load_story_catalog(path).get((story_key or "").strip())


def list_stories(path: Path | None = None) -> list[StoryMetadata]:
    return sorted(load_story_catalog(path).values(), key=lambda s: s.key)


def clear_story_cache() -> None:
    """Drop cached catalogs (tests, reloads)."""
    _CATALOG_CACHE.clear()
