"""Story sources: where the raw markdown of a story comes from.

``LocalStorySource`` reads ``<story_dir>/<key>.md``; ``HttpStorySource`` fetches
``<base_url>/<key>.md`` from a static asset host. Both raise
``SourceUnavailable`` instead of returning partial content; nothing is retried.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Protocol

import httpx

from backend.app.config import SOURCE_TIMEOUT_SECONDS, STORY_DIR, STORY_SOURCE_URL
from backend.app.core.error_handling import SourceUnavailable

logger = logging.getLogger(__name__)

_SAFE_KEY_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")


def _checked_key(story_key: str) -> str:
    key = (story_key or "").strip()
    if not _SAFE_KEY_RE.match(key):
        raise SourceUnavailable(story_key, reason="unsafe story key")
    return key


class StorySource(Protocol):
    async def fetch(self, story_key: str) -> str:
        """Return the raw markdown for ``story_key`` or raise SourceUnavailable."""
        ...


class LocalStorySource:
    """Markdown files on disk, one per story key."""

    def __init__(self, story_dir: Path | str = STORY_DIR) -> None:
        self.story_dir = Path(story_dir)

    def path_for(self, story_key: str) -> Path:
        return self.story_dir / f"{_checked_key(story_key)}.md"

    async def fetch(self, story_key: str) -> str:
        path = self.path_for(story_key)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Story file unavailable: %s (%s)", path, e)
            raise SourceUnavailable(story_key, reason=str(e)) from e

    def __repr__(self) -> str:
        return f"LocalStorySource({str(self.story_dir)!r})"


class HttpStorySource:
    """Static markdown assets served over HTTP."""

    def __init__(
        self,
        base_url: str,
        timeout: float = SOURCE_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def url_for(self, story_key: str) -> str:
        return f"{self.base_url}/{_checked_key(story_key)}.md"

    async def fetch(self, story_key: str) -> str:
        url = self.url_for(story_key)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(url)
        except httpx.HTTPError as e:
            logger.warning("Story fetch failed: %s (%s)", url, e)
            raise SourceUnavailable(story_key, reason=str(e)) from e
        if not resp.is_success:
            logger.warning("Story fetch returned HTTP %d: %s", resp.status_code, url)
            raise SourceUnavailable(story_key, reason=f"HTTP {resp.status_code}")
        return resp.text

    def __repr__(self) -> str:
        return f"HttpStorySource({self.base_url!r})"


def build_story_source(base_url: str | None = None, story_dir: Path | str | None = None) -> StorySource:
    """Source selected by config: remote assets when a base URL is set, else local files."""
    url = STORY_SOURCE_URL if base_url is None else base_url
    if url:
        return HttpStorySource(url)
    return LocalStorySource(story_dir if story_dir is not None else STORY_DIR)
