"""Local and HTTP story sources."""
from __future__ import annotations

import asyncio

import httpx
import pytest

from backend.app.content.source import HttpStorySource, LocalStorySource, build_story_source
from backend.app.core.error_handling import SourceUnavailable


def test_local_source_reads_markdown(story_dir) -> None:
    text = asyncio.run(LocalStorySource(story_dir).fetch("island-of-almosts"))
    assert text.startswith("# The Island of Almosts")


def test_local_source_missing_file(tmp_path) -> None:
    with pytest.raises(SourceUnavailable):
        asyncio.run(LocalStorySource(tmp_path).fetch("absent"))


def test_local_source_undecodable_file(tmp_path) -> None:
    (tmp_path / "bad.md").write_bytes(b"He went \xff home")
    with pytest.raises(SourceUnavailable) as exc:
        asyncio.run(LocalStorySource(tmp_path).fetch("bad"))
    assert exc.value.message == "Story content not available"


def test_unsafe_key_rejected(tmp_path) -> None:
    with pytest.raises(SourceUnavailable):
        asyncio.run(LocalStorySource(tmp_path).fetch("../secrets"))


def _transport(status: int, body: str = "") -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/books/tale.md"
        return httpx.Response(status, text=body)

    return httpx.MockTransport(handler)


def test_http_source_success() -> None:
    source = HttpStorySource("https://assets.example.com/books/", transport=_transport(200, "# Tale"))
    assert source.url_for("tale") == "https://assets.example.com/books/tale.md"
    assert asyncio.run(source.fetch("tale")) == "# Tale"


def test_http_source_non_success_status() -> None:
    source = HttpStorySource("https://assets.example.com/books", transport=_transport(404))
    with pytest.raises(SourceUnavailable) as exc:
        asyncio.run(source.fetch("tale"))
    assert exc.value.reason == "HTTP 404"


def test_http_source_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    source = HttpStorySource("https://assets.example.com/books", transport=httpx.MockTransport(handler))
    with pytest.raises(SourceUnavailable):
        asyncio.run(source.fetch("tale"))


def test_build_story_source_selects_backend(tmp_path) -> None:
    assert isinstance(build_story_source(base_url="https://x.example.com"), HttpStorySource)
    local = build_story_source(base_url="", story_dir=tmp_path)
    assert isinstance(local, LocalStorySource)
    assert local.story_dir == tmp_path
