"""Pytest setup: point the link store and credentials at a throwaway workspace."""
from __future__ import annotations

import os
import shutil
import sqlite3
import tempfile
from pathlib import Path

import pytest

_TMP_ROOT = Path(tempfile.gettempdir()) / "personalizer-tests"
_REPO_ROOT = Path(__file__).resolve().parents[2]

TEST_API_KEY = "test-api-key"

# Set before any backend module reads its config.
os.environ["PERSONALIZER_DB_PATH"] = str(_TMP_ROOT / "session.db")
os.environ["PERSONALIZER_API_KEY"] = TEST_API_KEY
os.environ.pop("PERSONALIZER_STORY_SOURCE_URL", None)
os.environ.pop("PERSONALIZER_RENDER_ENGINE", None)


def pytest_sessionstart(session) -> None:
    """Start every session with an empty temp workspace."""
    shutil.rmtree(_TMP_ROOT, ignore_errors=True)
    _TMP_ROOT.mkdir(parents=True, exist_ok=True)


@pytest.fixture
def story_dir() -> Path:
    return _REPO_ROOT / "data" / "books"


@pytest.fixture
def catalog_path() -> Path:
    return _REPO_ROOT / "data" / "static" / "stories.yaml"


@pytest.fixture(autouse=True)
def _fresh_story_catalog():
    from backend.app.content.catalog import clear_story_cache

    clear_story_cache()
    yield
    clear_story_cache()


@pytest.fixture
def link_db(tmp_path: Path) -> str:
    from backend.app.db.migrate import apply_schema

    db_path = str(tmp_path / "links.db")
    apply_schema(db_path)
    return db_path


@pytest.fixture
def client(link_db: str, story_dir: Path):
    """TestClient with the link store on a per-test database and stories read from data/books."""
    from fastapi.testclient import TestClient

    from backend.app.api.stories import get_story_source
    from backend.app.content.source import LocalStorySource
    from backend.app.db.connection import get_connection, get_db
    from backend.main import app

    def _test_db():
        conn = get_connection(link_db)
        try:
            yield conn
        finally:
            conn.close()

    app.dependency_overrides[get_db] = _test_db
    app.dependency_overrides[get_story_source] = lambda: LocalStorySource(story_dir)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def link_conn(link_db: str):
    conn = sqlite3.connect(link_db)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()
