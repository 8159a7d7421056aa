"""Customization pipeline: validation, rewrite, render, banner and error taxonomy."""
from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from backend.app.content.source import LocalStorySource
from backend.app.core import customize as customize_module
from backend.app.core.customize import build_banner, customize, normalize_target_name, resolve_pronoun
from backend.app.core.error_handling import (
    InternalRenderError,
    InvalidPronounFamily,
    InvalidTargetName,
    SourceUnavailable,
    StoryNotFound,
)
from backend.app.models.story import StoryMetadata

_CATALOG = """\
stories:
  - key: tiny
    title: Tiny Tale
    description: Short.
    original_name: Sam
    original_pronoun: he
  - key: lost
    title: Lost Tale
    original_name: Kim
    original_pronoun: she
"""


@pytest.fixture
def tiny(tmp_path: Path):
    (tmp_path / "tiny.md").write_text("# Title\n\nHe went home.", encoding="utf-8")
    catalog = tmp_path / "stories.yaml"
    catalog.write_text(_CATALOG, encoding="utf-8")
    return LocalStorySource(tmp_path), catalog


def _run(source, catalog, key="tiny", name=None, pronoun=None, engine="basic"):
    return asyncio.run(customize(key, name, pronoun, source=source, engine=engine, catalog_path=catalog))


def test_pronoun_only_customization(tiny) -> None:
    story = _run(*tiny, pronoun="they")
    assert story.html == '<h1 class="chapter-title">Title</h1>\n<p class="story-text">They went home.</p>'
    assert story.banner == "✨ Using they/them pronouns"
    assert story.target_name is None
    assert story.pronoun == "they"
    assert story.customized


def test_no_customization_renders_original(tiny) -> None:
    story = _run(*tiny)
    assert "He went home." in story.html
    assert story.banner == ""
    assert not story.customized


def test_same_values_as_original_are_not_a_change(tiny) -> None:
    story = _run(*tiny, name="Sam", pronoun="he")
    assert story.banner == ""
    assert story.target_name is None


def test_name_and_pronoun_banner(tiny) -> None:
    story = _run(*tiny, name="Riley", pronoun="she")
    assert story.banner == "✨ Customized for Riley (she/her)"
    assert story.target_name == "Riley"
    assert "She went home." in story.html


def test_name_only_banner(tiny) -> None:
    story = _run(*tiny, name="  Riley  ")
    assert story.banner == "✨ Customized for Riley"
    assert story.pronoun == "he"


def test_markdown_engine(tiny) -> None:
    story = _run(*tiny, pronoun="she", engine="markdown")
    assert '<p class="story-text">She went home.</p>' in story.html


def test_unknown_story(tiny) -> None:
    with pytest.raises(StoryNotFound) as exc:
        _run(*tiny, key="nope")
    assert exc.value.status_code == 404
    assert exc.value.message == 'Story "nope" not found'


def test_invalid_pronoun_lists_choices(tiny) -> None:
    with pytest.raises(InvalidPronounFamily) as exc:
        _run(*tiny, pronoun="xyz")
    assert exc.value.status_code == 400
    assert exc.value.valid == ["he", "she", "they"]
    assert exc.value.message == 'Invalid pronoun "xyz". Use: he, she, or they'


def test_invalid_name(tiny) -> None:
    with pytest.raises(InvalidTargetName):
        _run(*tiny, name="<b>Riley</b>")


def test_missing_source_is_unavailable(tiny) -> None:
    with pytest.raises(SourceUnavailable) as exc:
        _run(*tiny, key="lost")
    assert exc.value.status_code == 503
    assert exc.value.message == "Story content not available"


def test_unexpected_render_failure_is_generic(tiny, monkeypatch) -> None:
    def _boom(*args, **kwargs):
        raise RuntimeError("template exploded")

    monkeypatch.setattr(customize_module, "render_story_html", _boom)
    with pytest.raises(InternalRenderError) as exc:
        _run(*tiny, pronoun="they")
    assert exc.value.status_code == 500
    assert "exploded" not in exc.value.message


def test_bundled_story_she_to_he(story_dir, catalog_path) -> None:
    story = _run(LocalStorySource(story_dir), catalog_path, key="dragon-keeper", pronoun="he")
    assert "He had promised himself he would see the egg" in story.html
    assert "warm under his hands" in story.html
    assert "It was his to protect now" in story.html


def test_resolve_pronoun_defaults_to_original() -> None:
    story = StoryMetadata(key="k", title="T", original_name="Alex", original_pronoun="she")
    assert resolve_pronoun(None, story) == "she"
    assert resolve_pronoun("  ", story) == "she"
    assert resolve_pronoun("THEY", story) == "they"


def test_normalize_target_name() -> None:
    assert normalize_target_name(None) is None
    assert normalize_target_name("   ") is None
    assert normalize_target_name(" Mary   Jane ") == "Mary Jane"
    assert normalize_target_name("O'Neil-Smith Jr.") == "O'Neil-Smith Jr."
    assert normalize_target_name("Zoë") == "Zoë"
    with pytest.raises(InvalidTargetName):
        normalize_target_name("R2D2")
    with pytest.raises(InvalidTargetName):
        normalize_target_name("x" * 41)


def test_build_banner_unchanged_and_pronoun_only() -> None:
    story = StoryMetadata(key="k", title="T", original_name="Sam", original_pronoun="he")
    assert build_banner(story, None, "he") == ""
    assert build_banner(story, "Sam", "they") == "✨ Using they/them pronouns"
