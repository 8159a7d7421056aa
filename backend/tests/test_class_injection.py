"""Structural class injection and the library-backed render engine."""
from __future__ import annotations

import re

import pytest

from backend.app.core.class_injection import inject_classes, render_markdown_full, render_story_html


def test_inject_adds_class() -> None:
    assert inject_classes("<p>x</p>") == '<p class="story-text">x</p>'


def test_inject_is_idempotent() -> None:
    once = inject_classes("<h1>T</h1><blockquote>q</blockquote><ul><li>a</li></ul>")
    twice = inject_classes(once)
    assert once == twice
    assert once.count("chapter-title") == 1
    assert 'class="callout"' in once
    assert 'class="bullet-list"' in once


def test_inject_merges_with_existing_class() -> None:
    assert inject_classes('<p class="lead">x</p>') == '<p class="lead story-text">x</p>'
    assert inject_classes('<p class="story-text">x</p>') == '<p class="story-text">x</p>'


def test_inject_tags_images() -> None:
    out = inject_classes('<p><img src="map.png" alt="map"></p>')
    assert 'class="story-image"' in out
    assert 'src="map.png"' in out


def test_markdown_engine_output() -> None:
    out = render_markdown_full("# Title\n\nHe went home.")
    assert '<h1 class="chapter-title">Title</h1>' in out
    assert '<p class="story-text">He went home.</p>' in out


def test_markdown_engine_numbered_list() -> None:
    out = render_markdown_full("1. a\n2. b")
    assert '<ol class="numbered-list">' in out
    assert "<li>a</li>" in out


def _classes(fragment: str) -> set[str]:
    return set(re.findall(r'class="([^"]+)"', fragment))


def test_engines_agree_on_structural_classes() -> None:
    src = "# T\n\n## S\n\nText.\n\n> q\n\n- a\n- b\n\n1. x\n2. y"
    assert _classes(render_story_html(src, "basic")) == _classes(render_story_html(src, "markdown"))


def test_unknown_engine_rejected() -> None:
    with pytest.raises(ValueError):
        render_story_html("x", "textile")


def test_markdown_engine_scene_break() -> None:
    assert 'class="scene-break"' in render_markdown_full("Before.\n\n* * *\n\nAfter.")
