"""Library-backed markdown rendering and structural class injection.

Python-Markdown handles the fuller syntax (nested lists, links, images); the
resulting plain tags are then tagged with the same structural classes the
block renderer emits. Classes are merged into the parsed tag's class list, so
injecting twice is the same as injecting once.
"""
from __future__ import annotations

import logging
from typing import Mapping

import markdown as md
from bs4 import BeautifulSoup

from backend.app.constants import STRUCTURAL_CLASSES
from backend.app.core.markdown_renderer import render_markdown

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS: tuple[str, ...] = ("nl2br", "sane_lists")


def _class_list(value: object) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return value.split()
    return [str(v) for v in value]


def inject_classes(fragment: str, classes: Mapping[str, str] = STRUCTURAL_CLASSES) -> str:
    """Merge a structural class into every matching tag of ``fragment``."""
    soup = BeautifulSoup(fragment, "html.parser")
    for tag_name, css_class in classes.items():
        for tag in soup.find_all(tag_name):
            existing = _class_list(tag.get("class"))
            if css_class in existing:
                continue
            tag["class"] = existing + [css_class]
    return str(soup)


def render_markdown_full(markdown_text: str) -> str:
    """Render with Python-Markdown, then inject structural classes."""
    body = md.markdown(markdown_text or "", extensions=list(MARKDOWN_EXTENSIONS))
    return inject_classes(body)


def render_story_html(markdown_text: str, engine: str = "basic") -> str:
    """Render story markdown with the configured engine (``basic`` or ``markdown``)."""
    engine = (engine or "basic").strip().lower()
    if engine == "basic":
        return render_markdown(markdown_text)
    if engine == "markdown":
        return render_markdown_full(markdown_text)
    raise ValueError(f"Unknown render engine: {engine!r}")
