"""Full HTML page around a rendered story fragment.

The page template and stylesheet live in ``templates/`` and are read once per
process.
"""
from __future__ import annotations

import html
import json
from functools import lru_cache
from pathlib import Path
from string import Template

from backend.app.config import TEMPLATE_DIR
from backend.app.constants import BANNER_CLASS
from backend.app.models.story import RenderedStory

_PAGE_TEMPLATE = "story_page.html"
_STYLESHEET = "story.css"


def _template_path(name: str) -> Path:
    return TEMPLATE_DIR / name


@lru_cache(maxsize=8)
def load_template(name: str) -> str:
    return _template_path(name).read_text(encoding="utf-8")


def _script_literal(value: str) -> str:
    # "</" would end the inline <script> early.
    return json.dumps(value).replace("</", "<\\/")


def page_title(story: RenderedStory) -> str:
    title = story.metadata.title
    if story.target_name:
        return f"{title} - {story.target_name}'s Version"
    return title


def render_banner(banner_text: str) -> str:
    if not banner_text:
        return ""
    return f'<div class="{BANNER_CLASS}">{html.escape(banner_text)}</div>'


def render_page(story: RenderedStory) -> str:
    """Wrap the story fragment in the document shell."""
    page = Template(load_template(_PAGE_TEMPLATE))
    return page.substitute(
        page_title=html.escape(page_title(story)),
        description=html.escape(story.metadata.description),
        css=load_template(_STYLESHEET).rstrip("\n"),
        banner=render_banner(story.banner),
        content=story.html,
        title_json=_script_literal(story.metadata.title),
        customized_for_json=_script_literal(story.target_name or ""),
    )
