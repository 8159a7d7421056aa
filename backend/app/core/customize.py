"""Story customization pipeline.

metadata lookup -> request validation -> source fetch -> protagonist rewrite
(only when something changes) -> markdown render -> banner.

Every failure is terminal for the request and surfaces as a
``CustomizationError`` subclass; unexpected exceptions raised while rewriting
or rendering are logged and replaced by ``InternalRenderError`` so no internal
detail reaches the caller.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path

from backend.app.config import RENDER_ENGINE
from backend.app.constants import BANNER_PREFIX, TARGET_NAME_MAX_LENGTH
from backend.app.content.catalog import get_story_metadata
from backend.app.content.source import StorySource, build_story_source
from backend.app.core.class_injection import render_story_html
from backend.app.core.error_handling import (
    CustomizationError,
    InternalRenderError,
    InvalidPronounFamily,
    InvalidTargetName,
    StoryNotFound,
    log_error_with_context,
)
from backend.app.core.pronouns import (
    get_pronoun_family,
    is_valid_pronoun,
    normalize_pronoun_key,
    valid_pronoun_keys,
)
from backend.app.core.rewriter import rewrite_pronouns
from backend.app.models.story import RenderedStory, StoryMetadata

logger = logging.getLogger(__name__)

_TARGET_NAME_RE = re.compile(r"^[^\W\d_](?:[^\W\d_]|[' .-])*$")


def resolve_pronoun(requested: str | None, story: StoryMetadata) -> str:
    """Family id to render with; a missing value keeps the story's own family."""
    if requested is None or not str(requested).strip():
        return story.original_pronoun
    if not is_valid_pronoun(requested):
        raise InvalidPronounFamily(str(requested), valid_pronoun_keys())
    return normalize_pronoun_key(requested)


def normalize_target_name(requested: str | None) -> str | None:
    """Collapse whitespace; blank means "keep the original name"."""
    if requested is None:
        return None
    name = " ".join(str(requested).split())
    if not name:
        return None
    if len(name) > TARGET_NAME_MAX_LENGTH or not _TARGET_NAME_RE.match(name):
        raise InvalidTargetName(name)
    return name


def build_banner(story: StoryMetadata, target_name: str | None, pronoun: str) -> str:
    """Banner text describing what changed relative to the original story; empty when nothing did."""
    name_changed = bool(target_name) and target_name != story.original_name
    pronoun_changed = pronoun != story.original_pronoun
    family = get_pronoun_family(pronoun)

    if name_changed and pronoun_changed:
        text = f"Customized for {target_name} ({family.label})"
    elif name_changed:
        text = f"Customized for {target_name}"
    elif pronoun_changed:
        text = f"Using {family.label} pronouns"
    else:
        return ""
    return f"{BANNER_PREFIX}{text}"


def personalize_markdown(
    markdown_text: str,
    story: StoryMetadata,
    target_name: str | None,
    pronoun: str,
    engine: str = RENDER_ENGINE,
) -> str:
    """Rewrite (when needed) and render story markdown. Pure; no I/O."""
    name = target_name or story.original_name
    text = markdown_text
    if name != story.original_name or pronoun != story.original_pronoun:
        text = rewrite_pronouns(
            markdown_text,
            story.original_name,
            name,
            story.original_pronoun,
            pronoun,
        )
    return render_story_html(text, engine)


async def customize(
    story_key: str,
    target_name: str | None = None,
    target_pronoun: str | None = None,
    *,
    source: StorySource | None = None,
    engine: str = RENDER_ENGINE,
    catalog_path: Path | None = None,
) -> RenderedStory:
    """Produce the customized rendering of one story.

    Raises:
        StoryNotFound: unknown story key
        InvalidPronounFamily: unrecognized pronoun family id
        InvalidTargetName: name with characters outside letters, spaces, ' - .
        SourceUnavailable: the story's markdown could not be fetched
        InternalRenderError: anything unexpected while rewriting/rendering
    """
    story = get_story_metadata(story_key, catalog_path)
    if story is None:
        raise StoryNotFound(story_key)

    pronoun = resolve_pronoun(target_pronoun, story)
    name = normalize_target_name(target_name)

    story_source = source if source is not None else build_story_source()
    markdown_text = await story_source.fetch(story.key)

    try:
        html_fragment = personalize_markdown(markdown_text, story, name, pronoun, engine)
    except CustomizationError:
        raise
    except Exception as e:
        log_error_with_context(
            error=e,
            node_name="render",
            story_key=story.key,
            target_name=name,
            pronoun=pronoun,
            extra_context={"engine": engine},
        )
        raise InternalRenderError() from e

    banner = build_banner(story, name, pronoun)
    logger.info(
        "Customized story %s (name=%s, pronoun=%s, engine=%s, changed=%s)",
        story.key,
        name or story.original_name,
        pronoun,
        engine,
        bool(banner),
    )
    return RenderedStory(
        metadata=story,
        html=html_fragment,
        banner=banner,
        target_name=name if name and name != story.original_name else None,
        pronoun=pronoun,
    )
