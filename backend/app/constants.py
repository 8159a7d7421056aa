"""Centralized presentation constants shared across the app."""
from __future__ import annotations

# Structural classes: every rendering path tags these elements so the story
# stylesheet applies uniformly.
CHAPTER_CLASS = "chapter-title"
SECTION_CLASS = "section-title"
SUBSECTION_CLASS = "subsection-title"
PARAGRAPH_CLASS = "story-text"
BLOCKQUOTE_CLASS = "callout"
BULLET_LIST_CLASS = "bullet-list"
NUMBERED_LIST_CLASS = "numbered-list"
IMAGE_CLASS = "story-image"
SCENE_BREAK_CLASS = "scene-break"

HEADING_CLASSES: dict[int, str] = {
    1: CHAPTER_CLASS,
    2: SECTION_CLASS,
    3: SUBSECTION_CLASS,
}

STRUCTURAL_CLASSES: dict[str, str] = {
    "h1": CHAPTER_CLASS,
    "h2": SECTION_CLASS,
    "h3": SUBSECTION_CLASS,
    "p": PARAGRAPH_CLASS,
    "ul": BULLET_LIST_CLASS,
    "ol": NUMBERED_LIST_CLASS,
    "blockquote": BLOCKQUOTE_CLASS,
    "img": IMAGE_CLASS,
    "hr": SCENE_BREAK_CLASS,
}

# Customization banner
BANNER_CLASS = "customization-banner"
BANNER_PREFIX = "✨ "

# Target names: letters first, then letters, spaces, apostrophes, hyphens, periods.
TARGET_NAME_MAX_LENGTH = 40
