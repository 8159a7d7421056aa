"""Block-structured markdown -> HTML for story documents.

Deliberately small: headings (#, ##, ###), paragraphs, bullet and numbered
lists, blockquotes, scene breaks (``* * *``), and inline bold/italic/code.
Every block element carries a structural class from ``backend.app.constants``.
Text is HTML-escaped before it is wrapped, so story text never produces markup
of its own.
"""
from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass

from backend.app.constants import (
    BLOCKQUOTE_CLASS,
    BULLET_LIST_CLASS,
    HEADING_CLASSES,
    NUMBERED_LIST_CLASS,
    PARAGRAPH_CLASS,
    SCENE_BREAK_CLASS,
)

logger = logging.getLogger(__name__)

_HEADING_RE = re.compile(r"^(#{1,3}) (.*)$")
_QUOTE_PREFIX_RE = re.compile(r"^\s*> ?")
_BULLET_RE = re.compile(r"^\s*[*+-] (.*)$")
_NUMBERED_RE = re.compile(r"^\s*\d+\. (.*)$")
# "* * *", "---", "___": three or more of one marker, optionally spaced.
_SCENE_BREAK_RE = re.compile(r"^\s*([*_-])(?:[ \t]*\1){2,}[ \t]*$")

_CODE_SPAN_RE = re.compile(r"`([^`\n]+)`")
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_ITALIC_STAR_RE = re.compile(r"\*(.+?)\*")
# Underscores inside words (snake_case) are not emphasis.
_ITALIC_UNDERSCORE_RE = re.compile(r"(?<!\w)_(.+?)_(?!\w)")

LINE_BREAK = "<br>"


@dataclass(frozen=True)
class Block:
    """A blank-line separated unit; headings are rendered as soon as they are found."""

    text: str
    rendered: bool = False


def _escape(text: str) -> str:
    return html.escape(text, quote=False)


def render_heading(level: int, text: str) -> str:
    css_class = HEADING_CLASSES[level]
    return f'<h{level} class="{css_class}">{_escape(text.strip())}</h{level}>'


def split_blocks(markdown: str) -> list[Block]:
    """Headings first (line-anchored), then blank-line segmentation.

    A heading line always forms its own block, even without blank lines
    around it. Whitespace-only lines separate blocks; blocks are trimmed and
    empty ones dropped.
    """
    blocks: list[Block] = []
    pending: list[str] = []

    def _flush() -> None:
        chunk = "\n".join(pending).strip()
        pending.clear()
        if chunk:
            blocks.append(Block(chunk))

    for line in markdown.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        heading = _HEADING_RE.match(line)
        if heading:
            _flush()
            blocks.append(Block(render_heading(len(heading.group(1)), heading.group(2)), rendered=True))
            continue
        if not line.strip():
            _flush()
            continue
        pending.append(line)
    _flush()
    return blocks


def _is_blockquote(lines: list[str]) -> bool:
    return all(line.lstrip().startswith(">") for line in lines)


def render_blockquote(lines: list[str]) -> str:
    body = LINE_BREAK.join(_escape(_QUOTE_PREFIX_RE.sub("", line, count=1)) for line in lines)
    return f'<blockquote class="{BLOCKQUOTE_CLASS}">{body}</blockquote>'


def render_list(lines: list[str], item_re: re.Pattern[str], tag: str, css_class: str) -> str:
    items = []
    for line in lines:
        m = item_re.match(line)
        if m:
            items.append(f"<li>{_escape(m.group(1).strip())}</li>")
    inner = "\n".join(items)
    return f'<{tag} class="{css_class}">\n{inner}\n</{tag}>'


def render_paragraph(lines: list[str]) -> str:
    body = LINE_BREAK.join(_escape(line.strip()) for line in lines)
    return f'<p class="{PARAGRAPH_CLASS}">{body}</p>'


def render_block(block: Block) -> str:
    """Classify one block: heading, blockquote, scene break, bullet list, numbered list, paragraph."""
    if block.rendered:
        return block.text
    lines = block.text.split("\n")
    if _is_blockquote(lines):
        return render_blockquote(lines)
    if all(_SCENE_BREAK_RE.match(line) for line in lines):
        return "\n".join(f'<hr class="{SCENE_BREAK_CLASS}">' for _ in lines)
    if _BULLET_RE.match(lines[0]):
        return render_list(lines, _BULLET_RE, "ul", BULLET_LIST_CLASS)
    if _NUMBERED_RE.match(lines[0]):
        return render_list(lines, _NUMBERED_RE, "ol", NUMBERED_LIST_CLASS)
    return render_paragraph(lines)


def _emphasis(text: str) -> str:
    text = _BOLD_RE.sub(r"<strong>\1</strong>", text)
    text = _ITALIC_STAR_RE.sub(r"<em>\1</em>", text)
    return _ITALIC_UNDERSCORE_RE.sub(r"<em>\1</em>", text)


def apply_inline_formatting(fragment: str) -> str:
    """Code spans, then bold, then italic. Code span contents stay literal."""
    out: list[str] = []
    last = 0
    for m in _CODE_SPAN_RE.finditer(fragment):
        out.append(_emphasis(fragment[last:m.start()]))
        out.append(f"<code>{m.group(1)}</code>")
        last = m.end()
    out.append(_emphasis(fragment[last:]))
    return "".join(out)


def render_markdown(markdown: str) -> str:
    """Convert story markdown into an HTML fragment."""
    blocks = split_blocks(markdown or "")
    fragment = "\n".join(render_block(b) for b in blocks)
    return apply_inline_formatting(fragment)
