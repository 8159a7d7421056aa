"""Document shell around rendered story fragments."""
from __future__ import annotations

from backend.app.core.document_shell import page_title, render_banner, render_page
from backend.app.models.story import RenderedStory, StoryMetadata

_META = StoryMetadata(
    key="island-of-almosts",
    title="The Island of Almosts",
    description="A magical adventure about finding your way home.",
    original_name="Sam",
    original_pronoun="he",
)


def _story(**overrides) -> RenderedStory:
    fields = {
        "metadata": _META,
        "html": '<p class="story-text">They went home.</p>',
        "banner": "",
        "target_name": None,
        "pronoun": "he",
    }
    fields.update(overrides)
    return RenderedStory(**fields)


def test_page_wraps_fragment_with_metadata() -> None:
    page = render_page(_story())
    assert page.startswith("<!DOCTYPE html>")
    assert "<title>The Island of Almosts</title>" in page
    assert 'content="A magical adventure about finding your way home."' in page
    assert '<p class="story-text">They went home.</p>' in page
    assert ".story-text" in page
    assert 'window.storyTitle = "The Island of Almosts";' in page
    assert 'window.customizedFor = "";' in page
    assert "customization-banner" not in page


def test_page_title_names_the_reader() -> None:
    story = _story(target_name="Riley", banner="✨ Customized for Riley")
    assert page_title(story) == "The Island of Almosts - Riley's Version"
    page = render_page(story)
    assert "The Island of Almosts - Riley&#x27;s Version" in page
    assert '<div class="customization-banner">✨ Customized for Riley</div>' in page
    assert 'window.customizedFor = "Riley";' in page


def test_banner_is_escaped() -> None:
    assert render_banner("") == ""
    assert render_banner("<i>x</i>") == '<div class="customization-banner">&lt;i&gt;x&lt;/i&gt;</div>'


def test_script_values_cannot_close_the_script_tag() -> None:
    meta = _META.model_copy(update={"title": "</script><b>x"})
    page = render_page(_story(metadata=meta))
    assert "</script><b>" not in page
    assert '"<\\/script><b>x"' in page
