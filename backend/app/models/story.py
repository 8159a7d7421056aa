"""
Story models: catalog metadata, customization requests, rendered output,
and the link shortener payloads.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend.app.core.pronouns import PRONOUN_FAMILIES, normalize_pronoun_key


class StoryMetadata(BaseModel):
    """Static story definition from stories.yaml."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str = Field(..., min_length=1, description="URL key (e.g., island-of-almosts)")
    title: str = Field(..., description="Display title")
    description: str = Field("", description="Short blurb used for meta/og tags")
    original_name: str = Field(..., min_length=1, alias="originalName", description="Protagonist name as written")
    original_pronoun: str = Field("he", alias="originalPronoun", description="Pronoun family the story is written in")

    @field_validator("key")
    @classmethod
    def _strip_key(cls, value: str) -> str:
        return value.strip()

    @field_validator("original_pronoun")
    @classmethod
    def _known_pronoun(cls, value: str) -> str:
        key = normalize_pronoun_key(value)
        if key not in PRONOUN_FAMILIES:
            raise ValueError(f"unknown pronoun family '{value}'")
        return key


class CustomizationRequest(BaseModel):
    """One story customization (query parameters ``n`` and ``p``)."""
    story_key: str
    target_name: Optional[str] = Field(None, description="Replacement protagonist name")
    target_pronoun: Optional[str] = Field(None, description="Replacement pronoun family id")


class RenderedStory(BaseModel):
    """Output of a customization: HTML fragment plus the banner describing the change."""
    model_config = ConfigDict(frozen=True)

    metadata: StoryMetadata
    html: str
    banner: str = ""
    target_name: Optional[str] = Field(None, description="Name shown in the page title (None = original)")
    pronoun: str = Field(..., description="Pronoun family the rendered text uses")

    @property
    def customized(self) -> bool:
        return bool(self.banner)


class StoryCatalogEntry(BaseModel):
    """Public catalog row for GET /stories."""
    key: str
    title: str
    description: str
    original_name: str
    original_pronoun: str


class StoryCatalogResponse(BaseModel):
    stories: List[StoryCatalogEntry] = Field(default_factory=list)
    pronouns: List[str] = Field(default_factory=list)


class ShortenRequest(BaseModel):
    """POST /shorten body."""
    slug: str = ""
    target: str = ""
    data: Optional[Dict[str, Any]] = None
