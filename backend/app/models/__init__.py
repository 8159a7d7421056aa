"""Application models (story metadata, customization output, link payloads)."""
from .story import (
    CustomizationRequest,
    RenderedStory,
    ShortenRequest,
    StoryCatalogEntry,
    StoryCatalogResponse,
    StoryMetadata,
)

__all__ = [
    "CustomizationRequest",
    "RenderedStory",
    "ShortenRequest",
    "StoryCatalogEntry",
    "StoryCatalogResponse",
    "StoryMetadata",
]
