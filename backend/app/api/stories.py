"""
FastAPI endpoints for story customization.
Serves customized story pages and the public story catalog.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from backend.app.config import CACHE_MAX_AGE, current_render_engine
from backend.app.content.catalog import list_stories
from backend.app.content.source import StorySource, build_story_source
from backend.app.core.customize import customize
from backend.app.core.document_shell import render_page
from backend.app.core.pronouns import valid_pronoun_keys
from backend.app.models.story import CustomizationRequest, StoryCatalogEntry, StoryCatalogResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["stories"])


def get_story_source() -> StorySource:
    """Story source dependency (overridden in tests)."""
    return build_story_source()


def get_render_engine() -> str:
    return current_render_engine()


@router.get("/stories", response_model=StoryCatalogResponse)
def list_story_catalog():
    """List customizable stories and the accepted pronoun families."""
    entries = [
        StoryCatalogEntry(
            key=s.key,
            title=s.title,
            description=s.description,
            original_name=s.original_name,
            original_pronoun=s.original_pronoun,
        )
        for s in list_stories()
    ]
    return StoryCatalogResponse(stories=entries, pronouns=valid_pronoun_keys())


@router.get("/in/to/{story_key}", response_class=HTMLResponse)
async def customized_story(
    story_key: str,
    n: Optional[str] = Query(None, description="Protagonist name to use"),
    p: Optional[str] = Query(None, description="Pronoun family: he, she or they"),
    source: StorySource = Depends(get_story_source),
    engine: str = Depends(get_render_engine),
):
    """
    Render a story with the protagonist renamed and/or re-pronouned.
    Errors propagate as CustomizationError and are shaped by the app's handler.
    """
    req = CustomizationRequest(story_key=story_key, target_name=n, target_pronoun=p)
    story = await customize(req.story_key, req.target_name, req.target_pronoun, source=source, engine=engine)
    return HTMLResponse(
        content=render_page(story),
        headers={
            "Cache-Control": f"public, max-age={CACHE_MAX_AGE}",
            "Access-Control-Allow-Origin": "*",
        },
        media_type="text/html;charset=UTF-8",
    )
