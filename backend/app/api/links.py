"""
FastAPI endpoints for the link shortener.
Public redirects and listing; creation is protected by HTTP Basic auth.
"""

import json
import logging
import re
import sqlite3

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from pydantic import ValidationError

from backend.app.config import PUBLIC_BASE_URL
from backend.app.core.auth import BASIC_REALM, check_basic_auth
from backend.app.db.connection import get_db
from backend.app.db.links import get_link, list_links, put_link
from backend.app.models.story import ShortenRequest
from shared.runtime_settings import SecuritySettings, load_security_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["links"])

_SLUG_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def get_security_settings() -> SecuritySettings:
    return load_security_settings()


@router.get("/to/api/all")
def list_all_links(conn: sqlite3.Connection = Depends(get_db)):
    """List every stored link with its slug."""
    return list_links(conn)


@router.get("/to/{slug}")
def follow_link(slug: str, conn: sqlite3.Connection = Depends(get_db)):
    """Redirect to the link's stored url (or target)."""
    data = get_link(conn, slug) or {}
    destination = data.get("url") or data.get("target")
    if not isinstance(destination, str) or not destination:
        raise HTTPException(status_code=404, detail="Thread not found.")
    return RedirectResponse(destination, status_code=302)


@router.post("/shorten")
async def shorten_link(
    request: Request,
    conn: sqlite3.Connection = Depends(get_db),
    settings: SecuritySettings = Depends(get_security_settings),
):
    """
    Store a new slug -> target link (optionally with extra data).
    Requires Basic auth as the admin user with the configured API key.
    """
    if not check_basic_auth(request.headers.get("Authorization"), settings):
        raise HTTPException(
            status_code=401,
            detail="Unauthorized.",
            headers={"WWW-Authenticate": BASIC_REALM},
        )

    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Invalid JSON body.")

    try:
        body = ShortenRequest.model_validate(payload)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid JSON body.")

    slug = body.slug.strip()
    target = body.target.strip()
    if not slug or not target:
        raise HTTPException(status_code=400, detail="Missing slug or target.")
    if not _SLUG_RE.match(slug):
        raise HTTPException(status_code=400, detail=f"Invalid slug: {slug}")

    put_link(conn, slug, {"target": target, **(body.data or {})})
    logger.info("Shortened %s -> %s", slug, target)
    return PlainTextResponse(f"Shortened: {PUBLIC_BASE_URL}/to/{slug}")
