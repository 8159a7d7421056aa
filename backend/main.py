"""FastAPI main application: story customization and link shortener."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from backend.app.api import links as links_api, stories as stories_api
from backend.app.config import DEFAULT_DB_PATH, STORY_DIR, STORY_METADATA_PATH, STORY_SOURCE_URL, _log_resolved_config
from backend.app.content.catalog import list_stories
from backend.app.core.error_handling import CustomizationError, create_error_response, log_error_with_context
from backend.app.db.migrate import apply_schema
from shared.runtime_settings import check_startup_settings, load_security_settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SECURITY = load_security_settings()

APP_VERSION = "1.0.0"


def _collect_environment_diagnostics() -> dict:
    """Collect structured environment diagnostics for /health/detail."""
    checks: dict[str, dict] = {}

    stories = list_stories()
    checks["story_catalog"] = {
        "ok": len(stories) > 0,
        "path": str(STORY_METADATA_PATH),
        "stories": len(stories),
    }

    if STORY_SOURCE_URL:
        checks["story_source"] = {"ok": True, "url": STORY_SOURCE_URL}
    else:
        missing = [s.key for s in stories if not (STORY_DIR / f"{s.key}.md").exists()]
        checks["story_source"] = {
            "ok": STORY_DIR.is_dir() and not missing,
            "path": str(STORY_DIR),
            "missing": missing,
        }

    db_path = Path(DEFAULT_DB_PATH)
    checks["link_store"] = {"ok": db_path.exists(), "path": str(db_path)}

    overall_ok = all(v.get("ok", False) for v in checks.values())
    return {"ok": overall_ok, "checks": checks}


def _validate_environment() -> None:
    """Log environment health checks at startup. Never fails; missing pieces only degrade."""
    diag = _collect_environment_diagnostics()
    for name, check in diag["checks"].items():
        if check.get("ok"):
            logger.info("Check %s: ok (%s)", name, check.get("path") or check.get("url", ""))
        else:
            logger.warning("Check %s: NOT ok %s", name, check)
    if not SECURITY.shortener_enabled:
        logger.warning("PERSONALIZER_API_KEY not set: POST /shorten will reject every request")


@asynccontextmanager
async def lifespan(app: FastAPI):
    check_startup_settings(SECURITY)
    apply_schema(DEFAULT_DB_PATH)
    _log_resolved_config()
    _validate_environment()
    logger.info(
        "API startup complete (dev_mode=%s, shortener=%s, db=%s)",
        SECURITY.dev_mode,
        "enabled" if SECURITY.shortener_enabled else "disabled",
        DEFAULT_DB_PATH,
    )
    yield


app = FastAPI(title="Story Personalizer API", version=APP_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=SECURITY.cors_allow_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


def _node_for_path(path: str) -> str:
    if path.startswith("/in/to/") or path.startswith("/stories"):
        return "story"
    if path.startswith("/to/") or path == "/shorten":
        return "links"
    return "api"


@app.exception_handler(CustomizationError)
async def customization_exception_handler(request: Request, exc: CustomizationError):
    """Map customization failures to their HTTP status with a structured body."""
    error_response = create_error_response(
        error_code=exc.error_code,
        message=exc.message,
        node=_node_for_path(request.url.path),
        details={
            "status_code": exc.status_code,
            "path": request.url.path,
            **exc.details,
        },
    )
    return JSONResponse(status_code=exc.status_code, content=error_response)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTPExceptions with structured error responses."""
    node = _node_for_path(request.url.path)
    error_response = create_error_response(
        error_code=f"{node.upper()}_HTTP_{exc.status_code}",
        message=exc.detail,
        node=node,
        details={
            "status_code": exc.status_code,
            "path": request.url.path,
        },
    )
    return JSONResponse(status_code=exc.status_code, content=error_response, headers=exc.headers)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler: log with context, answer with a generic 500."""
    node = _node_for_path(request.url.path)
    log_error_with_context(
        error=exc,
        node_name=node,
        story_key=request.path_params.get("story_key") if hasattr(request, "path_params") else None,
        extra_context={
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
        },
    )
    # No exception text in the body: internals stay in the logs.
    error_response = create_error_response(
        error_code=f"{node.upper()}_ERROR",
        message="Internal Server Error",
        node=node,
        details={"path": request.url.path},
    )
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=error_response)


app.include_router(stories_api.router)
app.include_router(links_api.router)


@app.get("/")
async def root():
    return {"message": "Story Personalizer API", "version": APP_VERSION}


@app.get("/health")
async def health():
    return {"status": "healthy"}


@app.get("/health/detail")
async def health_detail():
    """Structured readiness diagnostics for deployment checks."""
    diag = _collect_environment_diagnostics()
    return {"status": "healthy" if diag.get("ok") else "degraded", **diag}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
