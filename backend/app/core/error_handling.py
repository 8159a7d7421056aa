"""Error handling utilities: customization error taxonomy, structured logging and error responses."""
from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class CustomizationError(Exception):
    """Base class for request-terminal customization failures.

    ``status_code`` is the HTTP equivalent; ``error_code`` is the stable
    machine-readable identifier placed in error responses.
    """

    status_code = 500
    error_code = "CUSTOMIZATION_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class StoryNotFound(CustomizationError):
    status_code = 404
    error_code = "STORY_NOT_FOUND"

    def __init__(self, story_key: str) -> None:
        super().__init__(f'Story "{story_key}" not found', {"story_key": story_key})
        self.story_key = story_key


class InvalidPronounFamily(CustomizationError):
    status_code = 400
    error_code = "INVALID_PRONOUN"

    def __init__(self, pronoun: str, valid: list[str]) -> None:
        choices = ", ".join(valid[:-1]) + f", or {valid[-1]}" if len(valid) > 1 else "".join(valid)
        super().__init__(
            f'Invalid pronoun "{pronoun}". Use: {choices}',
            {"pronoun": pronoun, "valid": list(valid)},
        )
        self.pronoun = pronoun
        self.valid = list(valid)


class InvalidTargetName(CustomizationError):
    status_code = 400
    error_code = "INVALID_NAME"

    def __init__(self, name: str) -> None:
        super().__init__(
            "Invalid name. Use letters, spaces, apostrophes, hyphens or periods.",
            {"name": name},
        )
        self.name = name


class SourceUnavailable(CustomizationError):
    status_code = 503
    error_code = "SOURCE_UNAVAILABLE"

    def __init__(self, story_key: str, reason: str = "") -> None:
        # The reason is kept for logs only; callers see a generic message.
        super().__init__("Story content not available", {"story_key": story_key})
        self.story_key = story_key
        self.reason = reason


class InternalRenderError(CustomizationError):
    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self) -> None:
        super().__init__("Internal Server Error")


def log_error_with_context(
    error: Exception,
    node_name: str,
    story_key: str | None = None,
    target_name: str | None = None,
    pronoun: str | None = None,
    extra_context: dict[str, Any] | None = None,
) -> None:
    """
    Log an error with full context: story key, requested customization, stage name, and stack trace.

    Args:
        error: The exception that occurred
        node_name: Pipeline stage or endpoint (e.g., 'rewrite', 'render', 'links')
        story_key: Story key for context
        target_name: Requested protagonist name
        pronoun: Requested pronoun family id
        extra_context: Additional context dict to include in log
    """
    context_parts = []
    if story_key:
        context_parts.append(f"story={story_key}")
    if target_name:
        context_parts.append(f"name={target_name}")
    if pronoun:
        context_parts.append(f"pronoun={pronoun}")
    context_str = ", ".join(context_parts) if context_parts else "no context"

    extra = {}
    if extra_context:
        extra.update(extra_context)
    if story_key:
        extra["story_key"] = story_key
    if pronoun:
        extra["pronoun"] = pronoun
    extra["node_name"] = node_name

    logger.error(
        f"[{node_name}] Error: {type(error).__name__}: {str(error)} ({context_str})",
        exc_info=error,
        extra=extra,
    )


def create_error_response(
    error_code: str,
    message: str,
    node: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Create a structured error response for API endpoints.

    Args:
        error_code: Error code (e.g., 'STORY_NOT_FOUND', 'STORY_HTTP_404')
        message: Human-readable error message
        node: Endpoint group where error occurred
        details: Additional error details

    Returns:
        Structured error dict
    """
    response: dict[str, Any] = {
        "error_code": error_code,
        "message": message,
    }
    if node:
        response["node"] = node
    if details:
        response["details"] = details
    return response
