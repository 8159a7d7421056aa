"""Runtime env parsing helpers used by API and launch entrypoints."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

# Story pages are public; any origin may embed or fetch them.
DEFAULT_CORS_ALLOW_ORIGINS: tuple[str, ...] = ("*",)

DEFAULT_ADMIN_USER = "admin"


@dataclass(frozen=True)
class SecuritySettings:
    """Auth/CORS runtime settings used by the API and the link shortener."""

    dev_mode: bool
    api_key: str
    admin_user: str
    cors_allow_origins: list[str]

    @property
    def shortener_enabled(self) -> bool:
        return bool(self.api_key)


def env_flag(name: str, default: bool = False, environ: Mapping[str, str] | None = None) -> bool:
    """Read boolean env values from common truthy/falsey forms."""
    env = os.environ if environ is None else environ
    val = env.get(name, "").strip().lower()
    if not val:
        return default
    return val in ("1", "true", "yes", "on")


def parse_cors_allowlist(raw: str, fallback: tuple[str, ...] = DEFAULT_CORS_ALLOW_ORIGINS) -> list[str]:
    origins = [o.strip() for o in raw.split(",") if o and o.strip()]
    if origins:
        return origins
    return list(fallback)


def load_security_settings(environ: Mapping[str, str] | None = None) -> SecuritySettings:
    env = os.environ if environ is None else environ
    return SecuritySettings(
        dev_mode=env_flag("PERSONALIZER_DEV_MODE", default=True, environ=env),
        api_key=env.get("PERSONALIZER_API_KEY", "").strip(),
        admin_user=env.get("PERSONALIZER_ADMIN_USER", "").strip() or DEFAULT_ADMIN_USER,
        cors_allow_origins=parse_cors_allowlist(env.get("PERSONALIZER_CORS_ALLOW_ORIGINS", "")),
    )


def check_startup_settings(settings: SecuritySettings) -> None:
    """Refuse to start outside dev mode without shortener credentials."""
    if settings.dev_mode:
        return
    if not settings.api_key:
        raise RuntimeError(
            "PERSONALIZER_API_KEY is required when PERSONALIZER_DEV_MODE=0."
        )
