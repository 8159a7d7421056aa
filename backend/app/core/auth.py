"""HTTP Basic credential check for the link shortener's write endpoint."""
from __future__ import annotations

import base64
import binascii
import hmac

from shared.runtime_settings import SecuritySettings

BASIC_REALM = 'Basic realm="the-elsebeneath", charset="UTF-8"'


def _constant_time_equal(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def parse_basic_auth(header: str | None) -> tuple[str, str] | None:
    """Return (user, password) from an ``Authorization: Basic ...`` header, or None."""
    if not header:
        return None
    scheme, _, encoded = header.strip().partition(" ")
    if scheme != "Basic" or not encoded.strip():
        return None
    try:
        credentials = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    user, sep, password = credentials.partition(":")
    if not sep:
        return None
    return user, password


def check_basic_auth(header: str | None, settings: SecuritySettings) -> bool:
    """True when the header carries the admin user and the configured API key.

    Always False when no API key is configured.
    """
    if not settings.shortener_enabled:
        return False
    parsed = parse_basic_auth(header)
    if parsed is None:
        return False
    user, password = parsed
    user_ok = _constant_time_equal(user, settings.admin_user)
    pass_ok = _constant_time_equal(password, settings.api_key)
    return user_ok and pass_ok
