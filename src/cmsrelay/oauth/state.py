# OAuth state parameter — generated on /auth, round-tripped in a cookie, checked on /callback.
# Created: 2026-10-18

from __future__ import annotations

import secrets

STATE_COOKIE = "cms_oauth_state"
STATE_COOKIE_MAX_AGE = 10 * 60  # seconds


def generate_state() -> str:
    """Return 16 random bytes as 32 hex characters."""
    return secrets.token_hex(16)


def verify_state(expected: str | None, received: str | None) -> bool:
    """Constant-time comparison; both values must be present."""
    if not expected or not received:
        return False
    return secrets.compare_digest(expected.encode(), received.encode())
