# Response hardening — per-request CSP nonce, security headers, cache helper.
# Created: 2026-10-18

from __future__ import annotations

import secrets

from fastapi import Request, Response

BROWSER_MAX_AGE = 60 * 60
CDN_MAX_AGE = 60 * 60 * 24


def new_nonce() -> str:
    return secrets.token_hex(16)


def get_nonce(request: Request) -> str:
    """Nonce assigned to this request by ``security_headers_middleware``."""
    nonce = getattr(request.state, "csp_nonce", None)
    if nonce is None:
        nonce = new_nonce()
        request.state.csp_nonce = nonce
    return nonce


def content_security_policy(nonce: str) -> str:
    return (
        "default-src 'self'; "
        f"script-src 'self' 'nonce-{nonce}'; "
        "object-src 'none'; "
        "base-uri 'self'; "
        "form-action 'self'; "
        "frame-ancestors 'none'"
    )


def cache_headers(response: Response) -> Response:
    """Mark a response as publicly cacheable by browsers and CDNs."""
    response.headers["Cache-Control"] = (
        f"public, max-age={BROWSER_MAX_AGE}, s-maxage={CDN_MAX_AGE}"
    )
    return response


def no_store(response: Response) -> Response:
    response.headers["Cache-Control"] = "no-store"
    return response


async def security_headers_middleware(request: Request, call_next):
    """Add security headers to all responses."""
    nonce = get_nonce(request)
    response = await call_next(request)
    response.headers["Content-Security-Policy"] = content_security_policy(nonce)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "no-referrer"
    # HSTS only when accessed via HTTPS (reverse proxy or direct TLS)
    if request.url.scheme == "https" or request.headers.get("x-forwarded-proto") == "https":
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response
