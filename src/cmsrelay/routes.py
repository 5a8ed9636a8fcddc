# Relay router — index, authorize redirect, callback relay page.
# Created: 2026-10-18

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from cmsrelay.config import Settings
from cmsrelay.oauth.client import OAuthClient, TokenExchangeError
from cmsrelay.oauth.models import RelayResult
from cmsrelay.oauth.state import (
    STATE_COOKIE,
    STATE_COOKIE_MAX_AGE,
    generate_state,
    verify_state,
)
from cmsrelay.relay import render_login_page, render_relay_page
from cmsrelay.security import cache_headers, get_nonce, no_store

logger = logging.getLogger(__name__)

router = APIRouter()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_oauth_client(request: Request) -> OAuthClient:
    return request.app.state.oauth_client


@router.get("/")
async def index(settings: Settings = Depends(get_app_settings)):
    """Status probe, or a login link when INDEX_PAGE=login."""
    if settings.index_page == "login":
        return HTMLResponse(render_login_page(settings))
    return cache_headers(JSONResponse({"status": "OK"}))


@router.get("/auth")
async def auth(
    settings: Settings = Depends(get_app_settings),
    oauth: OAuthClient = Depends(get_oauth_client),
):
    """Redirect the CMS popup to the provider's authorize endpoint."""
    if not settings.has_credentials:
        logger.warning("OAUTH_CLIENT_ID/OAUTH_CLIENT_SECRET not set; the provider will reject")

    state = generate_state()
    response = RedirectResponse(oauth.get_auth_url(state), status_code=302)
    response.set_cookie(
        STATE_COOKIE,
        state,
        max_age=STATE_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.redirect_uri.startswith("https://"),
    )
    return no_store(response)


@router.get("/callback", response_class=HTMLResponse)
async def callback(
    request: Request,
    code: str | None = Query(None),
    state: str | None = Query(None),
    error: str | None = Query(None),
    error_description: str | None = Query(None),
    settings: Settings = Depends(get_app_settings),
    oauth: OAuthClient = Depends(get_oauth_client),
):
    """Exchange the code and render the postMessage relay page.

    Every outcome, success or failure, is delivered as a 200 HTML page so the
    opener always receives an ``authorization:<provider>:<status>:...`` message.
    """
    state_ok = verify_state(request.cookies.get(STATE_COOKIE), state)
    result = await _resolve(settings, oauth, code, state_ok, error, error_description)

    html = render_relay_page(result, settings, get_nonce(request))
    response = HTMLResponse(html)
    # a forged callback must not wipe the cookie of a flow still in progress
    if state_ok:
        response.delete_cookie(STATE_COOKIE, path="/")
    return no_store(response)


async def _resolve(
    settings: Settings,
    oauth: OAuthClient,
    code: str | None,
    state_ok: bool,
    error: str | None,
    error_description: str | None,
) -> RelayResult:
    provider = settings.provider

    if error:
        logger.warning("Provider redirected with error: %s", error)
        return RelayResult.failure(provider, error, error_description or "")

    if not code:
        logger.warning("Callback without authorization code")
        return RelayResult.failure(provider, "missing_code", "No authorization code was provided")

    if settings.oauth_state_check and not state_ok:
        logger.warning("OAuth state mismatch on callback")
        return RelayResult.failure(
            provider, "state_mismatch", "Authorization state did not match; please retry"
        )

    try:
        token = await oauth.exchange_code(code)
    except TokenExchangeError as e:
        return RelayResult.failure(provider, e.error, e.description)

    return RelayResult.success(provider, token)
