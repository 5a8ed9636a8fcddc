# OAuth client — authorize URL construction + code-for-token exchange.
# Created: 2026-10-18

from __future__ import annotations

import logging
import urllib.parse

import httpx

from cmsrelay.config import Settings
from cmsrelay.oauth.models import AccessToken

logger = logging.getLogger(__name__)

EXCHANGE_TIMEOUT = 15  # seconds


class TokenExchangeError(Exception):
    """The provider did not hand out an access token for the given code."""

    def __init__(self, error: str, description: str = ""):
        self.error = error
        self.description = description or error
        super().__init__(f"{error}: {self.description}")


class OAuthClient:
    """Authorization code flow against a GitHub-style provider.

    Supports:
    - Authorization URL generation
    - Code exchange for an access token (JSON response)

    No refresh, no retries, no token storage.
    """

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self._transport = transport

    def get_auth_url(self, state: str) -> str:
        """Generate the provider authorization URL.

        Args:
            state: Random correlation value echoed back on the callback.

        Returns:
            Authorization URL to redirect the popup to.
        """
        params = {
            "client_id": self.settings.oauth_client_id,
            "redirect_uri": self.settings.redirect_uri,
            "scope": " ".join(self.settings.scopes),
            "state": state,
        }
        return f"{self.settings.authorize_url}?{urllib.parse.urlencode(params)}"

    async def exchange_code(self, code: str) -> AccessToken:
        """Exchange an authorization code for an access token.

        Raises:
            TokenExchangeError: on network failure, non-2xx status, a provider
                error body, or a body without ``access_token``.
        """
        if not code:
            raise TokenExchangeError("missing_code", "No authorization code was provided")

        data = {
            "client_id": self.settings.oauth_client_id,
            "client_secret": self.settings.oauth_client_secret.get_secret_value(),
            "code": code,
            "redirect_uri": self.settings.redirect_uri,
            "scope": " ".join(self.settings.scopes),
        }

        try:
            async with httpx.AsyncClient(
                timeout=EXCHANGE_TIMEOUT, transport=self._transport
            ) as client:
                resp = await client.post(
                    self.settings.token_url,
                    data=data,
                    headers={"Accept": "application/json"},
                )
                resp.raise_for_status()
                body = resp.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Token endpoint %s returned HTTP %s", self.settings.token_url, e.response.status_code
            )
            raise TokenExchangeError(
                "token_request_failed",
                f"Token endpoint returned HTTP {e.response.status_code}",
            ) from e
        except httpx.HTTPError as e:
            logger.warning("Token request to %s failed: %s", self.settings.token_url, e)
            raise TokenExchangeError("token_request_failed", "Could not reach the provider") from e
        except ValueError as e:
            raise TokenExchangeError("invalid_response", "Provider response was not JSON") from e

        if not isinstance(body, dict):
            raise TokenExchangeError("invalid_response", "Provider response was not an object")

        # GitHub reports a bad code with HTTP 200 and an error body
        if body.get("error"):
            error = str(body["error"])
            description = str(body.get("error_description") or error)
            logger.warning("Provider rejected authorization code: %s", error)
            raise TokenExchangeError(error, description)

        access_token = body.get("access_token")
        if not access_token:
            raise TokenExchangeError("invalid_response", "Provider response had no access_token")

        logger.info("Exchanged authorization code via %s", self.settings.oauth_host)
        return AccessToken(
            access_token=str(access_token),
            token_type=str(body.get("token_type", "bearer")),
            scope=str(body.get("scope", "")),
        )
