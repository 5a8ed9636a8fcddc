# OAuth authorization-code flow pieces used by the relay routes.
# Created: 2026-10-18

from cmsrelay.oauth.client import OAuthClient, TokenExchangeError
from cmsrelay.oauth.models import AccessToken, RelayResult
from cmsrelay.oauth.state import generate_state, verify_state

__all__ = [
    "AccessToken",
    "OAuthClient",
    "RelayResult",
    "TokenExchangeError",
    "generate_state",
    "verify_state",
]
