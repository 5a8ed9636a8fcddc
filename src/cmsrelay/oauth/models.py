# OAuth relay data models.
# Created: 2026-10-18

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Literal

RelayStatus = Literal["success", "error"]


@dataclass
class AccessToken:
    """Provider-issued access token. Lives for one callback request only."""

    access_token: str
    token_type: str = "bearer"
    scope: str = ""

    def __repr__(self) -> str:
        return f"AccessToken(token_type={self.token_type!r}, scope={self.scope!r})"


@dataclass
class RelayResult:
    """Outcome of a callback, as delivered to the CMS opener window."""

    provider: str
    status: RelayStatus
    content: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, provider: str, token: AccessToken) -> RelayResult:
        return cls(
            provider=provider,
            status="success",
            content={"token": token.access_token, "provider": provider},
        )

    @classmethod
    def failure(cls, provider: str, error: str, message: str = "") -> RelayResult:
        return cls(
            provider=provider,
            status="error",
            content={"provider": provider, "error": error, "message": message or error},
        )

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @property
    def message(self) -> str:
        """``authorization:<provider>:<status>:<json>`` as expected by the CMS."""
        payload = json.dumps(self.content, separators=(",", ":"))
        return f"authorization:{self.provider}:{self.status}:{payload}"

    @property
    def handshake(self) -> str:
        return f"authorizing:{self.provider}"
