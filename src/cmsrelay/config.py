# Relay configuration — immutable settings read from the environment once at startup.
# Created: 2026-10-18

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Literal
from urllib.parse import urlsplit

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

WILDCARD_ORIGIN = "*"

_SPLIT_RE = re.compile(r"[\s,]+")

_DEFAULT_PORTS = {"http": 80, "https": 443}


class InsecureOriginError(RuntimeError):
    """The postMessage origin allow-list would hand tokens to any window."""


def split_list(raw: str) -> list[str]:
    """Split a comma and/or whitespace separated env value into entries."""
    return [part for part in _SPLIT_RE.split(raw.strip()) if part]


def normalize_origin(value: str) -> str:
    """Return ``scheme://host[:port]`` for an exact origin, or raise ValueError.

    A single trailing slash is tolerated; any other path, query or fragment is not.
    """
    candidate = value.strip()
    if candidate.endswith("/"):
        candidate = candidate[:-1]

    parts = urlsplit(candidate)
    if parts.scheme not in ("http", "https"):
        raise ValueError(f"Origin must use http or https: {value!r}")
    if not parts.hostname:
        raise ValueError(f"Origin is missing a host: {value!r}")
    if parts.path or parts.query or parts.fragment or parts.username or parts.password:
        raise ValueError(f"Origin must be scheme://host[:port] only: {value!r}")

    try:
        port = parts.port
    except ValueError as e:
        raise ValueError(f"Origin has an invalid port: {value!r}") from e

    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    # browsers report default ports without the port number
    if port is None or _DEFAULT_PORTS[parts.scheme] == port:
        return f"{parts.scheme}://{host}"
    return f"{parts.scheme}://{host}:{port}"


class Settings(BaseSettings):
    """Process-wide relay configuration.

    Field names map to environment variables case-insensitively
    (``oauth_client_id`` <- ``OAUTH_CLIENT_ID``). Instances are frozen.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    host: str = "0.0.0.0"
    port: int = Field(default=4000, ge=1, le=65535)

    redirect_uri: str = "http://localhost:4000/callback"
    scope: str = "repo,user"
    provider: str = Field(default="github", pattern=r"^[A-Za-z0-9_.-]+$")
    origin: str = ""

    oauth_client_id: str = ""
    oauth_client_secret: SecretStr = SecretStr("")
    oauth_host: str = "github.com"
    oauth_authorize_path: str = "/login/oauth/authorize"
    oauth_token_path: str = "/login/oauth/access_token"
    oauth_state_check: bool = True

    index_page: Literal["status", "login"] = "status"
    node_env: str = "development"
    log_level: str = "INFO"

    @field_validator("origin")
    @classmethod
    def _validate_origin(cls, value: str) -> str:
        entries = []
        for entry in split_list(value):
            entries.append(entry if entry == WILDCARD_ORIGIN else normalize_origin(entry))
        return ",".join(dict.fromkeys(entries))

    @field_validator("node_env")
    @classmethod
    def _lower_env(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @field_validator("oauth_host")
    @classmethod
    def _strip_host(cls, value: str) -> str:
        host = value.strip().rstrip("/")
        for prefix in ("https://", "http://"):
            if host.startswith(prefix):
                host = host[len(prefix):]
        return host

    @field_validator("oauth_authorize_path", "oauth_token_path")
    @classmethod
    def _leading_slash(cls, value: str) -> str:
        return value if value.startswith("/") else f"/{value}"

    # -- derived values ------------------------------------------------------

    @property
    def allowed_origins(self) -> tuple[str, ...]:
        """Exact origins that may receive the token (wildcard excluded)."""
        return tuple(o for o in split_list(self.origin) if o != WILDCARD_ORIGIN)

    @property
    def allow_any_origin(self) -> bool:
        return WILDCARD_ORIGIN in split_list(self.origin)

    @property
    def scopes(self) -> tuple[str, ...]:
        return tuple(split_list(self.scope))

    @property
    def is_production(self) -> bool:
        return self.node_env == "production"

    @property
    def authorize_url(self) -> str:
        return f"https://{self.oauth_host}{self.oauth_authorize_path}"

    @property
    def token_url(self) -> str:
        return f"https://{self.oauth_host}{self.oauth_token_path}"

    @property
    def has_credentials(self) -> bool:
        return bool(self.oauth_client_id and self.oauth_client_secret.get_secret_value())


@lru_cache
def get_settings() -> Settings:
    """Load settings from the environment (cached for the process lifetime)."""
    return Settings()


def check_origin_config(settings: Settings) -> None:
    """Startup safety check for the postMessage origin allow-list.

    A wildcard or empty allow-list only warns in development. In production it
    raises InsecureOriginError so the server never starts listening.
    """
    if settings.allow_any_origin:
        problem = "ORIGIN contains '*'; tokens would be relayed to any window"
    elif not settings.allowed_origins:
        problem = "ORIGIN is empty; no window is allowed to receive tokens"
    else:
        return

    if settings.is_production:
        logger.error("Refusing to start in production: %s", problem)
        raise InsecureOriginError(problem)

    logger.warning("Insecure origin configuration: %s", problem)
