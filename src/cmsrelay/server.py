"""FastAPI application factory and uvicorn runner for the relay.

Middleware stack (outermost first): gzip compression, CORS, security headers.
The immutable ``Settings`` instance and the ``OAuthClient`` built from it live
on ``app.state`` and reach the handlers through dependencies.
"""

from __future__ import annotations

import logging

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from cmsrelay import __version__
from cmsrelay.config import Settings, get_settings
from cmsrelay.oauth.client import OAuthClient
from cmsrelay.routes import router
from cmsrelay.security import security_headers_middleware

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the relay application.

    Args:
        settings: Configuration to serve with; loaded from the environment when omitted.
        transport: Optional httpx transport for the token exchange.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="CMS OAuth Relay",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.oauth_client = OAuthClient(settings, transport=transport)

    app.middleware("http")(security_headers_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500, compresslevel=6)

    app.include_router(router)
    return app


def run_server(
    settings: Settings,
    host: str | None = None,
    port: int | None = None,
    dev: bool = False,
) -> None:
    """Serve the relay with uvicorn until interrupted."""
    host = host or settings.host
    port = port or settings.port

    logger.info("API listening at http://localhost:%s", port)

    if dev:
        uvicorn.run(
            "cmsrelay.server:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            log_level="debug",
        )
    else:
        app = create_app(settings)
        uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())
