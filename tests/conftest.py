# Shared fixtures for relay tests.
# Created: 2026-10-18

import httpx
import pytest
from fastapi.testclient import TestClient

from cmsrelay.config import Settings
from cmsrelay.server import create_app

_DEFAULTS = {
    "host": "127.0.0.1",
    "port": 4000,
    "oauth_client_id": "abc",
    "oauth_client_secret": "shh-secret",
    "redirect_uri": "http://localhost:4000/callback",
    "scope": "repo",
    "provider": "github",
    "origin": "https://cms.example.com",
    "oauth_host": "github.com",
    "oauth_state_check": True,
    "index_page": "status",
    "node_env": "test",
    "log_level": "INFO",
}


@pytest.fixture
def make_settings():
    """Build Settings from explicit values, ignoring any .env file."""

    def _make(**overrides) -> Settings:
        values = {**_DEFAULTS, **overrides}
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def provider_calls():
    """Requests seen by the stubbed token endpoint."""
    return []


@pytest.fixture
def provider_response():
    """Mutable (status, json-body) returned by the stubbed token endpoint."""
    return {"status": 200, "json": {"access_token": "tok123", "token_type": "bearer"}}


@pytest.fixture
def transport(provider_calls, provider_response):
    def handler(request: httpx.Request) -> httpx.Response:
        provider_calls.append(request)
        return httpx.Response(provider_response["status"], json=provider_response["json"])

    return httpx.MockTransport(handler)


@pytest.fixture
def make_client(transport):
    def _make(settings: Settings) -> TestClient:
        return TestClient(create_app(settings, transport=transport))

    return _make


@pytest.fixture
def client(make_client, settings):
    return make_client(settings)
