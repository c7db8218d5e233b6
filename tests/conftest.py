"""Shared fixtures for the Nango Gateway test suite."""

import logging

import httpx
import pytest

from nango_gateway.client.client import NangoClient
from nango_gateway.client.models import ClientConfig
from nango_gateway.config.settings import get_settings
from nango_gateway.logging.audit import LOGGER_NAME

UPSTREAM_URL = "https://nango.test"

_ENV_VARS = (
    "NANGO_API_KEY",
    "NANGO_BASE_URL",
    "TIMEOUT",
    "PORT",
    "LOG_LEVEL",
    "HOST",
    "AUDIT_LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    # Handlers may point at streams captured by a previous test
    logging.getLogger(LOGGER_NAME).handlers.clear()


@pytest.fixture
def override_settings(monkeypatch):
    """Factory fixture: set env vars and clear settings cache.

    Usage:
        override_settings(NANGO_API_KEY="key", TIMEOUT="5s")
    """
    def _override(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(key.upper(), str(value))
        # Clear lru_cache so Settings re-reads env
        get_settings.cache_clear()

    yield _override

    get_settings.cache_clear()


@pytest.fixture
def integration_records() -> list[dict]:
    """Two integrations as the remote API returns them."""
    return [
        {
            "id": "123",
            "name": "GitHub Production",
            "provider": "github",
            "created_at": "2024-01-15T10:30:00Z",
            "updated_at": "2024-02-01T08:00:00Z",
        },
        {
            "id": "456",
            "name": "Slack Workspace",
            "provider": "slack",
            "created_at": "2024-03-10T12:00:00Z",
            "updated_at": "2024-03-11T09:15:00Z",
        },
    ]


@pytest.fixture
def make_client():
    """Factory fixture: a NangoClient wired to an in-process mock upstream.

    Usage:
        client, seen = make_client(lambda request: httpx.Response(200, json=[]))

    ``seen`` collects every request the upstream received.
    """
    def _make(handler, api_key: str = "test-key", **config):
        seen: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        client = NangoClient(
            ClientConfig(api_key=api_key, base_url=config.pop("base_url", UPSTREAM_URL), **config),
            transport=httpx.MockTransport(_record),
        )
        return client, seen

    return _make
