# SPDX-License-Identifier: MIT
"""Shared pytest fixtures for MMAudio MCP server tests."""

import json

import httpx
import pytest

from mmaudio_mcp.config import Settings, get_settings

_CONFIG_ENV_VARS = (
    "API_KEY",
    "MMAUDIO_API_KEY",
    "BASE_URL",
    "MMAUDIO_BASE_URL",
    "TIMEOUT_MS",
    "MMAUDIO_TIMEOUT",
    "MAX_RETRIES",
    "RETRY_BACKOFF_MS",
    "RETRY_BACKOFF_MULTIPLIER",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove server configuration from the environment and reset the settings cache."""
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at a fake upstream with the shortest allowed timeout."""
    return Settings(api_key="sk-test-key", base_url="https://mmaudio.test", timeout_ms=5000)


# ==================== Upstream Fixtures ====================


class FakeUpstream:
    """Records every outbound request and replies with queued responses.

    Queue ``httpx.Response`` objects or httpx exceptions with :meth:`respond`.
    The last queued item is repeated once the queue is down to one entry.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._replies: list[httpx.Response | Exception] = []
        self.transport = httpx.MockTransport(self._handle)

    def respond(self, *replies: httpx.Response | Exception) -> None:
        self._replies = list(replies)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self._replies.pop(0) if len(self._replies) > 1 else self._replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> dict:
        return json.loads(self.last_request.content)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def audio_descriptor() -> dict:
    """File descriptor as returned by the MMAudio generation endpoints."""
    return {
        "url": "https://cdn.mmaudio.test/out/rain.flac",
        "content_type": "audio/flac",
        "file_name": "rain.flac",
        "file_size": 482133,
    }
