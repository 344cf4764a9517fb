# SPDX-License-Identifier: MIT
"""Integration tests for the API key validation tool."""

import httpx
import pytest

from mmaudio_mcp.tools.account import validate_api_key


@pytest.mark.integration
async def test_valid_key_reports_credits(upstream, settings):
    upstream.respond(httpx.Response(200, json={"credits": 120}))

    envelope = await validate_api_key(settings=settings, transport=upstream.transport)

    assert envelope.success is True
    assert envelope.message == "API key is valid"
    assert envelope.result == {"valid": True, "credits": 120, "account_status": "Active"}

    request = upstream.last_request
    assert request.method == "GET"
    assert str(request.url) == "https://mmaudio.test/api/credits"
    assert request.headers["Authorization"] == "Bearer sk-test-key"


@pytest.mark.integration
async def test_uses_fixed_short_timeout(upstream, settings):
    """Validation uses 10s regardless of the generation timeout."""
    upstream.respond(httpx.Response(200, json={"credits": 1}))

    await validate_api_key(settings=settings, transport=upstream.transport)

    assert upstream.last_request.extensions["timeout"]["read"] == 10.0


@pytest.mark.integration
async def test_override_key_takes_precedence(upstream, settings):
    upstream.respond(httpx.Response(200, json={"credits": 5}))

    await validate_api_key("sk-other", settings=settings, transport=upstream.transport)

    assert upstream.last_request.headers["Authorization"] == "Bearer sk-other"


@pytest.mark.integration
async def test_missing_credits_reported_as_unknown(upstream, settings):
    upstream.respond(httpx.Response(200, json={}))

    envelope = await validate_api_key(settings=settings, transport=upstream.transport)

    assert envelope.result["credits"] == "Unknown"


@pytest.mark.integration
async def test_zero_credits_reported_as_zero(upstream, settings):
    upstream.respond(httpx.Response(200, json={"credits": 0}))

    envelope = await validate_api_key(settings=settings, transport=upstream.transport)

    assert envelope.result["credits"] == 0


@pytest.mark.integration
async def test_401_is_successful_envelope_with_invalid_flag(upstream, settings):
    """An invalid key is an expected outcome, not a tool failure."""
    upstream.respond(httpx.Response(401, json={"error": "Unauthorized"}))

    envelope = await validate_api_key(settings=settings, transport=upstream.transport)

    assert envelope.success is True
    assert envelope.message == "Invalid API key"
    assert envelope.result == {"valid": False, "error": "Authentication failed"}
    assert envelope.code is None


@pytest.mark.integration
async def test_other_status_reported_as_invalid(upstream, settings):
    upstream.respond(httpx.Response(500, text="boom"))

    envelope = await validate_api_key(settings=settings, transport=upstream.transport)

    assert envelope.success is True
    assert envelope.message == "Failed to validate API key"
    assert envelope.result == {"valid": False, "error": "HTTP 500: boom"}


@pytest.mark.integration
async def test_transport_failure_reported_as_invalid(upstream, settings):
    upstream.respond(httpx.ConnectError("Name or service not known"))

    envelope = await validate_api_key(settings=settings, transport=upstream.transport)

    assert envelope.success is True
    assert envelope.result["valid"] is False
    assert "Name or service not known" in envelope.result["error"]


@pytest.mark.integration
async def test_timeout_reported_as_invalid(upstream, settings):
    upstream.respond(httpx.ConnectTimeout("timed out"))

    envelope = await validate_api_key(settings=settings, transport=upstream.transport)

    assert envelope.result["valid"] is False
    assert "timed out after 10s" in envelope.result["error"]


@pytest.mark.integration
async def test_non_json_body_reported_as_invalid(upstream, settings):
    upstream.respond(httpx.Response(200, text="ok"))

    envelope = await validate_api_key(settings=settings, transport=upstream.transport)

    assert envelope.result["valid"] is False


@pytest.mark.integration
async def test_no_key_anywhere_is_validation_error(upstream):
    """No override and no configured key fails without touching the network."""
    envelope = await validate_api_key(transport=upstream.transport)

    assert envelope.success is False
    assert envelope.code == "INVALID_PARAMS"
    assert envelope.error == "No API key provided"
    assert upstream.requests == []


@pytest.mark.integration
async def test_empty_override_falls_back_to_configured_key(upstream, settings):
    upstream.respond(httpx.Response(200, json={"credits": 3}))

    await validate_api_key("", settings=settings, transport=upstream.transport)

    assert upstream.last_request.headers["Authorization"] == "Bearer sk-test-key"


@pytest.mark.integration
async def test_override_without_configuration_uses_default_base_url(upstream):
    upstream.respond(httpx.Response(200, json={"credits": 9}))

    envelope = await validate_api_key("sk-adhoc", transport=upstream.transport)

    assert envelope.result["valid"] is True
    assert str(upstream.last_request.url) == "https://mmaudio.net/api/credits"


@pytest.mark.integration
async def test_override_without_api_key_honours_base_url_env(upstream, monkeypatch):
    monkeypatch.setenv("BASE_URL", "https://eu.mmaudio.test")
    upstream.respond(httpx.Response(200, json={"credits": 9}))

    await validate_api_key("sk-adhoc", transport=upstream.transport)

    assert upstream.last_request.url.host == "eu.mmaudio.test"


@pytest.mark.integration
async def test_configured_key_from_environment(upstream, monkeypatch):
    monkeypatch.setenv("API_KEY", "sk-env")
    upstream.respond(httpx.Response(200, json={"credits": 1}))

    await validate_api_key(transport=upstream.transport)

    assert upstream.last_request.headers["Authorization"] == "Bearer sk-env"


@pytest.mark.integration
async def test_env_key_used_when_other_settings_malformed(upstream, monkeypatch):
    """A malformed TIMEOUT_MS does not hide a configured API_KEY."""
    monkeypatch.setenv("API_KEY", "sk-env")
    monkeypatch.setenv("TIMEOUT_MS", "1")
    upstream.respond(httpx.Response(200, json={"credits": 4}))

    envelope = await validate_api_key(transport=upstream.transport)

    assert envelope.result == {"valid": True, "credits": 4, "account_status": "Active"}
    assert upstream.last_request.headers["Authorization"] == "Bearer sk-env"
    assert str(upstream.last_request.url) == "https://mmaudio.net/api/credits"


@pytest.mark.integration
async def test_non_string_override_is_validation_error(upstream, settings):
    envelope = await validate_api_key(12345, settings=settings, transport=upstream.transport)

    assert envelope.code == "INVALID_PARAMS"
    assert envelope.details == [{"field": "api_key", "message": "Input should be a valid string"}]
    assert upstream.requests == []
