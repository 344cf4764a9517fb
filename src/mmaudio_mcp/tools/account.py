# SPDX-License-Identifier: MIT
"""API key validation tool.

An invalid key is an expected outcome here, not a tool failure: every
response that reaches the upstream (and every network failure) is reported
as a successful envelope whose ``result.valid`` flag carries the verdict.
Only a missing key is reported as an error.
"""

from typing import Any

import httpx

from ..client import MMAudioClient
from ..config import Settings, get_settings, logger, resolve_api_key, resolve_base_url
from ..errors import ConfigurationError, RequestTimeoutError, TransportError, ValidationError
from ..types import ResultEnvelope

CREDITS_PATH = "/api/credits"
# Fixed and short, independent of the configured generation timeout
CREDITS_TIMEOUT_SECONDS = 10.0


def _invalid(message: str, error: str) -> ResultEnvelope:
    return ResultEnvelope.ok(message, {"valid": False, "error": error})


async def validate_api_key(
    api_key: Any = None,
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ResultEnvelope:
    """Check an API key against the upstream credits endpoint.

    Args:
        api_key: Key to check. Falls back to the configured key when omitted.
        settings: Resolved settings (resolved lazily from the environment if omitted)
        transport: Optional httpx transport override

    Returns:
        Envelope with ``result.valid`` and, for a valid key, ``credits`` and
        ``account_status``. A failure envelope only when no usable key is given.
    """
    if api_key is not None and not isinstance(api_key, str):
        error = ValidationError(
            "Invalid input parameters: api_key: Input should be a valid string",
            [{"field": "api_key", "message": "Input should be a valid string"}],
        )
        logger.error("validate_api_key failed [%s]: %s", error.code, error.message)
        return ResultEnvelope.from_error(error)

    configured_key = None
    if settings is None:
        try:
            settings = get_settings()
        except ConfigurationError as exc:
            # Another setting may be malformed while the key itself is usable
            logger.warning("Configuration is invalid, validating without it: %s", exc.message)
            configured_key = resolve_api_key()
    if settings is not None:
        configured_key = settings.api_key

    key = api_key or configured_key
    if not key:
        error = ValidationError(
            "No API key provided",
            [{"field": "api_key", "message": "Pass api_key or set API_KEY"}],
        )
        logger.error("validate_api_key failed [%s]: %s", error.code, error.message)
        return ResultEnvelope.from_error(error)

    base_url = settings.base_url if settings is not None else resolve_base_url()
    logger.info("Validating API key against %s", base_url)

    async with MMAudioClient(base_url, key, CREDITS_TIMEOUT_SECONDS, transport=transport) as client:
        try:
            response = await client.send("GET", CREDITS_PATH)
        except (RequestTimeoutError, TransportError) as exc:
            logger.warning("API key validation failed: %s", exc.message)
            return _invalid("Failed to validate API key", exc.message)

    if response.status_code == 401:
        logger.info("API key rejected by upstream")
        return _invalid("Invalid API key", "Authentication failed")

    if not response.is_success:
        error_text = f"HTTP {response.status_code}: {response.text}"
        logger.warning("API key validation failed: %s", error_text)
        return _invalid("Failed to validate API key", error_text)

    try:
        data: Any = response.json()
    except ValueError:
        logger.warning("API key validation failed: credits response is not valid JSON")
        return _invalid("Failed to validate API key", "Upstream credits response is not valid JSON")

    credits = data.get("credits") if isinstance(data, dict) else None
    logger.info("API key validation successful")
    return ResultEnvelope.ok(
        "API key is valid",
        {
            "valid": True,
            "credits": credits if credits is not None else "Unknown",
            "account_status": "Active",
        },
    )
