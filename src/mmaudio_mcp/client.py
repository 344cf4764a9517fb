# SPDX-License-Identifier: MIT
"""HTTP client for the MMAudio upstream API.

Wraps a single ``httpx.AsyncClient`` with bearer authentication and translates
transport failures, timeouts and non-2xx statuses into the error taxonomy in
:mod:`mmaudio_mcp.errors`.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from . import __version__
from .config import Settings
from .errors import (
    AuthenticationError,
    ContractViolationError,
    MMAudioError,
    QuotaError,
    RateLimitError,
    RequestTimeoutError,
    TransportError,
    UpstreamError,
)
from .retry import NO_RETRY, RetryPolicy, call_with_retry

logger = logging.getLogger("mmaudio_mcp")

USER_AGENT = f"MMAudio-MCP/{__version__}"


def error_message(response: httpx.Response) -> str:
    """Extract the most useful error text from a non-2xx response.

    Prefers the JSON body's ``error`` field, then the raw body text, then
    ``HTTP <status>``.
    """
    fallback = f"HTTP {response.status_code}"
    try:
        data = response.json()
    except ValueError:
        return response.text or fallback
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return fallback


def error_for_status(response: httpx.Response, label: str) -> MMAudioError:
    """Map a non-2xx generation response to a typed error.

    Args:
        response: The upstream response
        label: Operation name used in user-facing messages (e.g. "text-to-audio")
    """
    status = response.status_code
    detail = error_message(response)

    if status == 401:
        logger.warning("Upstream rejected API key for %s: %s", label, detail)
        return AuthenticationError("Invalid API key. Please check your MMAudio API key.")
    if status == 403:
        logger.warning("Upstream refused %s for insufficient credits: %s", label, detail)
        return QuotaError(f"Insufficient credits for {label} generation.")
    if status == 429:
        logger.warning("Upstream rate limited %s: %s", label, detail)
        return RateLimitError("Rate limit exceeded. Please try again later.")

    return UpstreamError(status, f"Upstream request failed with HTTP {status}: {detail}")


class MMAudioClient:
    """Authenticated client for one tool call.

    Use as an async context manager so the connection is released when the
    call completes::

        async with MMAudioClient.from_settings(settings) as client:
            body = await client.post_json("/api/text-to-audio", payload, label="text-to-audio")
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float,
        *,
        retry_policy: RetryPolicy = NO_RETRY,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._retry_policy = retry_policy
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {api_key}",
                "User-Agent": USER_AGENT,
            },
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> MMAudioClient:
        return cls(
            settings.base_url,
            settings.api_key,
            settings.timeout_seconds,
            retry_policy=settings.retry_policy(),
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> MMAudioClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def send(self, method: str, path: str, *, timeout: float | None = None, **kwargs: Any) -> httpx.Response:
        """Issue one request, translating transport-level failures.

        Raises:
            RequestTimeoutError: If the deadline fires
            TransportError: On DNS, connection or protocol failures
        """
        effective_timeout = self._timeout if timeout is None else timeout
        try:
            return await self._client.request(method, path, timeout=effective_timeout, **kwargs)
        except httpx.TimeoutException as exc:
            raise RequestTimeoutError(f"{method} {path} timed out after {effective_timeout:g}s") from exc
        except httpx.TransportError as exc:
            raise TransportError(f"{method} {path} failed: {str(exc) or type(exc).__name__}") from exc

    async def post_json(self, path: str, body: dict[str, Any], *, label: str) -> Any:
        """POST a JSON body and return the decoded JSON response.

        Transient failures are retried according to the client's retry policy.

        Raises:
            AuthenticationError, QuotaError, RateLimitError, UpstreamError: On non-2xx
            ContractViolationError: If a 2xx body is not JSON
            RequestTimeoutError, TransportError: On network failures
        """

        async def _attempt() -> Any:
            response = await self.send("POST", path, json=body)
            if not response.is_success:
                raise error_for_status(response, label)
            try:
                return response.json()
            except ValueError as exc:
                raise ContractViolationError(f"Upstream {label} response is not valid JSON") from exc

        return await call_with_retry(self._retry_policy, _attempt, label=f"POST {path}")
