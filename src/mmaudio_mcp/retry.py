# SPDX-License-Identifier: MIT
"""Bounded exponential-backoff retry for outbound upstream calls.

Only transient failures are retried: transport errors, timeouts and upstream
5xx responses. Validation errors and 4xx responses fail immediately.
With ``max_retries=0`` (the default) every call is attempted exactly once.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import anyio

from .errors import RequestTimeoutError, TransportError, UpstreamError

logger = logging.getLogger("mmaudio_mcp")

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to retry and how long to wait between attempts.

    Delay before retry ``n`` (0-indexed) is
    ``min(backoff_ms * multiplier ** n, max_backoff_ms)`` milliseconds.

    Attributes:
        max_retries: Extra attempts after the first one (0 disables retry)
        backoff_ms: Delay before the first retry
        multiplier: Growth factor applied per retry
        max_backoff_ms: Upper bound for a single delay
    """

    max_retries: int = 0
    backoff_ms: int = 1000
    multiplier: float = 2.0
    max_backoff_ms: int = 30000

    def delay(self, attempt: int) -> float:
        """Delay in seconds before the given 0-indexed retry."""
        delay_ms = min(self.backoff_ms * (self.multiplier**attempt), self.max_backoff_ms)
        return delay_ms / 1000.0

    def is_retryable(self, exc: BaseException) -> bool:
        if isinstance(exc, (TransportError, RequestTimeoutError)):
            return True
        return isinstance(exc, UpstreamError) and exc.status_code >= 500


NO_RETRY = RetryPolicy()


async def call_with_retry(policy: RetryPolicy, operation: Callable[[], Awaitable[T]], *, label: str) -> T:
    """Await ``operation()``, retrying transient failures per ``policy``.

    Args:
        policy: Retry limits and backoff
        operation: Zero-argument coroutine factory, called once per attempt
        label: Name used in log lines

    Returns:
        Result of the first successful attempt

    Raises:
        The last error once retries are exhausted, or immediately if it is not retryable
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except (TransportError, RequestTimeoutError, UpstreamError) as exc:
            if attempt >= policy.max_retries or not policy.is_retryable(exc):
                raise
            delay = policy.delay(attempt)
            attempt += 1
            logger.warning(
                "%s failed (%s), retry %d/%d in %.2fs", label, exc.message, attempt, policy.max_retries, delay
            )
            await anyio.sleep(delay)
