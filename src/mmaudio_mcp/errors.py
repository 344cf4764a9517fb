# SPDX-License-Identifier: MIT
"""Error taxonomy for the MMAudio MCP server.

Every error raised inside a tool call derives from :class:`MMAudioError` and
carries a stable ``code`` that ends up in the result envelope. Errors are
raised where the failure is detected and converted to an envelope once, at the
dispatcher boundary.
"""

from __future__ import annotations

from typing import TypedDict

from pydantic import ValidationError as PydanticValidationError


class ErrorDetail(TypedDict):
    """A single offending field and the reason it was rejected."""

    field: str
    message: str


class MMAudioError(Exception):
    """Base class for all errors surfaced through the result envelope."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: list[ErrorDetail] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or []


class ConfigurationError(MMAudioError):
    """Environment is missing the credential or carries malformed settings."""

    code = "CONFIGURATION_ERROR"


class ValidationError(MMAudioError):
    """Caller input failed validation. ``details`` lists every violation."""

    code = "INVALID_PARAMS"


class AuthenticationError(MMAudioError):
    """Upstream rejected the API key (HTTP 401)."""

    code = "INVALID_REQUEST"


class QuotaError(MMAudioError):
    """Account has insufficient credits (HTTP 403)."""

    code = "INVALID_REQUEST"


class RateLimitError(MMAudioError):
    """Upstream is throttling requests (HTTP 429)."""

    code = "INVALID_REQUEST"


class UpstreamError(MMAudioError):
    """Any other non-2xx response from the upstream API."""

    code = "UPSTREAM_ERROR"

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


class ContractViolationError(MMAudioError):
    """Upstream answered 2xx but the body does not match the documented shape."""

    code = "CONTRACT_VIOLATION"


class RequestTimeoutError(MMAudioError, TimeoutError):
    """The outbound request exceeded its deadline."""

    code = "TIMEOUT"


class TransportError(MMAudioError):
    """Network-level failure before any response was received."""

    code = "TRANSPORT_ERROR"


def format_details(details: list[ErrorDetail]) -> str:
    """Render details as ``field: message, field: message``."""
    return ", ".join(f"{d['field']}: {d['message']}" for d in details)


def details_from_pydantic(exc: PydanticValidationError) -> list[ErrorDetail]:
    """Flatten every pydantic error into a ``{field, message}`` pair.

    Args:
        exc: The pydantic validation error

    Returns:
        One detail per violation, in pydantic's order
    """
    details: list[ErrorDetail] = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "input"
        message = "Field required" if err["type"] == "missing" else err["msg"]
        details.append({"field": field, "message": message})
    return details
