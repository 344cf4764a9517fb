# SPDX-License-Identifier: MIT
"""Tool contract: request, upstream response and result envelope models.

Request models are strict. Numbers are never parsed from strings, and booleans
are never accepted as integers. Validation collects every violation, so the
caller gets the full list in one round trip.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import MMAudioError, ValidationError, details_from_pydantic, format_details


def ensure_absolute_url(value: str) -> str:
    """Reject anything that is not an absolute http(s) URL.

    Raises:
        ValueError: If the scheme is not http/https or the host is missing
    """
    parts = urlsplit(value)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValueError(f"must be an absolute http(s) URL, got {value!r}")
    return value


# ==================== REQUESTS ====================


class GenerationRequest(BaseModel):
    """Fields shared by both generation tools."""

    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")

    prompt: str = Field(min_length=1)
    negative_prompt: str = ""
    duration: float = Field(default=8, ge=1, le=30)
    num_steps: int = Field(default=25, ge=1, le=50)
    cfg_strength: float = Field(default=4.5, ge=1, le=10)

    def to_body(self) -> dict[str, Any]:
        """JSON body for the upstream API. Unset optional fields are omitted."""
        return self.model_dump(exclude_none=True)


class VideoToAudioRequest(GenerationRequest):
    video_url: str
    seed: int | None = None

    @field_validator("video_url")
    @classmethod
    def _validate_video_url(cls, v: str) -> str:
        return ensure_absolute_url(v)


class TextToAudioRequest(GenerationRequest):
    seed: int = 0


RequestT = TypeVar("RequestT", bound=GenerationRequest)


def parse_request(model: type[RequestT], raw_input: Mapping[str, Any] | None) -> RequestT:
    """Validate raw tool arguments against a request model.

    Args:
        model: Request model class for the operation
        raw_input: Arguments as received from the tool call (``None`` means no arguments)

    Returns:
        Validated request with defaults applied

    Raises:
        ValidationError: Enumerating every offending field
    """
    data: Any = {} if raw_input is None else raw_input
    if isinstance(data, Mapping) and not isinstance(data, dict):
        data = dict(data)
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        details = details_from_pydantic(exc)
        raise ValidationError(f"Invalid input parameters: {format_details(details)}", details) from exc


# ==================== UPSTREAM RESPONSES ====================


class AudioFile(BaseModel):
    """File descriptor returned by the upstream generation endpoints."""

    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")

    url: str
    content_type: str
    file_name: str
    file_size: int = Field(ge=0)

    @field_validator("url")
    @classmethod
    def _validate_url(cls, v: str) -> str:
        return ensure_absolute_url(v)


class GenerationResult(BaseModel):
    """Generated file plus the request metadata echoed back to the caller."""

    audio_url: str
    content_type: str
    file_name: str
    file_size: int
    duration: float
    prompt: str

    @classmethod
    def from_upstream(cls, audio: AudioFile, request: GenerationRequest) -> GenerationResult:
        return cls(
            audio_url=audio.url,
            content_type=audio.content_type,
            file_name=audio.file_name,
            file_size=audio.file_size,
            duration=request.duration,
            prompt=request.prompt,
        )


# ==================== ENVELOPE ====================


class ResultEnvelope(BaseModel):
    """Uniform wrapper returned by every tool.

    Success carries ``message`` and ``result``; failure carries ``error`` and
    ``code`` (and ``details`` for field-level problems).
    """

    success: bool
    message: str | None = None
    result: dict[str, Any] | None = None
    error: str | None = None
    code: str | None = None
    details: list[dict[str, str]] | None = None

    @classmethod
    def ok(cls, message: str, result: Mapping[str, Any]) -> ResultEnvelope:
        return cls(success=True, message=message, result=dict(result))

    @classmethod
    def from_error(cls, exc: MMAudioError) -> ResultEnvelope:
        details = [dict(d) for d in exc.details] or None
        return cls(success=False, error=exc.message, code=exc.code, details=details)

    @classmethod
    def internal_error(cls, message: str) -> ResultEnvelope:
        return cls(success=False, error=message, code="INTERNAL_ERROR")

    def to_text(self) -> str:
        """JSON text payload for the MCP tool response."""
        return self.model_dump_json(exclude_none=True, indent=2)
