# SPDX-License-Identifier: MIT
"""Audio generation tools backed by the MMAudio API.

Both generation endpoints share one flow, parameterized by a
:class:`GenerationOperation`:

1. Validate tool arguments against the operation's request model
2. POST the defaulted request to the upstream endpoint
3. Validate the upstream file descriptor under the operation's response key
4. Return the file descriptor plus the echoed ``duration`` and ``prompt``
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..client import MMAudioClient
from ..config import Settings, get_settings, logger
from ..errors import ContractViolationError, ErrorDetail, MMAudioError, details_from_pydantic, format_details
from ..types import (
    AudioFile,
    GenerationRequest,
    GenerationResult,
    ResultEnvelope,
    TextToAudioRequest,
    VideoToAudioRequest,
    parse_request,
)


@dataclass(frozen=True)
class GenerationOperation:
    """Static description of one generation endpoint."""

    name: str
    path: str
    request_model: type[GenerationRequest]
    response_key: str
    label: str
    success_message: str


VIDEO_TO_AUDIO = GenerationOperation(
    name="video_to_audio",
    path="/api/video-to-audio",
    request_model=VideoToAudioRequest,
    response_key="video",
    label="video-to-audio",
    success_message="Audio generated successfully from video",
)

TEXT_TO_AUDIO = GenerationOperation(
    name="text_to_audio",
    path="/api/text-to-audio",
    request_model=TextToAudioRequest,
    response_key="audio",
    label="text-to-audio",
    success_message="Audio generated successfully from text",
)


def parse_generation_response(operation: GenerationOperation, body: Any) -> AudioFile:
    """Validate the upstream body and extract its file descriptor.

    Args:
        operation: Operation whose ``response_key`` holds the descriptor
        body: Decoded JSON body of a 2xx response

    Returns:
        The validated AudioFile

    Raises:
        ContractViolationError: If the descriptor is absent or any field is missing or mistyped
    """
    key = operation.response_key
    if not isinstance(body, dict) or key not in body:
        details: list[ErrorDetail] = [{"field": key, "message": "Field required"}]
        raise ContractViolationError(f"Upstream {operation.label} response is missing '{key}'", details)

    try:
        return AudioFile.model_validate(body[key])
    except PydanticValidationError as exc:
        details = [
            {"field": f"{key}.{d['field']}" if d["field"] != "input" else key, "message": d["message"]}
            for d in details_from_pydantic(exc)
        ]
        raise ContractViolationError(
            f"Upstream {operation.label} response violates its contract: {format_details(details)}", details
        ) from exc


async def generate(
    operation: GenerationOperation,
    raw_input: Mapping[str, Any] | None,
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> GenerationResult:
    """Run one generation call end to end.

    Raises:
        ValidationError: Before any network call if the arguments are invalid
        MMAudioError: Any upstream, contract or transport failure
    """
    request = parse_request(operation.request_model, raw_input)
    logger.info("Starting %s generation (prompt=%r, duration=%ss)", operation.label, request.prompt, request.duration)

    async with MMAudioClient.from_settings(settings, transport=transport) as client:
        body = await client.post_json(operation.path, request.to_body(), label=operation.label)

    audio = parse_generation_response(operation, body)
    logger.info("%s generation completed: %s (%d bytes)", operation.label, audio.file_name, audio.file_size)
    return GenerationResult.from_upstream(audio, request)


async def dispatch(
    operation: GenerationOperation,
    raw_input: Mapping[str, Any] | None,
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ResultEnvelope:
    """Execute a generation tool call and wrap the outcome in an envelope.

    Args:
        operation: VIDEO_TO_AUDIO or TEXT_TO_AUDIO
        raw_input: Tool arguments as received
        settings: Resolved settings (resolved lazily from the environment if omitted)
        transport: Optional httpx transport override

    Returns:
        Success envelope with the generation result, or a failure envelope
        carrying the error code. MMAudioError never escapes.
    """
    try:
        if settings is None:
            settings = get_settings()
        result = await generate(operation, raw_input, settings, transport=transport)
    except MMAudioError as exc:
        logger.error("%s failed [%s]: %s", operation.name, exc.code, exc.message)
        return ResultEnvelope.from_error(exc)

    return ResultEnvelope.ok(operation.success_message, result.model_dump())


async def video_to_audio(
    raw_input: Mapping[str, Any] | None,
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ResultEnvelope:
    return await dispatch(VIDEO_TO_AUDIO, raw_input, settings, transport=transport)


async def text_to_audio(
    raw_input: Mapping[str, Any] | None,
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ResultEnvelope:
    return await dispatch(TEXT_TO_AUDIO, raw_input, settings, transport=transport)
