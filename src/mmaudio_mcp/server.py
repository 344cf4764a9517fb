# SPDX-License-Identifier: MIT
"""MMAudio MCP Server - FastMCP server for MMAudio audio generation.

This module initializes the FastMCP server and registers all tools.
Business logic is organized into submodules under tools/.
"""

import signal
import sys
from collections.abc import Awaitable, Callable
from typing import Annotated, Any

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP
from pydantic import Field

from . import descriptions as desc
from .config import get_settings, logger
from .errors import ConfigurationError
from .tools import account, generation
from .types import ResultEnvelope

TOOL_NAMES = ("video_to_audio", "text_to_audio", "validate_api_key")

# Initialize FastMCP server
mcp = FastMCP("mmaudio-mcp")


# Tool arguments are declared as Any so FastMCP hands them over unconverted. The
# tool contract is the only validator: a missing, mistyped or out-of-range value
# comes back as one INVALID_PARAMS envelope listing every offending field.
def _arg(description: str, json_type: str | list[str], **constraints: Any) -> Any:
    """Advertise an argument's JSON type and constraints without enforcing them."""

    def update(schema: dict[str, Any]) -> None:
        schema.update(type=json_type, **constraints)
        if "default" in schema and schema["default"] is None:
            del schema["default"]

    return Field(description=description, json_schema_extra=update)


VideoUrl = Annotated[Any, _arg(desc.VIDEO_URL, "string", format="uri")]
Prompt = Annotated[Any, _arg(desc.PROMPT, "string", minLength=1)]
NegativePrompt = Annotated[Any, _arg(desc.NEGATIVE_PROMPT, "string")]
Duration = Annotated[Any, _arg(desc.DURATION, "number", minimum=1, maximum=30)]
NumSteps = Annotated[Any, _arg(desc.NUM_STEPS, "integer", minimum=1, maximum=50)]
CfgStrength = Annotated[Any, _arg(desc.CFG_STRENGTH, "number", minimum=1, maximum=10)]


def _advertise_required(tool_name: str, *fields: str) -> None:
    """List contract-required arguments in a tool's input schema.

    They are optional in the signature so that a missing value reaches the
    contract and is reported in the envelope.
    """
    tool = mcp._tool_manager.get_tool(tool_name)
    tool.parameters["required"] = list(fields)


async def _run_tool(name: str, call: Callable[[], Awaitable[ResultEnvelope]]) -> str:
    """Await a tool implementation and render its envelope as JSON text.

    Anything that is not already an envelope (a bug, not an upstream failure)
    is logged with its traceback and reported as INTERNAL_ERROR.
    """
    try:
        envelope = await call()
    except Exception as exc:
        logger.exception("Unexpected error in %s", name)
        envelope = ResultEnvelope.internal_error(f"Tool execution failed: {exc}")
    return envelope.to_text()


def _present(arguments: dict[str, Any]) -> dict[str, Any]:
    """Drop arguments the caller left unset."""
    return {k: v for k, v in arguments.items() if v is not None}


# ==================== GENERATION TOOLS ====================
@mcp.tool(description=desc.VIDEO_TO_AUDIO)
async def video_to_audio(
    video_url: VideoUrl = None,
    prompt: Prompt = None,
    negative_prompt: NegativePrompt = "",
    seed: Annotated[Any, _arg(desc.SEED, ["integer", "null"])] = None,
    num_steps: NumSteps = 25,
    duration: Duration = 8,
    cfg_strength: CfgStrength = 4.5,
) -> str:
    # An explicit null for a defaulted argument is forwarded, and rejected
    arguments = _present({"video_url": video_url, "prompt": prompt, "seed": seed})
    arguments.update(
        negative_prompt=negative_prompt,
        num_steps=num_steps,
        duration=duration,
        cfg_strength=cfg_strength,
    )
    return await _run_tool("video_to_audio", lambda: generation.video_to_audio(arguments))


@mcp.tool(description=desc.TEXT_TO_AUDIO)
async def text_to_audio(
    prompt: Prompt = None,
    duration: Duration = 8,
    num_steps: NumSteps = 25,
    cfg_strength: CfgStrength = 4.5,
    negative_prompt: NegativePrompt = "",
    seed: Annotated[Any, _arg(desc.SEED, "integer")] = 0,
) -> str:
    arguments = _present({"prompt": prompt})
    arguments.update(
        duration=duration,
        num_steps=num_steps,
        cfg_strength=cfg_strength,
        negative_prompt=negative_prompt,
        seed=seed,
    )
    return await _run_tool("text_to_audio", lambda: generation.text_to_audio(arguments))


# ==================== ACCOUNT TOOLS ====================
@mcp.tool(description=desc.VALIDATE_API_KEY)
async def validate_api_key(
    api_key: Annotated[Any, _arg(desc.API_KEY, ["string", "null"])] = None,
) -> str:
    return await _run_tool("validate_api_key", lambda: account.validate_api_key(api_key))


_advertise_required("video_to_audio", "video_url", "prompt")
_advertise_required("text_to_audio", "prompt")


# ==================== SERVER ENTRYPOINT ====================
def _handle_shutdown(signum: int, frame: object) -> None:
    logger.info("Shutting down server (signal %d)", signum)
    sys.exit(0)


def main():
    """Run the MCP server over stdio.

    Configuration is resolved up front so a missing API key fails fast with
    exit code 1. SIGINT and SIGTERM shut down with exit code 0.
    """
    load_dotenv()  # Load environment variables at runtime

    try:
        settings = get_settings()
    except ConfigurationError as exc:
        logger.error("Failed to start server: %s", exc.message)
        sys.exit(1)

    signal.signal(signal.SIGTERM, _handle_shutdown)

    logger.info("Starting MMAudio MCP server over stdio")
    logger.info(
        "API base URL: %s (timeout %dms, retries %d)",
        settings.base_url,
        settings.timeout_ms,
        settings.max_retries,
    )
    logger.info("Available tools: %s", ", ".join(TOOL_NAMES))

    try:
        mcp.run()
    except KeyboardInterrupt:
        logger.info("Shutting down server...")
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    main()
