# SPDX-License-Identifier: MIT
"""Configuration management for the MMAudio MCP server.

This module handles:
- Logging setup (stderr, so the stdio MCP transport stays clean)
- Environment variable resolution and validation
- The cached, immutable Settings value shared by every tool call
"""

import logging
import os
import sys
from collections.abc import Mapping
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ConfigurationError, ErrorDetail, format_details
from .retry import RetryPolicy
from .types import ensure_absolute_url

# ---------- Logging configuration ----------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,  # Log to stderr to avoid interfering with stdio MCP transport
)
logger = logging.getLogger("mmaudio_mcp")


# ---------- Settings ----------
DEFAULT_BASE_URL = "https://mmaudio.net"
DEFAULT_TIMEOUT_MS = 60000
MIN_TIMEOUT_MS = 5000
MAX_TIMEOUT_MS = 300000

# Settings field -> environment variables, in priority order
_ENV_VARS: dict[str, tuple[str, ...]] = {
    "api_key": ("API_KEY", "MMAUDIO_API_KEY"),
    "base_url": ("BASE_URL", "MMAUDIO_BASE_URL"),
    "timeout_ms": ("TIMEOUT_MS", "MMAUDIO_TIMEOUT"),
    "max_retries": ("MAX_RETRIES",),
    "retry_backoff_ms": ("RETRY_BACKOFF_MS",),
    "retry_backoff_multiplier": ("RETRY_BACKOFF_MULTIPLIER",),
}


def check_absolute_url(value: str) -> str:
    """Validate an absolute http(s) URL and strip any trailing slash.

    Raises:
        ValueError: If the scheme is not http/https or the host is missing
    """
    return ensure_absolute_url(value).rstrip("/")


def _read_env(environ: Mapping[str, str], names: tuple[str, ...]) -> str | None:
    for name in names:
        value = environ.get(name)
        if value is not None and value.strip():
            return value.strip()
    return None


class Settings(BaseModel):
    """Resolved server configuration. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(min_length=1)
    base_url: str = DEFAULT_BASE_URL
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, ge=MIN_TIMEOUT_MS, le=MAX_TIMEOUT_MS)
    max_retries: int = Field(default=0, ge=0, le=10)
    retry_backoff_ms: int = Field(default=1000, ge=0, le=60000)
    retry_backoff_multiplier: float = Field(default=2.0, ge=1.0, le=10.0)

    @field_validator("api_key")
    @classmethod
    def _validate_api_key(cls, v: str) -> str:
        if any(ch.isspace() for ch in v):
            raise ValueError("must not contain whitespace")
        return v

    @field_validator("base_url")
    @classmethod
    def _validate_base_url(cls, v: str) -> str:
        return check_absolute_url(v)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.max_retries,
            backoff_ms=self.retry_backoff_ms,
            multiplier=self.retry_backoff_multiplier,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Reads API_KEY (required), BASE_URL, TIMEOUT_MS, MAX_RETRIES,
        RETRY_BACKOFF_MS and RETRY_BACKOFF_MULTIPLIER. The MMAUDIO_API_KEY,
        MMAUDIO_BASE_URL and MMAUDIO_TIMEOUT names are accepted as fallbacks.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Validated Settings

        Raises:
            ConfigurationError: Listing every missing or malformed variable
        """
        env = os.environ if environ is None else environ

        raw: dict[str, str] = {}
        for field, names in _ENV_VARS.items():
            value = _read_env(env, names)
            if value is not None:
                raw[field] = value

        try:
            return cls.model_validate(raw)
        except PydanticValidationError as exc:
            details: list[ErrorDetail] = []
            for err in exc.errors():
                field = str(err["loc"][0]) if err["loc"] else "api_key"
                env_var = _ENV_VARS.get(field, (field,))[0]
                if err["type"] == "missing":
                    message = f"is not set (get a key at {DEFAULT_BASE_URL}/dashboard/api-keys)"
                else:
                    message = err["msg"]
                details.append({"field": env_var, "message": message})
            raise ConfigurationError(f"Configuration error: {format_details(details)}", details) from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Resolve settings from the environment once and cache the result.

    Returns:
        The process-wide Settings value

    Raises:
        ConfigurationError: If the environment is missing or malformed (not cached)
    """
    settings = Settings.from_env()
    logger.info("Server configured with base URL: %s", settings.base_url)
    return settings


def resolve_base_url(environ: Mapping[str, str] | None = None) -> str:
    """Best-effort base URL for calls that can run without full settings."""
    env = os.environ if environ is None else environ
    value = _read_env(env, _ENV_VARS["base_url"])
    if value is None:
        return DEFAULT_BASE_URL
    try:
        return check_absolute_url(value)
    except ValueError:
        logger.warning("Ignoring malformed BASE_URL %r, using %s", value, DEFAULT_BASE_URL)
        return DEFAULT_BASE_URL


def resolve_api_key(environ: Mapping[str, str] | None = None) -> str | None:
    """API key from the environment, read independently of the other settings."""
    env = os.environ if environ is None else environ
    return _read_env(env, _ENV_VARS["api_key"])
