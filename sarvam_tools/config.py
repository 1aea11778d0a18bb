"""
sarvam_tools/config.py
=======================
Runtime Settings — Sarvam Tools

Responsibility:
    - Load the .env file once (python-dotenv)
    - Read the Sarvam API key, base URL, HTTP timeout and the
      digitization poll policy from environment variables
    - Reject blank or unparseable values with ConfigurationError

This module does NOT:
    - Issue any network call
    - Log or expose the API key
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_API_BASE_URL = "https://api.sarvam.ai"
DEFAULT_REQUEST_TIMEOUT = 120.0   # seconds per HTTP call
DEFAULT_POLL_MAX_ATTEMPTS = 60
DEFAULT_POLL_INTERVAL = 5.0       # seconds between status polls


class ConfigurationError(Exception):
    """Raised when required settings are missing or malformed."""
    pass


@dataclass(frozen=True)
class SarvamSettings:
    """Settings shared by every Sarvam tool."""

    api_key: str
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    poll_max_attempts: int = DEFAULT_POLL_MAX_ATTEMPTS
    poll_interval: float = DEFAULT_POLL_INTERVAL
    webhook_url: str | None = None

    def __post_init__(self) -> None:
        if not self.api_key or not self.api_key.strip():
            raise ConfigurationError("api_key must not be empty (set SARVAM_API_KEY).")
        if not self.api_base_url or not self.api_base_url.strip():
            raise ConfigurationError("api_base_url must not be empty.")
        if self.poll_max_attempts < 1:
            raise ConfigurationError("poll_max_attempts must be at least 1.")
        if self.poll_interval < 0:
            raise ConfigurationError("poll_interval must not be negative.")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_settings() -> SarvamSettings:
    """
    Build SarvamSettings from the process environment.

    Environment variables:
        SARVAM_API_KEY                 (required)
        SARVAM_API_BASE_URL            default https://api.sarvam.ai
        SARVAM_REQUEST_TIMEOUT         seconds, default 120
        SARVAM_DIGITIZE_POLL_ATTEMPTS  default 60
        SARVAM_DIGITIZE_POLL_INTERVAL  seconds, default 5
        WEBHOOK_URL                    optional

    Raises:
        ConfigurationError: If the key is missing or a number cannot be parsed.
    """
    api_key = os.environ.get("SARVAM_API_KEY", "")
    if not api_key.strip():
        raise ConfigurationError("SARVAM_API_KEY environment variable is not set.")

    return SarvamSettings(
        api_key=api_key.strip(),
        api_base_url=os.environ.get("SARVAM_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
        request_timeout=_env_number(
            "SARVAM_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT, float,
        ),
        poll_max_attempts=_env_number(
            "SARVAM_DIGITIZE_POLL_ATTEMPTS", DEFAULT_POLL_MAX_ATTEMPTS, int,
        ),
        poll_interval=_env_number(
            "SARVAM_DIGITIZE_POLL_INTERVAL", DEFAULT_POLL_INTERVAL, float,
        ),
        webhook_url=os.environ.get("WEBHOOK_URL") or None,
    )


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}.") from exc
