"""Centralized configuration for the booking pattern service.

Secret resolution order (per variable):
  1. Environment variable / ``.env`` file  (local dev)
  2. AWS SSM Parameter Store SecureString  (when ``AWS_EXECUTION_ENV`` is set)

The SSM paths follow the convention ``/booking-patterns/<VARIABLE_NAME>``.

Only the remote model analyzer needs a secret (``ANTHROPIC_API_KEY``), so it is
resolved lazily through :func:`get_anthropic_api_key` instead of at import
time.  The deterministic core runs with no configuration at all.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# ── Feature flag: running on AWS? ────────────────────────────────────
_ON_AWS = bool(os.getenv("AWS_EXECUTION_ENV"))


# ── Secret resolution ────────────────────────────────────────────────

def _get_ssm_parameter(name: str) -> str | None:
    """Fetch a SecureString from SSM Parameter Store.

    Returns ``None`` if the parameter does not exist or boto3 is
    unavailable.  Errors are logged but never raised so that local-dev
    fallback still works.
    """
    try:
        import boto3  # noqa: PLC0415

        ssm = boto3.client("ssm")
        resp = ssm.get_parameter(Name=f"/booking-patterns/{name}", WithDecryption=True)
        return resp["Parameter"]["Value"]
    except Exception:
        logger.debug("SSM lookup for %s failed (expected locally)", name)
        return None


def _require_env(name: str) -> str:
    """Return a config value from env-var or SSM, or raise a clear error."""
    value = os.getenv(name)
    if value and not value.startswith("your_"):
        return value

    if _ON_AWS:
        ssm_value = _get_ssm_parameter(name)
        if ssm_value:
            return ssm_value

    raise OSError(
        f"Missing required configuration: {name}. "
        f"Set it in .env (local) or SSM Parameter Store /booking-patterns/{name} (AWS)."
    )


def get_anthropic_api_key() -> str:
    """Resolve the Anthropic key on demand (remote analyzer only)."""
    return _require_env("ANTHROPIC_API_KEY")


# ── Remote model analysis ───────────────────────────────────────────
MODEL_NAME: str = os.getenv("MODEL_NAME", "claude-sonnet-4-5")
MODEL_TEMPERATURE: float = float(os.getenv("MODEL_TEMPERATURE", "0.2"))
MODEL_MAX_TOKENS: int = int(os.getenv("MODEL_MAX_TOKENS", "4096"))

# "deterministic" or "remote_model"
ANALYZER_STRATEGY: str = os.getenv("ANALYZER_STRATEGY", "deterministic")

# Remote analysis results are cached per input fingerprint (default 5 MB)
REMOTE_CACHE_MAX_BYTES: int = int(os.getenv("REMOTE_CACHE_MAX_BYTES", str(5 * 1024 * 1024)))

# ── Request document defaults ───────────────────────────────────────
DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "EUR")
DEFAULT_RESERVATION_TYPE: str = os.getenv("DEFAULT_RESERVATION_TYPE", "01")
DEFAULT_SURGERY_TYPE: str = os.getenv("DEFAULT_SURGERY_TYPE", "OR")
DEFAULT_NOTE_LANGUAGE: str = os.getenv("DEFAULT_NOTE_LANGUAGE", "EN")
BUSINESS_DAY_START_HOUR: int = int(os.getenv("BUSINESS_DAY_START_HOUR", "8"))

# ── Server ──────────────────────────────────────────────────────────
SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT: int = int(os.getenv("SERVER_PORT", "8000"))
CORS_ORIGINS: list[str] = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
).split(",")
