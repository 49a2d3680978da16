"""Configuration loading and validation.

This module is responsible for:

- Loading `.env` into the process environment (without overriding existing vars).
- Converting environment variables into strongly-typed Pydantic models.
- Validating values and providing actionable error messages.
"""

import os

import dotenv
from pydantic import BaseModel, Field, field_validator


def _get_env_float(name: str, default: float) -> float:
    """Read a float env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a number of seconds. Got: {raw!r}") from exc


class MonitorConfig(BaseModel):
    """Configuration for the timeline monitor."""

    sample_interval_s: float = Field(default=15.0, description="Seconds between sampling passes (0 disables)")

    @field_validator("sample_interval_s")
    def validate_sample_interval(cls, v: float) -> float:
        """Reject negative intervals."""
        if v < 0:
            raise ValueError(
                f"MONITOR_SAMPLE_INTERVAL_S must be >= 0 (use 0 to disable sampling). Got: {v}"
            )
        return v


def load_config() -> MonitorConfig:
    """Load monitor configuration from environment variables.

    Notes:
    - Calls `dotenv.load_dotenv()` so local `.env` values are visible to the process.
    - Raises `ValueError` with an actionable message when a value is malformed.
    """
    dotenv.load_dotenv()

    return MonitorConfig(
        sample_interval_s=_get_env_float("MONITOR_SAMPLE_INTERVAL_S", 15.0),
    )
