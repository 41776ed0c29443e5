"""Configuration for shift comparison.

Read from the environment with the ``SHIFT_COMPARE_`` prefix, e.g.
``SHIFT_COMPARE_API_BASE_URL`` and ``SHIFT_COMPARE_TIMEZONE``.
"""

from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings
from whenever import Instant

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def ensure_time_zone(value: str) -> str:
    """Return ``value`` if it names a zone in the IANA database, else raise ValueError."""
    try:
        Instant.now().to_tz(value)
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Unknown time zone '{value}'") from exc
    return value


class ShiftCompareConfig(BaseSettings):
    """Main configuration for the shift comparison service and CLI."""

    environment: Literal["development", "production"] = Field(
        default="development", description="Deployment environment"
    )

    # Data API
    api_base_url: str = Field(
        default="http://localhost:3000", description="Machine data API base URL"
    )
    api_token: str | None = Field(default=None, description="Bearer token for the data API")
    request_timeout_sec: float = Field(default=30.0, gt=0, description="Per-request timeout")

    # Time handling
    timezone: str = Field(
        default="UTC",
        description="IANA zone whose wall clock defines hour buckets and labels",
    )

    # Default shift (used when no explicit windows are given)
    shift_start_hour: int = Field(default=6, ge=0, le=23, description="Shift start hour")
    shift_end_hour: int = Field(default=18, ge=1, le=24, description="Shift end hour")

    log_level: LogLevel = Field(default="INFO", description="Logging level for entry points")

    model_config = {"env_prefix": "SHIFT_COMPARE_"}

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        return ensure_time_zone(value)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _check_consistency(self) -> "ShiftCompareConfig":
        if self.shift_end_hour <= self.shift_start_hour:
            raise ValueError("shift_end_hour must be after shift_start_hour")
        if self.environment == "production" and not self.api_base_url.startswith("https://"):
            raise ValueError("Production API endpoint must use HTTPS")
        return self
