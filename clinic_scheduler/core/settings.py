"""Application settings with Pydantic validation."""

from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..constants import RecurrenceLimits, ScheduleDefaults


class SchedulerSettings(BaseSettings):
    """Scheduler settings with validation and environment variable support."""

    # Environment
    env: str = Field(
        default="production", description="Environment (production, development, testing)"
    )

    # Logging
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_json: bool = Field(default=False, description="Write JSON-lines log file")

    # Schedule
    schedule_timezone: str = Field(
        default=ScheduleDefaults.TIMEZONE,
        description="IANA timezone used when a schedule does not declare one",
    )
    schedule_config_path: str = Field(
        default="config/schedule.yaml", description="Path to the YAML weekly schedule"
    )
    config_cache_ttl_seconds: float = Field(
        default=300.0, ge=0, description="How long resolved schedules stay cached"
    )
    max_recurrence_count: int = Field(
        default=RecurrenceLimits.MAX_OCCURRENCES,
        ge=1,
        le=RecurrenceLimits.MAX_OCCURRENCES,
        description="Maximum occurrences in a recurring series",
    )
    availability_search_days: int = Field(
        default=ScheduleDefaults.SEARCH_HORIZON_DAYS,
        ge=1,
        le=366,
        description="How many days ahead to search for the next free slot",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env
    )

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ["production", "development", "testing", "staging"]
        if v.lower() not in allowed:
            raise ValueError(f'ENV must be one of: {", ".join(allowed)}')
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f'LOG_LEVEL must be one of: {", ".join(allowed)}')
        return v_upper

    @field_validator("schedule_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate that the timezone is a known IANA name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v


# Singleton instance
_settings: Optional[SchedulerSettings] = None


def get_settings() -> SchedulerSettings:
    """
    Get application settings singleton.

    Returns:
        SchedulerSettings instance

    Raises:
        ValidationError: If settings are invalid
    """
    global _settings
    if _settings is None:
        _settings = SchedulerSettings()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
