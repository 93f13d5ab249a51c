"""Weekly schedule loader with YAML and environment variable support."""

import os
import re
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from dotenv import load_dotenv
from loguru import logger
from pydantic import ValidationError

from ..models.schedule import ScheduleConfig
from ..services.scheduling.config_validator import ScheduleConfigValidator
from .enums import DayOfWeek
from .exceptions import ConfigurationError, MissingEnvironmentVariableError
from .settings import get_settings

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")

_TIME_FIELDS = ("work_start", "work_end", "start", "end")


def load_env_variables() -> None:
    """Load environment variables from a .env file in the working directory."""
    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)


def substitute_env_vars(value: Any, strict: bool = False) -> Any:
    """
    Recursively substitute ``${VAR}`` references in configuration values.

    Args:
        value: Configuration value (string, dict, list, etc.)
        strict: Raise for unset variables instead of using an empty string

    Returns:
        Value with environment variables substituted

    Raises:
        MissingEnvironmentVariableError: If ``strict`` and a variable is unset
    """
    if isinstance(value, str):
        for match in _ENV_PATTERN.findall(value):
            env_value = os.getenv(match)
            if env_value is None:
                if strict:
                    raise MissingEnvironmentVariableError(match)
                logger.debug(f"Environment variable '{match}' not set, using empty string")
                env_value = ""
            value = value.replace(f"${{{match}}}", env_value)
        return value
    elif isinstance(value, dict):
        return {k: substitute_env_vars(v, strict) for k, v in value.items()}
    elif isinstance(value, list):
        return [substitute_env_vars(item, strict) for item in value]
    else:
        return value


def _coerce_times(entry: Dict[str, Any]) -> Dict[str, Any]:
    """
    Turn YAML sexagesimal integers back into "HH:MM".

    PyYAML reads an unquoted ``17:00`` as the integer 1020 (minutes).
    """
    fixed = dict(entry)
    for key in _TIME_FIELDS:
        value = fixed.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            fixed[key] = f"{value // 60:02d}:{value % 60:02d}"
    if isinstance(fixed.get("breaks"), list):
        fixed["breaks"] = [
            _coerce_times(b) if isinstance(b, dict) else b for b in fixed["breaks"]
        ]
    return fixed


def schedule_config_from_dict(data: Dict[str, Any]) -> ScheduleConfig:
    """
    Build and validate a schedule from its admin-facing dictionary form.

    Days are keyed by weekday name; each day may omit ``day_of_week``.
    Times are "HH:MM" strings. A schedule without a timezone gets
    ``SCHEDULE_TIMEZONE``.

    Raises:
        ConfigurationError: If the structure is invalid
        ScheduleConfigError: If the schedule breaks its invariants
    """
    days: Dict[str, Any] = {}
    for name, day in (data.get("days") or {}).items():
        try:
            key = DayOfWeek.parse(str(name))
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        if day is not None and not isinstance(day, dict):
            raise ConfigurationError(f"Schedule for {key.value} must be a mapping")
        days[key.value] = {"day_of_week": key.value, **_coerce_times(day or {})}

    payload = {k: v for k, v in data.items() if k != "days"}
    payload["days"] = days
    if not payload.get("timezone"):
        payload["timezone"] = get_settings().schedule_timezone
    scope_id = payload.get("scope_id")
    payload["scope_id"] = str(scope_id) if scope_id not in (None, "") else None

    try:
        config = ScheduleConfig.model_validate(payload)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid schedule configuration: {e}") from e

    return ScheduleConfigValidator.validate(config)


def schedule_config_to_dict(config: ScheduleConfig) -> Dict[str, Any]:
    """Admin-facing dictionary form of a schedule (inverse of the loader)."""
    return {
        "scope_id": config.scope_id,
        "timezone": config.timezone,
        "policy": {
            "duration_minutes": config.policy.duration_minutes,
            "interval_minutes": config.policy.interval_minutes,
        },
        "days": {
            day.value: {
                "is_active": schedule.is_active,
                "work_start": schedule.work_start.strftime("%H:%M"),
                "work_end": schedule.work_end.strftime("%H:%M"),
                "breaks": [
                    {
                        "start": b.start.strftime("%H:%M"),
                        "end": b.end.strftime("%H:%M"),
                        "label": b.label,
                    }
                    for b in schedule.breaks
                ],
            }
            for day, schedule in sorted(config.days.items(), key=lambda item: item[0].weekday)
        },
    }


def load_schedule_config(
    config_path: Union[str, Path] = "config/schedule.yaml", strict_env: bool = False
) -> ScheduleConfig:
    """
    Load a weekly schedule from YAML with environment variable substitution.

    Args:
        config_path: Path to YAML schedule file
        strict_env: Fail on unset ${VAR} references

    Returns:
        Validated ScheduleConfig

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigurationError: If the YAML is invalid or not a mapping
        ScheduleConfigError: If the schedule breaks its invariants
        MissingEnvironmentVariableError: If strict_env and a variable is unset
    """
    load_env_variables()

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Schedule file not found: {config_path}")

    with open(config_file, "r", encoding="utf-8") as f:
        try:
            data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Schedule file {config_path} must contain a mapping")

    return schedule_config_from_dict(substitute_env_vars(data, strict=strict_env))
