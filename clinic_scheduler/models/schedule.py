"""Weekly schedule models.

A ``ScheduleConfig`` describes, for one scope (a clinic, or the global
default when ``scope_id`` is None), which weekdays are worked, the work
window and breaks of each day, and the session policy used to cut the
free time into bookable slots.
"""

from datetime import date, datetime, time
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..constants import ScheduleDefaults
from ..core.enums import DayOfWeek


class BreakInterval(BaseModel):
    """Part of a work window in which no session may be booked."""

    model_config = ConfigDict(frozen=True)

    start: time
    end: time
    label: str = Field(default="")


class DaySchedule(BaseModel):
    """Work window and breaks for one weekday."""

    model_config = ConfigDict(frozen=True)

    day_of_week: DayOfWeek
    is_active: bool = Field(default=True)
    work_start: time = Field(default=time(7, 0))
    work_end: time = Field(default=time(19, 0))
    breaks: List[BreakInterval] = Field(default_factory=list)

    @field_validator("day_of_week", mode="before")
    @classmethod
    def parse_day(cls, v):
        """Accept weekday names in any case."""
        if isinstance(v, str):
            return DayOfWeek.parse(v)
        return v


class SessionPolicy(BaseModel):
    """Length of a session and the gap kept after it."""

    model_config = ConfigDict(frozen=True)

    duration_minutes: int = Field(default=ScheduleDefaults.SESSION_DURATION_MINUTES, gt=0)
    interval_minutes: int = Field(default=ScheduleDefaults.SESSION_INTERVAL_MINUTES, ge=0)

    @property
    def step_minutes(self) -> int:
        """Distance between consecutive slot starts."""
        return self.duration_minutes + self.interval_minutes


class ScheduleConfig(BaseModel):
    """Weekly schedule of a scope."""

    model_config = ConfigDict(frozen=True)

    scope_id: Optional[str] = Field(default=None)
    days: Dict[DayOfWeek, DaySchedule] = Field(default_factory=dict)
    policy: SessionPolicy = Field(default_factory=SessionPolicy)
    timezone: str = Field(default=ScheduleDefaults.TIMEZONE)
    version: int = Field(default=0, ge=0)
    updated_at: Optional[datetime] = Field(default=None)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @model_validator(mode="after")
    def check_day_keys(self) -> "ScheduleConfig":
        """Each entry must be stored under its own weekday."""
        for key, day in self.days.items():
            if key != day.day_of_week:
                raise ValueError(
                    f"schedule stored under '{key.value}' describes '{day.day_of_week.value}'"
                )
        return self

    @property
    def tz(self) -> ZoneInfo:
        """Timezone in which work windows are expressed."""
        return ZoneInfo(self.timezone)

    def day(self, day_of_week: DayOfWeek) -> Optional[DaySchedule]:
        """Schedule of a weekday, or None when not configured."""
        return self.days.get(day_of_week)

    def for_date(self, value: date) -> Optional[DaySchedule]:
        """Schedule that applies to a calendar date."""
        return self.days.get(DayOfWeek.from_date(value))

    def is_work_day(self, value: date) -> bool:
        """Whether bookings can happen on the date's weekday at all."""
        day = self.for_date(value)
        return day is not None and day.is_active

    def work_days(self) -> List[DayOfWeek]:
        """Active weekdays in week order."""
        return [day for day in DayOfWeek if self.days.get(day) and self.days[day].is_active]


def build_default_schedule_config() -> ScheduleConfig:
    """Monday to Friday, 07:00-19:00 with a lunch break, 50 minute sessions."""
    lunch = BreakInterval(
        start=time.fromisoformat(ScheduleDefaults.BREAK_START),
        end=time.fromisoformat(ScheduleDefaults.BREAK_END),
        label=ScheduleDefaults.BREAK_LABEL,
    )
    weekend = (DayOfWeek.SATURDAY, DayOfWeek.SUNDAY)
    days = {
        day: DaySchedule(
            day_of_week=day,
            is_active=day not in weekend,
            work_start=time.fromisoformat(ScheduleDefaults.WORK_START),
            work_end=time.fromisoformat(ScheduleDefaults.WORK_END),
            breaks=[lunch],
        )
        for day in DayOfWeek
    }
    return ScheduleConfig(
        scope_id=None,
        days=days,
        policy=SessionPolicy(
            duration_minutes=ScheduleDefaults.SESSION_DURATION_MINUTES,
            interval_minutes=ScheduleDefaults.SESSION_INTERVAL_MINUTES,
        ),
        timezone=ScheduleDefaults.TIMEZONE,
    )


# Used whenever no schedule is stored or the store cannot be read
DEFAULT_SCHEDULE_CONFIG: ScheduleConfig = build_default_schedule_config()


def copy_day_schedule(
    config: ScheduleConfig, source_day: DayOfWeek, target_days: List[DayOfWeek]
) -> ScheduleConfig:
    """
    Copy one weekday's schedule onto other weekdays.

    Args:
        config: Schedule to copy within
        source_day: Weekday whose window and breaks are copied
        target_days: Weekdays to overwrite

    Returns:
        New ScheduleConfig; the input is not modified

    Raises:
        KeyError: If the source day is not configured
    """
    source = config.days[source_day]
    days = dict(config.days)
    for target in target_days:
        days[target] = source.model_copy(update={"day_of_week": target})
    return config.model_copy(update={"days": days})
