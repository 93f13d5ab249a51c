"""Data models for clinic scheduling."""

from .appointment import Appointment
from .booking import SERVICE_CATALOG, ContactInfo, ServiceType, get_service
from .schedule import (
    DEFAULT_SCHEDULE_CONFIG,
    BreakInterval,
    DaySchedule,
    ScheduleConfig,
    SessionPolicy,
    build_default_schedule_config,
    copy_day_schedule,
)
from .scheduling import Occurrence, SeriesError, SlotStatus, ValidationResult

__all__ = [
    "Appointment",
    "BreakInterval",
    "ContactInfo",
    "DaySchedule",
    "DEFAULT_SCHEDULE_CONFIG",
    "Occurrence",
    "ScheduleConfig",
    "SERVICE_CATALOG",
    "SeriesError",
    "ServiceType",
    "SessionPolicy",
    "SlotStatus",
    "ValidationResult",
    "build_default_schedule_config",
    "copy_day_schedule",
    "get_service",
]
