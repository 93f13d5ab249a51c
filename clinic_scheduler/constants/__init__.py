"""Constants for clinic scheduling.

All classes can be imported directly from this package:
    from clinic_scheduler.constants import ScheduleDefaults, RecurrenceLimits
"""

from .scheduling import RecurrenceLimits, ScheduleDefaults

__all__ = [
    "RecurrenceLimits",
    "ScheduleDefaults",
]
