"""Scheduling-related constants (defaults, limits)."""

from typing import Final


class ScheduleDefaults:
    """Values used when no schedule has been configured."""

    TIMEZONE: Final[str] = "America/Sao_Paulo"
    WORK_START: Final[str] = "07:00"
    WORK_END: Final[str] = "19:00"
    BREAK_START: Final[str] = "12:00"
    BREAK_END: Final[str] = "13:00"
    BREAK_LABEL: Final[str] = "Almoço"
    SESSION_DURATION_MINUTES: Final[int] = 50
    SESSION_INTERVAL_MINUTES: Final[int] = 10
    SEARCH_HORIZON_DAYS: Final[int] = 60


class RecurrenceLimits:
    """Bounds for recurring series."""

    MIN_OCCURRENCES: Final[int] = 1
    MAX_OCCURRENCES: Final[int] = 26
    DEFAULT_OCCURRENCES: Final[int] = 4
