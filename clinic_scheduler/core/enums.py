"""Centralized enum definitions for clinic scheduling."""

from datetime import date
from enum import Enum


class AppointmentStatus(str, Enum):
    """Status values for stored appointments."""
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    DONE = "done"
    CANCELLED = "cancelled"

    @classmethod
    def values(cls) -> list:
        """Return list of all enum values."""
        return [e.value for e in cls]


class AppointmentKind(str, Enum):
    """Kinds of calendar entries that occupy time."""
    SESSION = "session"
    BLOCKED = "blocked"
    PERSONAL = "personal"

    @classmethod
    def values(cls) -> list:
        """Return list of all enum values."""
        return [e.value for e in cls]


class RecurrenceFrequency(str, Enum):
    """Repeat frequencies for recurring appointments."""
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"

    @classmethod
    def values(cls) -> list:
        """Return list of all enum values."""
        return [e.value for e in cls]


class ValidationReason(str, Enum):
    """Reasons a candidate slot cannot be booked."""
    NON_WORK_DAY = "non_work_day"
    OUTSIDE_WORKING_HOURS = "outside_working_hours"
    IN_BREAK = "in_break"
    PAST_TIME = "past_time"
    CONFLICT = "conflict"
    REPOSITORY_CONFLICT = "repository_conflict"
    REPOSITORY_FAILURE = "repository_failure"

    @classmethod
    def values(cls) -> list:
        """Return list of all enum values."""
        return [e.value for e in cls]


class BookingFailureKind(str, Enum):
    """Why a booking submission did not go through."""
    INVALID_CONTACT = "invalid_contact"
    SLOT_UNAVAILABLE = "slot_unavailable"
    SERIES_REJECTED = "series_rejected"
    SLOT_TAKEN = "slot_taken"
    REPOSITORY_FAILURE = "repository_failure"

    @property
    def recoverable(self) -> bool:
        """Whether the patient can fix the problem and submit again."""
        return self != BookingFailureKind.REPOSITORY_FAILURE


class BookingStep(str, Enum):
    """States of the public booking workflow."""
    SELECT_SERVICE = "select_service"
    SELECT_DATE_TIME = "select_date_time"
    ENTER_DETAILS = "enter_details"
    SUBMITTED = "submitted"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transitions are possible."""
        return self in (BookingStep.SUBMITTED, BookingStep.FAILED)


class DayOfWeek(str, Enum):
    """
    Weekday names as stored by the admin schedule editor.

    This enum owns the only mapping between weekday names, Python
    ``date.weekday()`` numbers (0 = Monday) and calendar numbers used by
    the booking calendar (0 = Sunday).
    """
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def weekday(self) -> int:
        """Python weekday number (0 = Monday)."""
        return _WEEKDAY_NUMBERS[self]

    @property
    def calendar_number(self) -> int:
        """Calendar weekday number (0 = Sunday)."""
        return (_WEEKDAY_NUMBERS[self] + 1) % 7

    @classmethod
    def from_weekday(cls, number: int) -> "DayOfWeek":
        """Map a Python weekday number (0 = Monday) to a DayOfWeek."""
        if not 0 <= number <= 6:
            raise ValueError(f"Invalid weekday number: {number}")
        return _DAYS_BY_WEEKDAY[number]

    @classmethod
    def from_calendar_number(cls, number: int) -> "DayOfWeek":
        """Map a calendar weekday number (0 = Sunday) to a DayOfWeek."""
        if not 0 <= number <= 6:
            raise ValueError(f"Invalid calendar weekday number: {number}")
        return _DAYS_BY_WEEKDAY[(number + 6) % 7]

    @classmethod
    def from_date(cls, value: date) -> "DayOfWeek":
        """Weekday of a date (or datetime)."""
        return _DAYS_BY_WEEKDAY[value.weekday()]

    @classmethod
    def parse(cls, name: str) -> "DayOfWeek":
        """Parse a weekday name case-insensitively."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown weekday name: {name!r}") from None


_WEEKDAY_NUMBERS = {
    DayOfWeek.MONDAY: 0,
    DayOfWeek.TUESDAY: 1,
    DayOfWeek.WEDNESDAY: 2,
    DayOfWeek.THURSDAY: 3,
    DayOfWeek.FRIDAY: 4,
    DayOfWeek.SATURDAY: 5,
    DayOfWeek.SUNDAY: 6,
}

_DAYS_BY_WEEKDAY = {number: day for day, number in _WEEKDAY_NUMBERS.items()}
