"""Date and time helpers shared by the scheduling modules."""

from datetime import date, datetime, time
from zoneinfo import ZoneInfo

MINUTES_PER_DAY = 24 * 60


def minutes_of(value: time) -> int:
    """Minutes since midnight of a time of day."""
    return value.hour * 60 + value.minute


def time_from_minutes(minutes: int) -> time:
    """
    Time of day for a minute offset.

    Raises:
        ValueError: If the offset is outside a single day
    """
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"Minute offset out of range: {minutes}")
    return time(minutes // 60, minutes % 60)


def localize(value: datetime, tz: ZoneInfo) -> datetime:
    """
    Express a datetime in the given timezone.

    Naive datetimes are taken as wall-clock time in ``tz``.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def at_time(day: date, value: time, tz: ZoneInfo) -> datetime:
    """Aware datetime for a wall-clock time on a date."""
    return datetime.combine(day, value, tzinfo=tz)



def format_interval(start: time, end: time) -> str:
    """Human readable HH:MM-HH:MM."""
    return f"{start.strftime('%H:%M')}-{end.strftime('%H:%M')}"
