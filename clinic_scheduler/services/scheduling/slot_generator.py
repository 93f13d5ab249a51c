"""Slot generation from the shape of a weekly schedule.

Slots depend only on the schedule: existing bookings and the current time
are applied later by the availability engine.
"""

from datetime import date, datetime, time
from typing import List, Optional, Tuple

from loguru import logger

from ...models.schedule import DaySchedule, ScheduleConfig
from ...utils.time_utils import at_time, minutes_of, time_from_minutes

# Half-open [start, end) interval in minutes since midnight
MinuteInterval = Tuple[int, int]


def free_intervals(day: DaySchedule) -> List[MinuteInterval]:
    """
    Subtract the breaks of a day from its work window.

    Args:
        day: Day schedule (breaks sorted and non-overlapping)

    Returns:
        Ordered free sub-intervals of [work_start, work_end), possibly empty
    """
    window_start = minutes_of(day.work_start)
    window_end = minutes_of(day.work_end)
    if window_start >= window_end:
        return []

    intervals: List[MinuteInterval] = []
    cursor = window_start
    for brk in sorted(day.breaks, key=lambda b: b.start):
        brk_start = max(minutes_of(brk.start), window_start)
        brk_end = min(minutes_of(brk.end), window_end)
        if brk_start >= brk_end:
            continue
        if brk_start > cursor:
            intervals.append((cursor, brk_start))
        cursor = max(cursor, brk_end)

    if cursor < window_end:
        intervals.append((cursor, window_end))
    return intervals


def slot_minutes(
    interval: MinuteInterval, duration_minutes: int, interval_minutes: int
) -> List[int]:
    """
    Slot starts inside one free interval.

    Walks the interval in steps of ``duration + interval`` and keeps every
    start at which a full session still fits before the interval ends.
    """
    start, end = interval
    step = duration_minutes + interval_minutes
    starts: List[int] = []
    current = start
    while current + duration_minutes <= end:
        starts.append(current)
        current += step
    return starts


def generate(
    day: date, config: ScheduleConfig, duration_minutes: Optional[int] = None
) -> List[time]:
    """
    Candidate session start times for a date.

    Args:
        day: Calendar date
        config: Weekly schedule of the scope
        duration_minutes: Session length; defaults to the schedule policy

    Returns:
        Ordered start times; empty on non-working days or when the breaks
        leave no room for a session
    """
    schedule = config.for_date(day)
    if schedule is None or not schedule.is_active:
        return []

    duration = duration_minutes or config.policy.duration_minutes
    if duration <= 0:
        raise ValueError(f"Session duration must be positive, got {duration}")

    starts: List[time] = []
    for interval in free_intervals(schedule):
        for minute in slot_minutes(interval, duration, config.policy.interval_minutes):
            starts.append(time_from_minutes(minute))

    logger.debug(f"Generated {len(starts)} slots for {day.isoformat()} (duration={duration})")
    return starts


def generate_instants(
    day: date, config: ScheduleConfig, duration_minutes: Optional[int] = None
) -> List[datetime]:
    """Same as :func:`generate`, as timezone-aware datetimes in the schedule's zone."""
    tz = config.tz
    return [at_time(day, start, tz) for start in generate(day, config, duration_minutes)]
