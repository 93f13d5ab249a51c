"""Recurring appointment series: expansion and all-or-nothing validation."""

import calendar
from datetime import datetime, timedelta
from typing import Iterable, List, Union

from loguru import logger

from ...constants import RecurrenceLimits
from ...core.enums import AppointmentKind, AppointmentStatus, RecurrenceFrequency
from ...core.result import Result, err, ok
from ...models.appointment import Appointment
from ...models.schedule import ScheduleConfig
from ...models.scheduling import Occurrence, SeriesError
from ...utils.time_utils import localize
from .conflict_validator import validate


def add_months(value: datetime, months: int) -> datetime:
    """
    Advance a datetime by calendar months, keeping the wall-clock time.

    A day that does not exist in the target month is clamped to the last
    day of that month (Jan 31 + 1 month = Feb 28 or 29).
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return value.replace(year=year, month=month, day=min(value.day, last_day))


def occurrence_start(
    base_start: datetime, frequency: RecurrenceFrequency, index: int
) -> datetime:
    """Start of occurrence ``index`` (0-based), always computed from the base."""
    if frequency == RecurrenceFrequency.WEEKLY:
        return base_start + timedelta(weeks=index)
    if frequency == RecurrenceFrequency.BIWEEKLY:
        return base_start + timedelta(weeks=2 * index)
    if frequency == RecurrenceFrequency.MONTHLY:
        return add_months(base_start, index)
    raise ValueError(f"Unsupported recurrence frequency: {frequency}")


def expand(
    base_start: datetime,
    frequency: Union[RecurrenceFrequency, str],
    count: int,
    duration_minutes: int,
    max_count: int = RecurrenceLimits.MAX_OCCURRENCES,
) -> List[Occurrence]:
    """
    Expand a recurring booking into its occurrences.

    Aware datetimes keep their local time of day across DST changes, since
    arithmetic on a zone-aware datetime is wall-clock arithmetic.

    Args:
        base_start: First occurrence
        frequency: weekly, biweekly or monthly
        count: Number of occurrences, including the first
        duration_minutes: Length of each occurrence
        max_count: Upper bound for ``count``

    Returns:
        Occurrences ordered by index

    Raises:
        ValueError: If count is out of range or the frequency is unknown
    """
    frequency = RecurrenceFrequency(frequency)
    if not RecurrenceLimits.MIN_OCCURRENCES <= count <= max_count:
        raise ValueError(
            f"Occurrence count must be between {RecurrenceLimits.MIN_OCCURRENCES} "
            f"and {max_count}, got {count}"
        )
    if duration_minutes <= 0:
        raise ValueError(f"Session duration must be positive, got {duration_minutes}")

    return [
        Occurrence(
            index=i,
            start_at=occurrence_start(base_start, frequency, i),
            duration_minutes=duration_minutes,
        )
        for i in range(count)
    ]


def _provisional(occurrence: Occurrence, config: ScheduleConfig) -> Appointment:
    """Stand-in appointment for an occurrence that passed validation."""
    return Appointment(
        id=occurrence.provisional_id,
        scope_id=config.scope_id,
        start_at=localize(occurrence.start_at, config.tz),
        duration_minutes=occurrence.duration_minutes,
        status=AppointmentStatus.SCHEDULED,
        kind=AppointmentKind.SESSION,
    )


def validate_series(
    occurrences: List[Occurrence],
    config: ScheduleConfig,
    appointments: Iterable[Appointment],
) -> Result[List[Occurrence], SeriesError]:
    """
    Validate every occurrence of a series; reject the series as a whole.

    Occurrences that pass are placed provisionally in a private copy of the
    snapshot, so a later occurrence that collides with an earlier one of the
    same series is rejected too. The caller's snapshot is not modified.

    Args:
        occurrences: Output of :func:`expand`
        config: Weekly schedule of the scope
        appointments: Snapshot of existing appointments

    Returns:
        Success with the occurrences, or Failure with the first failing
        occurrence and its reason
    """
    working: List[Appointment] = list(appointments)

    for occurrence in occurrences:
        verdict = validate(occurrence.start_at, occurrence.duration_minutes, config, working)
        if not verdict.is_valid:
            error = SeriesError(
                index=occurrence.index,
                reason=verdict.reason,
                conflicting_id=verdict.conflicting_id,
                start_at=occurrence.start_at,
            )
            logger.info(f"Recurring series rejected: {error}")
            return err(error)
        working.append(_provisional(occurrence, config))

    return ok(occurrences)
