"""Conflict detection between a candidate appointment and existing ones.

Intervals are half-open: an appointment ending at 10:50 and another
starting at 10:50 do not overlap.
"""

from datetime import datetime, timedelta
from typing import Iterable, Optional

from loguru import logger

from ...core.enums import ValidationReason
from ...models.appointment import Appointment
from ...models.schedule import ScheduleConfig
from ...models.scheduling import ValidationResult
from ...utils.time_utils import localize, minutes_of
from .slot_generator import free_intervals


def _align(value: datetime, reference: datetime) -> datetime:
    """Read a naive candidate as wall time in the zone of a stored appointment."""
    if value.tzinfo is None:
        return value.replace(tzinfo=reference.tzinfo)
    return value


def overlaps(candidate_start: datetime, candidate_duration: int, existing: Appointment) -> bool:
    """
    Check whether a candidate interval overlaps an existing appointment.

    Args:
        candidate_start: Start of the candidate
        candidate_duration: Candidate length in minutes
        existing: Stored appointment

    Returns:
        True if ``[start, start + duration)`` intersects the appointment
    """
    start = _align(candidate_start, existing.start_at)
    end = start + timedelta(minutes=candidate_duration)
    return start < existing.end_at and end > existing.start_at


def find_conflict(
    candidate_start: datetime,
    candidate_duration: int,
    appointments: Iterable[Appointment],
    exclude_id: Optional[str] = None,
) -> Optional[Appointment]:
    """
    First (by start time) non-cancelled appointment the candidate overlaps.

    Args:
        candidate_start: Start of the candidate
        candidate_duration: Candidate length in minutes
        appointments: Snapshot of existing appointments
        exclude_id: Appointment to ignore, used when re-validating an edit

    Returns:
        The conflicting appointment, or None
    """
    for appointment in sorted(appointments, key=lambda a: (a.start_at, a.id)):
        if not appointment.blocks_time:
            continue
        if exclude_id is not None and appointment.id == exclude_id:
            continue
        if overlaps(candidate_start, candidate_duration, appointment):
            return appointment
    return None


def check_schedule(
    candidate_start: datetime, candidate_duration: int, config: ScheduleConfig
) -> Optional[ValidationReason]:
    """
    Check a candidate against the shape of the schedule only.

    Returns:
        The rejection reason, or None when the candidate lies entirely inside
        one free part of a working day
    """
    local = localize(candidate_start, config.tz)
    schedule = config.for_date(local.date())
    if schedule is None or not schedule.is_active:
        return ValidationReason.NON_WORK_DAY

    start = local.hour * 60 + local.minute + local.second / 60
    end = start + candidate_duration

    if start < minutes_of(schedule.work_start) or end > minutes_of(schedule.work_end):
        return ValidationReason.OUTSIDE_WORKING_HOURS

    for free_start, free_end in free_intervals(schedule):
        if free_start <= start and end <= free_end:
            return None

    # Inside the work window but not inside a free part: a break is in the way
    return ValidationReason.IN_BREAK


def validate(
    candidate_start: datetime,
    candidate_duration: int,
    config: ScheduleConfig,
    appointments: Iterable[Appointment],
    exclude_id: Optional[str] = None,
) -> ValidationResult:
    """
    Decide whether a candidate appointment can be booked.

    Checks, in order: working day, working hours and breaks, then overlap
    with non-cancelled appointments of the snapshot. The same inputs always
    give the same verdict, so this is safe to re-run right before a commit.

    Args:
        candidate_start: Start of the candidate (naive means schedule-local)
        candidate_duration: Candidate length in minutes
        config: Weekly schedule of the scope
        appointments: Snapshot of existing appointments
        exclude_id: Appointment to ignore (the one being edited)

    Returns:
        ValidationResult; never raises for booking-time problems
    """
    reason = check_schedule(candidate_start, candidate_duration, config)
    if reason is not None:
        logger.debug(f"Candidate {candidate_start.isoformat()} rejected: {reason.value}")
        return ValidationResult.rejected(reason)

    conflict = find_conflict(
        localize(candidate_start, config.tz), candidate_duration, appointments, exclude_id
    )
    if conflict is not None:
        logger.debug(
            f"Candidate {candidate_start.isoformat()} conflicts with appointment {conflict.id}"
        )
        return ValidationResult.rejected(ValidationReason.CONFLICT, conflict.id)

    return ValidationResult.valid()
