"""Availability of the slots of a date.

Combines the schedule-only slots with the current time and a snapshot of
existing appointments. Slot generation and validation receive the same
session length, so an available slot never touches a break or runs past
the end of the work window.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from loguru import logger

from ...core.enums import ValidationReason
from ...models.appointment import Appointment
from ...models.schedule import ScheduleConfig
from ...models.scheduling import SlotStatus
from ...utils.time_utils import at_time, localize
from .conflict_validator import validate
from .slot_generator import generate


def compute_availability(
    day: date,
    config: ScheduleConfig,
    appointments: Iterable[Appointment],
    now: datetime,
    exclude_id: Optional[str] = None,
    duration_minutes: Optional[int] = None,
) -> List[SlotStatus]:
    """
    Availability of every slot of a date.

    Args:
        day: Calendar date
        config: Weekly schedule of the scope
        appointments: Snapshot of existing appointments
        now: Current instant; slots starting before it are past
        exclude_id: Appointment to ignore (when rescheduling it)
        duration_minutes: Session length; defaults to the schedule policy

    Returns:
        Slots ordered by time, each marked available or with a reason
    """
    duration = duration_minutes or config.policy.duration_minutes
    tz = config.tz
    now_local = localize(now, tz)
    snapshot = list(appointments)

    statuses: List[SlotStatus] = []
    for slot_time in generate(day, config, duration):
        start_at = at_time(day, slot_time, tz)
        if start_at < now_local:
            statuses.append(
                SlotStatus(
                    time=slot_time,
                    start_at=start_at,
                    available=False,
                    reason=ValidationReason.PAST_TIME,
                )
            )
            continue

        verdict = validate(start_at, duration, config, snapshot, exclude_id)
        statuses.append(
            SlotStatus(
                time=slot_time,
                start_at=start_at,
                available=verdict.is_valid,
                reason=verdict.reason,
                conflicting_id=verdict.conflicting_id,
            )
        )

    logger.debug(
        f"Availability for {day.isoformat()}: "
        f"{sum(1 for s in statuses if s.available)}/{len(statuses)} slots free"
    )
    return statuses


def has_available_slots(
    day: date,
    config: ScheduleConfig,
    appointments: Iterable[Appointment],
    now: datetime,
    duration_minutes: Optional[int] = None,
) -> bool:
    """Whether at least one slot of the date can still be booked."""
    if not config.is_work_day(day):
        return False
    return any(
        slot.available
        for slot in compute_availability(
            day, config, appointments, now, duration_minutes=duration_minutes
        )
    )


def next_available_date(
    start: date,
    config: ScheduleConfig,
    appointments: Iterable[Appointment],
    now: datetime,
    horizon_days: int,
    duration_minutes: Optional[int] = None,
) -> Optional[date]:
    """
    First date from ``start`` (inclusive) with a free slot.

    Args:
        start: First date to look at
        config: Weekly schedule of the scope
        appointments: Snapshot covering the whole search horizon
        now: Current instant
        horizon_days: Number of days to search
        duration_minutes: Session length; defaults to the schedule policy

    Returns:
        The date, or None if nothing is free within the horizon
    """
    snapshot = list(appointments)
    for offset in range(horizon_days):
        candidate = start + timedelta(days=offset)
        if has_available_slots(candidate, config, snapshot, now, duration_minutes):
            return candidate
    return None
