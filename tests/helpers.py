"""Builders shared by the test modules."""

from datetime import date, datetime, time
from typing import Optional
from zoneinfo import ZoneInfo

from clinic_scheduler.core.enums import AppointmentKind, AppointmentStatus
from clinic_scheduler.models.appointment import Appointment

SAO_PAULO = ZoneInfo("America/Sao_Paulo")

# 2024-03-04 is a Monday
MONDAY = date(2024, 3, 4)


def local(day: date, hour: int, minute: int = 0) -> datetime:
    """Aware datetime in the clinic timezone."""
    return datetime.combine(day, time(hour, minute), tzinfo=SAO_PAULO)


def make_appointment(
    id: str,
    start_at: datetime,
    duration_minutes: int = 50,
    status: AppointmentStatus = AppointmentStatus.SCHEDULED,
    scope_id: Optional[str] = None,
    kind: AppointmentKind = AppointmentKind.SESSION,
) -> Appointment:
    """Build an appointment with sensible defaults."""
    return Appointment(
        id=id,
        scope_id=scope_id,
        start_at=start_at,
        duration_minutes=duration_minutes,
        status=status,
        kind=kind,
    )
