"""Repository contracts and reference implementations."""

from .base import AppointmentRepository, ScheduleConfigRepository
from .cached import CachedScheduleConfigRepository
from .memory import InMemoryAppointmentRepository, InMemoryScheduleConfigRepository

__all__ = [
    "AppointmentRepository",
    "ScheduleConfigRepository",
    "CachedScheduleConfigRepository",
    "InMemoryAppointmentRepository",
    "InMemoryScheduleConfigRepository",
]
