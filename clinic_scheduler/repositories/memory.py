"""In-memory repositories (single process; used by tests and the CLI)."""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from loguru import logger

from ..core.enums import AppointmentStatus
from ..core.exceptions import RecordNotFoundError, RepositoryConflictError
from ..models.appointment import Appointment
from ..models.schedule import ScheduleConfig
from ..services.scheduling.config_validator import ScheduleConfigValidator
from .base import AppointmentRepository, ScheduleConfigRepository


class InMemoryAppointmentRepository(AppointmentRepository):
    """
    Appointment store that rejects overlapping active appointments.

    The check runs under the store lock, so two writers that both passed
    validation cannot commit overlapping times, even with different
    durations. Stores backed by a database usually only enforce a unique
    (scope_id, start_at) and rely on the re-check before commit.
    """

    supports_bulk_create = True

    def __init__(self, appointments: Optional[Iterable[Appointment]] = None):
        """
        Initialize the store.

        Args:
            appointments: Initial appointments
        """
        self._store: Dict[str, Appointment] = {a.id: a for a in appointments or []}
        self._lock = asyncio.Lock()

    @staticmethod
    def _clash(first: Appointment, second: Appointment) -> bool:
        return (
            first.scope_id == second.scope_id
            and first.start_at < second.end_at
            and second.start_at < first.end_at
        )

    def _taken_by(self, appointment: Appointment) -> Optional[Appointment]:
        """Active appointment of the same scope overlapping this one."""
        for existing in sorted(self._store.values(), key=lambda a: a.start_at):
            if existing.id == appointment.id or not existing.blocks_time:
                continue
            if self._clash(existing, appointment):
                return existing
        return None

    def _with_id(self, appointment: Appointment) -> Appointment:
        if appointment.id:
            return appointment
        return appointment.model_copy(update={"id": str(uuid.uuid4())})

    async def get_by_id(self, id: str) -> Optional[Appointment]:
        """Get appointment by ID."""
        async with self._lock:
            return self._store.get(id)

    async def list_by_date_range(
        self, scope_id: Optional[str], start: datetime, end: datetime
    ) -> List[Appointment]:
        """Appointments of a scope that overlap ``[start, end)``."""
        async with self._lock:
            found = [
                a
                for a in self._store.values()
                if a.scope_id == scope_id and a.start_at < end and a.end_at > start
            ]
        return sorted(found, key=lambda a: a.start_at)

    async def create(self, appointment: Appointment) -> Appointment:
        """Store a new appointment."""
        async with self._lock:
            appointment = self._with_id(appointment)
            taken = self._taken_by(appointment)
            if taken is not None:
                raise RepositoryConflictError(
                    scope_id=appointment.scope_id,
                    start_at=appointment.start_at,
                    conflicting_id=taken.id,
                )
            self._store[appointment.id] = appointment
            logger.debug(f"Appointment {appointment.id} stored at {appointment.start_at}")
            return appointment

    async def create_many(self, appointments: List[Appointment]) -> List[Appointment]:
        """Store several appointments atomically."""
        async with self._lock:
            prepared = [self._with_id(a) for a in appointments]
            for i, appointment in enumerate(prepared):
                taken = self._taken_by(appointment)
                in_batch = any(self._clash(other, appointment) for other in prepared[:i])
                if taken is not None or in_batch:
                    raise RepositoryConflictError(
                        scope_id=appointment.scope_id,
                        start_at=appointment.start_at,
                        conflicting_id=taken.id if taken else None,
                    )
            for appointment in prepared:
                self._store[appointment.id] = appointment
            logger.debug(f"Stored {len(prepared)} appointments in one batch")
            return prepared

    async def cancel(self, id: str) -> Appointment:
        """Mark an appointment as cancelled."""
        async with self._lock:
            existing = self._store.get(id)
            if existing is None:
                raise RecordNotFoundError("Appointment", id)
            cancelled = existing.model_copy(update={"status": AppointmentStatus.CANCELLED})
            self._store[id] = cancelled
            return cancelled

    async def update_start(self, id: str, start_at: datetime) -> Appointment:
        """Move an appointment to a new start."""
        async with self._lock:
            existing = self._store.get(id)
            if existing is None:
                raise RecordNotFoundError("Appointment", id)
            moved = existing.model_copy(update={"start_at": start_at})
            taken = self._taken_by(moved)
            if taken is not None:
                raise RepositoryConflictError(
                    scope_id=moved.scope_id, start_at=start_at, conflicting_id=taken.id
                )
            self._store[id] = moved
            return moved

    def all(self) -> List[Appointment]:
        """Every stored appointment (including cancelled ones)."""
        return sorted(self._store.values(), key=lambda a: a.start_at)


class InMemoryScheduleConfigRepository(ScheduleConfigRepository):
    """Schedule store keyed by scope; every save bumps the version."""

    def __init__(self, configs: Optional[Iterable[ScheduleConfig]] = None):
        self._store: Dict[Optional[str], ScheduleConfig] = {}
        self._lock = asyncio.Lock()
        for config in configs or []:
            self._store[config.scope_id] = ScheduleConfigValidator.validate(config)

    async def get(self, scope_id: Optional[str]) -> Optional[ScheduleConfig]:
        """Schedule stored for exactly this scope."""
        async with self._lock:
            return self._store.get(scope_id)

    async def save(self, config: ScheduleConfig) -> ScheduleConfig:
        """Validate and store a schedule."""
        ScheduleConfigValidator.validate(config)
        async with self._lock:
            previous = self._store.get(config.scope_id)
            version = (previous.version if previous else 0) + 1
            stored = config.model_copy(
                update={"version": version, "updated_at": datetime.now(timezone.utc)}
            )
            self._store[config.scope_id] = stored
        logger.info(f"Schedule for scope {config.scope_id or 'global'} saved (version {version})")
        return stored
