"""Scheduling service - the boundary between repositories and the pure core.

Schedules are resolved here (scope, then global, then the built-in
default) and passed explicitly into the pure functions. Every commit
re-validates against a freshly read snapshot, because availability shown
to a user is stale by the time they submit.
"""

import asyncio
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Union

from loguru import logger

from ...core.enums import AppointmentKind, AppointmentStatus, RecurrenceFrequency, ValidationReason
from ...core.exceptions import (
    CompensationError,
    RecordNotFoundError,
    RepositoryConflictError,
    RepositoryError,
)
from ...core.result import Result, err, ok
from ...core.settings import SchedulerSettings, get_settings
from ...models.appointment import Appointment
from ...models.schedule import DEFAULT_SCHEDULE_CONFIG, ScheduleConfig
from ...models.scheduling import Occurrence, SeriesError, SlotStatus, ValidationResult
from ...repositories.base import AppointmentRepository, ScheduleConfigRepository
from ...utils.time_utils import at_time, localize
from . import availability, conflict_validator, recurrence


class SchedulingService:
    """Availability, validation and booking for one appointment store."""

    def __init__(
        self,
        appointments: AppointmentRepository,
        schedules: ScheduleConfigRepository,
        settings: Optional[SchedulerSettings] = None,
    ):
        """
        Initialize scheduling service.

        Args:
            appointments: Appointment store
            schedules: Schedule store
            settings: Scheduler settings (defaults to the global settings)
        """
        self.appointments = appointments
        self.schedules = schedules
        self.settings = settings or get_settings()

    # Schedule resolution

    async def get_schedule_config(self, scope_id: Optional[str]) -> ScheduleConfig:
        """
        Schedule that applies to a scope.

        Falls back from the scope's own schedule to the global one and then
        to ``DEFAULT_SCHEDULE_CONFIG``. The default is also used while the
        schedule store cannot be read.
        """
        try:
            config = await self.schedules.get(scope_id)
            if config is None and scope_id is not None:
                config = await self.schedules.get(None)
        except (RepositoryError, asyncio.TimeoutError) as e:
            logger.warning(f"Schedule store unavailable for scope {scope_id}, using default: {e}")
            config = None

        if config is None:
            return DEFAULT_SCHEDULE_CONFIG
        return config

    async def get_snapshot(
        self, scope_id: Optional[str], start: datetime, end: datetime
    ) -> List[Appointment]:
        """Fresh, immutable list of the scope's appointments overlapping [start, end)."""
        return list(await self.appointments.list_by_date_range(scope_id, start, end))

    # Queries

    async def compute_availability(
        self,
        scope_id: Optional[str],
        day: date,
        now: datetime,
        exclude_id: Optional[str] = None,
        duration_minutes: Optional[int] = None,
    ) -> List[SlotStatus]:
        """
        Availability of every slot of a date for a scope.

        Args:
            scope_id: Clinic ID, or None for the default scope
            day: Calendar date
            now: Current instant
            exclude_id: Appointment to ignore (when rescheduling it)
            duration_minutes: Session length; defaults to the schedule policy

        Returns:
            Slots ordered by time
        """
        config = await self.get_schedule_config(scope_id)
        day_start = at_time(day, time.min, config.tz)
        snapshot = await self.get_snapshot(scope_id, day_start, day_start + timedelta(days=1))
        return availability.compute_availability(
            day, config, snapshot, now, exclude_id, duration_minutes
        )

    async def validate(
        self,
        scope_id: Optional[str],
        start_at: datetime,
        duration_minutes: Optional[int] = None,
        exclude_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ValidationResult:
        """
        Verdict on a candidate appointment, against a freshly read snapshot.

        Args:
            scope_id: Clinic ID, or None for the default scope
            start_at: Candidate start
            duration_minutes: Candidate length; defaults to the schedule policy
            exclude_id: Appointment to ignore (the one being edited)
            now: When given, candidates starting before it are rejected as past

        Returns:
            ValidationResult
        """
        config = await self.get_schedule_config(scope_id)
        duration = duration_minutes or config.policy.duration_minutes
        start_at = localize(start_at, config.tz)

        if now is not None and start_at < localize(now, config.tz):
            return ValidationResult.rejected(ValidationReason.PAST_TIME)

        snapshot = await self.get_snapshot(
            scope_id, start_at, start_at + timedelta(minutes=duration)
        )
        return conflict_validator.validate(start_at, duration, config, snapshot, exclude_id)

    async def expand_and_validate_series(
        self,
        scope_id: Optional[str],
        base_start: datetime,
        frequency: Union[RecurrenceFrequency, str],
        count: int,
        duration_minutes: Optional[int] = None,
    ) -> Result[List[Occurrence], SeriesError]:
        """
        Expand a recurring booking and validate it as a whole.

        Raises:
            ValueError: If count or frequency are invalid
        """
        config = await self.get_schedule_config(scope_id)
        duration = duration_minutes or config.policy.duration_minutes
        occurrences = recurrence.expand(
            localize(base_start, config.tz),
            frequency,
            count,
            duration,
            max_count=self.settings.max_recurrence_count,
        )
        snapshot = await self.get_snapshot(
            scope_id, occurrences[0].start_at, occurrences[-1].end_at
        )
        return recurrence.validate_series(occurrences, config, snapshot)

    async def next_available_date(
        self,
        scope_id: Optional[str],
        start: date,
        now: datetime,
        duration_minutes: Optional[int] = None,
    ) -> Optional[date]:
        """First date from ``start`` with a free slot, within the search horizon."""
        config = await self.get_schedule_config(scope_id)
        horizon = self.settings.availability_search_days
        range_start = at_time(start, time.min, config.tz)
        snapshot = await self.get_snapshot(
            scope_id, range_start, range_start + timedelta(days=horizon)
        )
        return availability.next_available_date(
            start, config, snapshot, now, horizon, duration_minutes
        )

    # Commands

    async def book(
        self,
        scope_id: Optional[str],
        start_at: datetime,
        now: datetime,
        duration_minutes: Optional[int] = None,
        kind: AppointmentKind = AppointmentKind.SESSION,
        **fields,
    ) -> Result[Appointment, ValidationResult]:
        """
        Re-validate a single appointment and store it.

        Args:
            scope_id: Clinic ID, or None for the default scope
            start_at: Appointment start
            now: Current instant
            duration_minutes: Length; defaults to the schedule policy
            kind: Session, blocked or personal time
            **fields: Extra Appointment fields (patient_id, service, notes, ...)

        Returns:
            Success with the stored appointment, or Failure with the verdict;
            a lost race is reported as REPOSITORY_CONFLICT

        Raises:
            RepositoryError: On store failures other than a conflict
        """
        config = await self.get_schedule_config(scope_id)
        duration = duration_minutes or config.policy.duration_minutes
        start_at = localize(start_at, config.tz)

        verdict = await self.validate(scope_id, start_at, duration, now=now)
        if not verdict.is_valid:
            logger.info(f"Booking at {start_at.isoformat()} rejected: {verdict.reason.value}")
            return err(verdict)

        draft = Appointment(
            id="",
            scope_id=scope_id,
            start_at=start_at,
            duration_minutes=duration,
            status=AppointmentStatus.SCHEDULED,
            kind=kind,
            **fields,
        )
        try:
            created = await self.appointments.create(draft)
        except RepositoryConflictError as e:
            logger.warning(f"Slot {start_at.isoformat()} taken concurrently: {e.message}")
            return err(
                ValidationResult.rejected(
                    ValidationReason.REPOSITORY_CONFLICT, e.conflicting_id
                )
            )

        logger.info(f"Appointment {created.id} booked at {start_at.isoformat()}")
        return ok(created)

    async def block_time(
        self,
        scope_id: Optional[str],
        start_at: datetime,
        duration_minutes: int,
        now: datetime,
        notes: Optional[str] = None,
    ) -> Result[Appointment, ValidationResult]:
        """Reserve working time that must not be offered to patients."""
        return await self.book(
            scope_id,
            start_at,
            now,
            duration_minutes=duration_minutes,
            kind=AppointmentKind.BLOCKED,
            notes=notes,
        )

    async def reschedule(
        self,
        scope_id: Optional[str],
        appointment_id: str,
        new_start: datetime,
        now: datetime,
    ) -> Result[Appointment, ValidationResult]:
        """
        Move an appointment, validating the new time without counting itself.

        Raises:
            RecordNotFoundError: If the appointment does not exist
        """
        existing = await self.appointments.get_by_id(appointment_id)
        if existing is None:
            raise RecordNotFoundError("Appointment", appointment_id)

        verdict = await self.validate(
            scope_id, new_start, existing.duration_minutes, exclude_id=appointment_id, now=now
        )
        if not verdict.is_valid:
            return err(verdict)

        config = await self.get_schedule_config(scope_id)
        try:
            moved = await self.appointments.update_start(
                appointment_id, localize(new_start, config.tz)
            )
        except RepositoryConflictError as e:
            logger.warning(f"Reschedule of {appointment_id} lost a race: {e.message}")
            return err(
                ValidationResult.rejected(
                    ValidationReason.REPOSITORY_CONFLICT, e.conflicting_id
                )
            )

        logger.info(f"Appointment {appointment_id} moved to {moved.start_at.isoformat()}")
        return ok(moved)

    async def book_series(
        self,
        scope_id: Optional[str],
        base_start: datetime,
        frequency: Union[RecurrenceFrequency, str],
        count: int,
        now: datetime,
        duration_minutes: Optional[int] = None,
        **fields,
    ) -> Result[List[Appointment], SeriesError]:
        """
        Validate a whole recurring series, then store all of it or nothing.

        Uses one bulk insert when the store supports it. Otherwise the
        occurrences are created one by one and, if one fails, the ones
        already created are cancelled again.

        Raises:
            ValueError: If count or frequency are invalid
            RepositoryError: On store failures other than a conflict
            CompensationError: If a partial series could not be rolled back
        """
        config = await self.get_schedule_config(scope_id)
        if localize(base_start, config.tz) < localize(now, config.tz):
            return err(SeriesError(index=0, reason=ValidationReason.PAST_TIME, start_at=base_start))

        checked = await self.expand_and_validate_series(
            scope_id, base_start, frequency, count, duration_minutes
        )
        if checked.is_failure():
            return checked

        occurrences: List[Occurrence] = checked.unwrap()
        drafts = [
            Appointment(
                id="",
                scope_id=scope_id,
                start_at=o.start_at,
                duration_minutes=o.duration_minutes,
                status=AppointmentStatus.SCHEDULED,
                kind=AppointmentKind.SESSION,
                **fields,
            )
            for o in occurrences
        ]

        if self.appointments.supports_bulk_create:
            try:
                created = await self.appointments.create_many(drafts)
            except RepositoryConflictError as e:
                index = self._index_of(occurrences, e.details.get("start_at"))
                logger.warning(f"Recurring series lost a race at occurrence {index}")
                return err(
                    SeriesError(
                        index=index,
                        reason=ValidationReason.REPOSITORY_CONFLICT,
                        conflicting_id=e.conflicting_id,
                        start_at=occurrences[index].start_at,
                    )
                )
            logger.info(f"Recurring series of {len(created)} stored in one batch")
            return ok(created)

        return await self._create_with_compensation(occurrences, drafts)

    async def _create_with_compensation(
        self, occurrences: List[Occurrence], drafts: List[Appointment]
    ) -> Result[List[Appointment], SeriesError]:
        created: List[Appointment] = []
        for occurrence, draft in zip(occurrences, drafts):
            try:
                created.append(await self.appointments.create(draft))
            except RepositoryConflictError as e:
                await self._compensate(created)
                logger.warning(
                    f"Recurring series lost a race at occurrence {occurrence.index}; "
                    f"rolled back {len(created)} created"
                )
                return err(
                    SeriesError(
                        index=occurrence.index,
                        reason=ValidationReason.REPOSITORY_CONFLICT,
                        conflicting_id=e.conflicting_id,
                        start_at=occurrence.start_at,
                    )
                )
            except (RepositoryError, asyncio.TimeoutError):
                await self._compensate(created)
                raise

        logger.info(f"Recurring series of {len(created)} stored one by one")
        return ok(created)

    async def _compensate(self, created: List[Appointment]) -> None:
        """Cancel appointments created before a series failed."""
        failed: List[str] = []
        for appointment in created:
            try:
                await self.appointments.cancel(appointment.id)
            except (RepositoryError, asyncio.TimeoutError) as e:
                logger.error(f"Failed to roll back appointment {appointment.id}: {e}")
                failed.append(appointment.id)
        if failed:
            raise CompensationError([a.id for a in created], failed)

    @staticmethod
    def _index_of(occurrences: List[Occurrence], start_iso: Optional[str]) -> int:
        """Index of the occurrence a store conflict refers to (first one if unknown)."""
        if start_iso:
            for occurrence in occurrences:
                if occurrence.start_at.isoformat() == start_iso:
                    return occurrence.index
        return 0
