"""Public booking workflow - service, date/time, contact details, submit.

The workflow holds the interactive state of one booking attempt. All
scheduling decisions are delegated to ``SchedulingService``; the final
submit re-validates against a fresh snapshot and, when the slot was lost
in the meantime, sends the patient back to pick another time without
discarding what they typed.
"""

import asyncio
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from loguru import logger
from pydantic import ValidationError

from ...constants import RecurrenceLimits
from ...core.enums import BookingFailureKind, BookingStep, RecurrenceFrequency, ValidationReason
from ...core.exceptions import InvalidTransitionError, RepositoryError
from ...core.logger import booking_id_ctx
from ...core.result import Result, err, ok
from ...models.appointment import Appointment
from ...models.booking import SERVICE_CATALOG, ContactInfo, ServiceType, get_service
from ...models.scheduling import SeriesError, SlotStatus
from ...utils.time_utils import at_time
from ..scheduling.scheduling_service import SchedulingService


@dataclass(frozen=True)
class BookingFailure:
    """Why a submission failed, for the page to present."""

    kind: BookingFailureKind
    message: str
    reason: Optional[ValidationReason] = None
    field: Optional[str] = None
    conflicting_id: Optional[str] = None
    series_error: Optional[SeriesError] = None

    @property
    def recoverable(self) -> bool:
        """Whether the patient can correct the input and submit again."""
        return self.kind.recoverable


@dataclass(frozen=True)
class Recurrence:
    """Repeat settings of a recurring booking."""

    frequency: RecurrenceFrequency
    count: int


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BookingWorkflow:
    """
    State machine for one booking attempt.

    Steps: SELECT_SERVICE -> SELECT_DATE_TIME -> ENTER_DETAILS -> SUBMITTED,
    with FAILED as a terminal step for unexpected store failures. Going back
    is always allowed and keeps everything already entered.
    """

    def __init__(
        self,
        scheduling: SchedulingService,
        scope_id: Optional[str] = None,
        clock: Callable[[], datetime] = _utcnow,
        catalog: Optional[List[ServiceType]] = None,
    ):
        """
        Initialize booking workflow.

        Args:
            scheduling: Scheduling service used for availability and commits
            scope_id: Clinic being booked, or None for the default scope
            clock: Source of the current instant
            catalog: Services that can be booked
        """
        self.scheduling = scheduling
        self.scope_id = scope_id
        self.clock = clock
        self.catalog = catalog or SERVICE_CATALOG

        self.booking_id = uuid.uuid4().hex[:12]
        self.step = BookingStep.SELECT_SERVICE
        self.service: Optional[ServiceType] = None
        self.date: Optional[date] = None
        self.time: Optional[time] = None
        self.recurrence: Optional[Recurrence] = None
        self.contact: Dict[str, Any] = {}
        self.last_failure: Optional[BookingFailure] = None
        self.appointments: List[Appointment] = []

    # Guards

    def _require(self, action: str, *steps: BookingStep) -> None:
        if self.step not in steps:
            raise InvalidTransitionError(self.step.value, action)

    @property
    def can_continue_to_date_time(self) -> bool:
        """Whether a service has been chosen."""
        return self.service is not None

    @property
    def can_continue_to_details(self) -> bool:
        """Whether both date and time have been chosen."""
        return self.date is not None and self.time is not None

    # Step 1: service

    def select_service(self, service: Union[ServiceType, str]) -> ServiceType:
        """
        Choose the service to book.

        Choosing a service with a different session length clears the
        selected time, since the offered slots depend on it.
        """
        self._require("select service", BookingStep.SELECT_SERVICE)
        chosen = service if isinstance(service, ServiceType) else get_service(service, self.catalog)
        if self.service is not None and self.service.duration_minutes != chosen.duration_minutes:
            self.time = None
        self.service = chosen
        return chosen

    def continue_to_date_time(self) -> None:
        """Move on to choosing the date and time."""
        self._require("continue to date/time", BookingStep.SELECT_SERVICE)
        if not self.can_continue_to_date_time:
            raise InvalidTransitionError(self.step.value, "continue to date/time", "no service chosen")
        self.step = BookingStep.SELECT_DATE_TIME

    # Step 2: date and time

    def select_date(self, value: date) -> None:
        """Choose a date; a different date clears the chosen time."""
        self._require("select date", BookingStep.SELECT_DATE_TIME)
        if value != self.date:
            self.time = None
        self.date = value

    def select_time(self, value: time) -> None:
        """Choose a start time on the selected date."""
        self._require("select time", BookingStep.SELECT_DATE_TIME)
        if self.date is None:
            raise InvalidTransitionError(self.step.value, "select time", "no date chosen")
        self.time = value

    def select_date_time(self, day: date, start: time) -> None:
        """Choose date and time together."""
        self.select_date(day)
        self.select_time(start)

    def set_recurrence(
        self, frequency: Union[RecurrenceFrequency, str], count: int = RecurrenceLimits.DEFAULT_OCCURRENCES
    ) -> None:
        """
        Make this a recurring booking.

        Raises:
            ValueError: If the frequency is unknown or the count is outside
                1..MAX_RECURRENCE_COUNT
        """
        self._require("set recurrence", BookingStep.SELECT_DATE_TIME, BookingStep.ENTER_DETAILS)
        limit = self.scheduling.settings.max_recurrence_count
        if not RecurrenceLimits.MIN_OCCURRENCES <= count <= limit:
            raise ValueError(f"Occurrence count must be between 1 and {limit}, got {count}")
        self.recurrence = Recurrence(RecurrenceFrequency(frequency), count)

    def clear_recurrence(self) -> None:
        """Book a single appointment instead of a series."""
        self._require("clear recurrence", BookingStep.SELECT_DATE_TIME, BookingStep.ENTER_DETAILS)
        self.recurrence = None

    async def available_slots(self) -> List[SlotStatus]:
        """Slots of the selected date for the selected service."""
        self._require("list slots", BookingStep.SELECT_DATE_TIME)
        if self.date is None or self.service is None:
            return []
        return await self.scheduling.compute_availability(
            self.scope_id,
            self.date,
            self.clock(),
            duration_minutes=self.service.duration_minutes,
        )

    def continue_to_details(self) -> None:
        """Move on to entering contact details."""
        self._require("continue to details", BookingStep.SELECT_DATE_TIME)
        if not self.can_continue_to_details:
            raise InvalidTransitionError(
                self.step.value, "continue to details", "date and time must be chosen"
            )
        self.step = BookingStep.ENTER_DETAILS

    # Step 3: details

    def update_contact(self, **fields: Any) -> None:
        """Store contact fields as typed; validation happens on submit."""
        self._require("update contact", BookingStep.ENTER_DETAILS)
        self.contact.update(fields)

    def go_back(self) -> BookingStep:
        """Return to the previous step, keeping all entered data."""
        if self.step == BookingStep.ENTER_DETAILS:
            self.step = BookingStep.SELECT_DATE_TIME
        elif self.step == BookingStep.SELECT_DATE_TIME:
            self.step = BookingStep.SELECT_SERVICE
        else:
            raise InvalidTransitionError(self.step.value, "go back")
        return self.step

    # Step 4: submit

    async def submit(
        self, contact_info: Optional[Union[ContactInfo, Dict[str, Any]]] = None
    ) -> Result[List[Appointment], BookingFailure]:
        """
        Validate the contact details, re-check the slot and store the booking.

        Args:
            contact_info: Contact details; merged over fields already entered

        Returns:
            Success with the stored appointment(s), or Failure describing why.
            Slot problems send the workflow back to SELECT_DATE_TIME;
            unexpected store failures end it in FAILED.
        """
        self._require("submit", BookingStep.ENTER_DETAILS)
        if isinstance(contact_info, ContactInfo):
            contact_info = contact_info.model_dump(exclude_none=True)
        if contact_info:
            self.contact.update(contact_info)

        token = booking_id_ctx.set(self.booking_id)
        try:
            return await self._submit()
        finally:
            booking_id_ctx.reset(token)

    async def _submit(self) -> Result[List[Appointment], BookingFailure]:
        try:
            contact = ContactInfo(**self.contact)
        except ValidationError as e:
            first = e.errors()[0]
            field = str(first["loc"][0]) if first.get("loc") else None
            return self._fail(
                BookingFailure(
                    kind=BookingFailureKind.INVALID_CONTACT,
                    message=first.get("msg", "Invalid contact details"),
                    field=field,
                ),
                next_step=BookingStep.ENTER_DETAILS,
            )

        config = await self.scheduling.get_schedule_config(self.scope_id)
        start_at = at_time(self.date, self.time, config.tz)
        fields = {
            "service": self.service.id,
            "notes": contact.notes,
            "contact_name": contact.name,
            "contact_email": contact.email,
            "contact_phone": contact.phone,
        }

        try:
            if self.recurrence is None:
                outcome = await self._submit_single(start_at, fields)
            else:
                outcome = await self._submit_series(start_at, fields)
        except (RepositoryError, asyncio.TimeoutError) as e:
            logger.error(f"Booking failed on a store error: {e}")
            return self._fail(
                BookingFailure(
                    kind=BookingFailureKind.REPOSITORY_FAILURE,
                    message="Booking could not be completed, please try again later",
                    reason=ValidationReason.REPOSITORY_FAILURE,
                ),
                next_step=BookingStep.FAILED,
            )

        if outcome.is_failure():
            return outcome

        self.appointments = outcome.unwrap()
        self.last_failure = None
        self.step = BookingStep.SUBMITTED
        logger.info(f"Booking submitted: {len(self.appointments)} appointment(s) at {start_at}")
        return outcome

    async def _submit_single(
        self, start_at: datetime, fields: Dict[str, Any]
    ) -> Result[List[Appointment], BookingFailure]:
        result = await self.scheduling.book(
            self.scope_id,
            start_at,
            self.clock(),
            duration_minutes=self.service.duration_minutes,
            **fields,
        )
        if result.is_success():
            return ok([result.unwrap()])

        verdict = result.error
        taken = verdict.reason == ValidationReason.REPOSITORY_CONFLICT
        return self._slot_lost(
            BookingFailure(
                kind=BookingFailureKind.SLOT_TAKEN if taken else BookingFailureKind.SLOT_UNAVAILABLE,
                message=(
                    "This time was just booked by someone else, please choose another"
                    if taken
                    else "This time is no longer available, please choose another"
                ),
                reason=verdict.reason,
                conflicting_id=verdict.conflicting_id,
            )
        )

    async def _submit_series(
        self, start_at: datetime, fields: Dict[str, Any]
    ) -> Result[List[Appointment], BookingFailure]:
        result = await self.scheduling.book_series(
            self.scope_id,
            start_at,
            self.recurrence.frequency,
            self.recurrence.count,
            self.clock(),
            duration_minutes=self.service.duration_minutes,
            **fields,
        )
        if result.is_success():
            return ok(result.unwrap())

        series_error: SeriesError = result.error
        taken = series_error.reason == ValidationReason.REPOSITORY_CONFLICT
        return self._slot_lost(
            BookingFailure(
                kind=BookingFailureKind.SLOT_TAKEN if taken else BookingFailureKind.SERIES_REJECTED,
                message=f"Session {series_error.index + 1} of the series is not available",
                reason=series_error.reason,
                conflicting_id=series_error.conflicting_id,
                series_error=series_error,
            )
        )

    def _slot_lost(self, failure: BookingFailure) -> Result[List[Appointment], BookingFailure]:
        """Back to date/time selection; contact details are kept."""
        self.time = None
        return self._fail(failure, next_step=BookingStep.SELECT_DATE_TIME)

    def _fail(
        self, failure: BookingFailure, next_step: BookingStep
    ) -> Result[List[Appointment], BookingFailure]:
        logger.warning(f"Booking not completed ({failure.kind.value}): {failure.message}")
        self.last_failure = failure
        self.step = next_step
        return err(failure)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view of the workflow state."""
        return {
            "booking_id": self.booking_id,
            "step": self.step.value,
            "service": self.service.id if self.service else None,
            "date": self.date.isoformat() if self.date else None,
            "time": self.time.strftime("%H:%M") if self.time else None,
            "recurrence": (
                {"frequency": self.recurrence.frequency.value, "count": self.recurrence.count}
                if self.recurrence
                else None
            ),
            "contact": dict(self.contact),
            "last_failure": (
                {"kind": self.last_failure.kind.value, "message": self.last_failure.message}
                if self.last_failure
                else None
            ),
        }
