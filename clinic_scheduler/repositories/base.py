"""Repository contracts the scheduling core consumes.

The appointment store is shared and owned elsewhere. Implementations are
expected to enforce uniqueness of ``(scope_id, start_at)`` for
non-cancelled appointments and to raise ``RepositoryConflictError`` when a
concurrent writer got there first.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from ..models.appointment import Appointment
from ..models.schedule import ScheduleConfig


class AppointmentRepository(ABC):
    """Access to stored appointments."""

    #: Whether :meth:`create_many` inserts all appointments in one transaction
    supports_bulk_create: bool = False

    @abstractmethod
    async def get_by_id(self, id: str) -> Optional[Appointment]:
        """
        Get appointment by ID.

        Args:
            id: Appointment ID

        Returns:
            Appointment or None if not found
        """
        pass

    @abstractmethod
    async def list_by_date_range(
        self, scope_id: Optional[str], start: datetime, end: datetime
    ) -> List[Appointment]:
        """
        Appointments of a scope that overlap ``[start, end)``.

        Cancelled appointments may be included; the core filters them.

        Args:
            scope_id: Clinic ID, or None for the default scope
            start: Range start
            end: Range end (exclusive)

        Returns:
            Appointments ordered by start
        """
        pass

    @abstractmethod
    async def create(self, appointment: Appointment) -> Appointment:
        """
        Store a new appointment.

        Args:
            appointment: Appointment to store

        Returns:
            The stored appointment

        Raises:
            RepositoryConflictError: If the slot was taken concurrently
        """
        pass

    async def create_many(self, appointments: List[Appointment]) -> List[Appointment]:
        """
        Store several appointments in a single transaction.

        Only available when ``supports_bulk_create`` is True.

        Raises:
            RepositoryConflictError: If any slot was taken; nothing is stored
        """
        raise NotImplementedError(f"{type(self).__name__} does not support bulk create")

    @abstractmethod
    async def cancel(self, id: str) -> Appointment:
        """
        Retire an appointment by setting its status to cancelled.

        Raises:
            RecordNotFoundError: If the appointment does not exist
        """
        pass

    @abstractmethod
    async def update_start(self, id: str, start_at: datetime) -> Appointment:
        """
        Move an appointment to a new start.

        Raises:
            RecordNotFoundError: If the appointment does not exist
            RepositoryConflictError: If the new slot was taken concurrently
        """
        pass


class ScheduleConfigRepository(ABC):
    """Access to weekly schedules."""

    @abstractmethod
    async def get(self, scope_id: Optional[str]) -> Optional[ScheduleConfig]:
        """
        Schedule stored for exactly this scope.

        Args:
            scope_id: Clinic ID, or None for the global schedule

        Returns:
            ScheduleConfig or None if the scope has no schedule
        """
        pass

    @abstractmethod
    async def save(self, config: ScheduleConfig) -> ScheduleConfig:
        """
        Store a schedule, replacing the previous one of its scope.

        Returns:
            The stored schedule with its new version
        """
        pass
