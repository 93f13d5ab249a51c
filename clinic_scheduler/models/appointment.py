"""Appointment entity as read from the external appointment store."""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from ..core.enums import AppointmentKind, AppointmentStatus


class Appointment(BaseModel):
    """Calendar entry occupying time in a scope.

    Appointments are owned by the repository; the scheduling core only
    reads them. Start instants must carry a timezone. Cancelled
    appointments are kept but never block time.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    scope_id: Optional[str] = Field(default=None)
    start_at: AwareDatetime
    duration_minutes: int = Field(gt=0)
    status: AppointmentStatus = Field(default=AppointmentStatus.SCHEDULED)
    kind: AppointmentKind = Field(default=AppointmentKind.SESSION)
    patient_id: Optional[str] = Field(default=None)
    service: Optional[str] = Field(default=None)
    notes: Optional[str] = Field(default=None)
    contact_name: Optional[str] = Field(default=None)
    contact_email: Optional[str] = Field(default=None)
    contact_phone: Optional[str] = Field(default=None)

    @property
    def end_at(self) -> datetime:
        """End of the occupied interval (exclusive)."""
        return self.start_at + timedelta(minutes=self.duration_minutes)

    @property
    def blocks_time(self) -> bool:
        """Whether this entry takes part in conflict checks."""
        return self.status != AppointmentStatus.CANCELLED

    def to_dict(self) -> Dict[str, Any]:
        """Convert appointment to dictionary."""
        return {
            "id": self.id,
            "scope_id": self.scope_id,
            "start_at": self.start_at.isoformat(),
            "duration_minutes": self.duration_minutes,
            "status": self.status.value,
            "kind": self.kind.value,
            "patient_id": self.patient_id,
            "service": self.service,
            "notes": self.notes,
            "contact_name": self.contact_name,
            "contact_email": self.contact_email,
            "contact_phone": self.contact_phone,
        }
