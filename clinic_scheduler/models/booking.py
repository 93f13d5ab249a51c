"""Booking-form models: offered services and patient contact details."""

import re
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

_PHONE_DIGITS = re.compile(r"\d")


class ServiceType(BaseModel):
    """A bookable service and the session length it needs."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    duration_minutes: int = Field(gt=0)
    online: bool = Field(default=False)


SERVICE_CATALOG: List[ServiceType] = [
    ServiceType(id="individual", name="Terapia Individual", duration_minutes=50),
    ServiceType(id="casal", name="Terapia de Casal", duration_minutes=80),
    ServiceType(id="online", name="Atendimento Online", duration_minutes=50, online=True),
]


def get_service(service_id: str, catalog: Optional[List[ServiceType]] = None) -> ServiceType:
    """
    Look up a service by id.

    Raises:
        KeyError: If the service is not offered
    """
    services: Dict[str, ServiceType] = {s.id: s for s in (catalog or SERVICE_CATALOG)}
    return services[service_id]


class ContactInfo(BaseModel):
    """Contact details entered on the public booking page."""

    name: str = Field(min_length=1)
    email: EmailStr
    phone: str
    notes: Optional[str] = Field(default=None)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Name must not be blank."""
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        """Phone needs at least 8 digits."""
        if len(_PHONE_DIGITS.findall(v)) < 8:
            raise ValueError("Phone number must contain at least 8 digits")
        return v.strip()
