"""Derived, ephemeral scheduling values (never persisted)."""

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Any, Dict, Optional

from ..core.enums import ValidationReason


@dataclass(frozen=True)
class ValidationResult:
    """Verdict on a candidate appointment."""

    reason: Optional[ValidationReason] = None
    conflicting_id: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        """Whether the candidate can be booked."""
        return self.reason is None

    @classmethod
    def valid(cls) -> "ValidationResult":
        """Accepting verdict."""
        return cls()

    @classmethod
    def rejected(
        cls, reason: ValidationReason, conflicting_id: Optional[str] = None
    ) -> "ValidationResult":
        """Rejecting verdict."""
        return cls(reason=reason, conflicting_id=conflicting_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert verdict to dictionary."""
        return {
            "valid": self.is_valid,
            "reason": self.reason.value if self.reason else None,
            "conflicting_id": self.conflicting_id,
        }


@dataclass(frozen=True)
class SlotStatus:
    """A generated slot annotated with its availability."""

    time: time
    start_at: datetime
    available: bool
    reason: Optional[ValidationReason] = None
    conflicting_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert slot to dictionary."""
        return {
            "time": self.time.strftime("%H:%M"),
            "start_at": self.start_at.isoformat(),
            "available": self.available,
            "reason": self.reason.value if self.reason else None,
            "conflicting_id": self.conflicting_id,
        }


@dataclass(frozen=True)
class Occurrence:
    """One candidate instance of a recurring series."""

    index: int
    start_at: datetime
    duration_minutes: int

    @property
    def end_at(self) -> datetime:
        """End of the occurrence (exclusive)."""
        return self.start_at + timedelta(minutes=self.duration_minutes)

    @property
    def provisional_id(self) -> str:
        """Identifier used while the occurrence is only provisionally placed."""
        return f"occurrence-{self.index}"


@dataclass(frozen=True)
class SeriesError:
    """Why a recurring series was rejected as a whole."""

    index: int
    reason: ValidationReason
    conflicting_id: Optional[str] = None
    start_at: Optional[datetime] = None

    def __str__(self) -> str:
        message = f"occurrence {self.index} rejected: {self.reason.value}"
        if self.conflicting_id:
            message = f"{message} (conflicts with {self.conflicting_id})"
        return message
