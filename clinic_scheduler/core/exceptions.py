"""Custom exception classes for clinic scheduling.

Booking-time problems (non-work day, break, conflict, ...) are never raised;
they are returned as ``ValidationResult`` values. The exceptions below cover
invalid schedule configuration, repository failures and programming errors
in the booking workflow.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class SchedulerError(Exception):
    """Base exception for clinic scheduling."""

    def __init__(
        self, message: str, recoverable: bool = True, details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize scheduler error.

        Args:
            message: Error message
            recoverable: Whether the user can recover (e.g. by picking another slot)
            details: Additional error details
        """
        self.message = message
        self.recoverable = recoverable
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "details": self.details,
            "timestamp": self.timestamp,
        }


# Configuration Errors
class ConfigurationError(SchedulerError):
    """Application configuration could not be loaded."""

    def __init__(
        self,
        message: str = "Configuration error",
        recoverable: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable, details)


class ScheduleConfigError(ConfigurationError):
    """A weekly schedule violates its invariants and must not be saved."""

    def __init__(self, message: str, day: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        if day:
            details["day"] = day
            message = f"{day}: {message}"
        self.day = day
        super().__init__(message, recoverable=False, details=details)


class InvertedWorkWindowError(ScheduleConfigError):
    """Work window ends at or before it starts."""

    def __init__(self, day: str, work_start: str, work_end: str):
        super().__init__(
            f"work window {work_start}-{work_end} must start before it ends",
            day=day,
            details={"work_start": work_start, "work_end": work_end},
        )


class InvalidBreakRangeError(ScheduleConfigError):
    """Break is empty, inverted, or outside the work window."""

    def __init__(self, day: str, start: str, end: str, reason: str = "invalid break range"):
        super().__init__(
            f"break {start}-{end}: {reason}",
            day=day,
            details={"break_start": start, "break_end": end},
        )


class OverlappingBreaksError(ScheduleConfigError):
    """Two breaks of the same day overlap or are out of order."""

    def __init__(self, day: str, first: str, second: str):
        super().__init__(
            f"breaks {first} and {second} overlap or are not sorted",
            day=day,
            details={"breaks": [first, second]},
        )


class MissingEnvironmentVariableError(ConfigurationError):
    """Required environment variable is missing."""

    def __init__(self, variable_name: str):
        super().__init__(
            f"Required environment variable '{variable_name}' is not set",
            details={"variable": variable_name},
        )


# Repository Errors
class RepositoryError(SchedulerError):
    """Base class for failures of an external repository."""

    def __init__(
        self,
        message: str = "Repository error occurred",
        recoverable: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable, details)


class RepositoryConflictError(RepositoryError):
    """The store rejected a write because the slot was taken concurrently."""

    def __init__(
        self,
        message: str = "Slot is no longer available",
        scope_id: Optional[str] = None,
        start_at: Optional[datetime] = None,
        conflicting_id: Optional[str] = None,
    ):
        self.conflicting_id = conflicting_id
        super().__init__(
            message,
            recoverable=True,
            details={
                "scope_id": scope_id,
                "start_at": start_at.isoformat() if start_at else None,
                "conflicting_id": conflicting_id,
            },
        )


class RepositoryTimeoutError(RepositoryError):
    """Repository call did not complete in time."""

    def __init__(self, operation: str, timeout: Optional[float] = None):
        details: Dict[str, Any] = {"operation": operation}
        if timeout is not None:
            details["timeout"] = timeout
        super().__init__(f"Repository operation '{operation}' timed out", details=details)


class RecordNotFoundError(RepositoryError):
    """Raised when a stored record is not found."""

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            f"{resource_type} with id '{resource_id}' not found",
            recoverable=False,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class CompensationError(RepositoryError):
    """Rolling back a partially created series failed."""

    def __init__(self, created_ids: List[str], failed_ids: List[str]):
        super().__init__(
            f"Failed to roll back {len(failed_ids)} of {len(created_ids)} created appointments",
            recoverable=False,
            details={"created_ids": created_ids, "failed_ids": failed_ids},
        )


# Workflow Errors
class InvalidTransitionError(SchedulerError):
    """Booking workflow transition is not allowed from the current step."""

    def __init__(self, current: str, action: str, reason: Optional[str] = None):
        message = f"Cannot {action} from step '{current}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message,
            recoverable=False,
            details={"current": current, "action": action},
        )

