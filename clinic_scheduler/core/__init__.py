"""Core infrastructure module."""

from .enums import (
    AppointmentKind,
    AppointmentStatus,
    BookingFailureKind,
    BookingStep,
    DayOfWeek,
    RecurrenceFrequency,
    ValidationReason,
)
from .exceptions import (
    # Base exception
    SchedulerError,
    # Configuration
    ConfigurationError,
    MissingEnvironmentVariableError,
    ScheduleConfigError,
    InvalidBreakRangeError,
    InvertedWorkWindowError,
    OverlappingBreaksError,
    # Repository
    RepositoryError,
    RepositoryConflictError,
    RepositoryTimeoutError,
    RecordNotFoundError,
    CompensationError,
    # Workflow
    InvalidTransitionError,
)
from .result import Failure, Result, Success, err, ok

__all__ = [
    # Enums
    "AppointmentKind",
    "AppointmentStatus",
    "BookingFailureKind",
    "BookingStep",
    "DayOfWeek",
    "RecurrenceFrequency",
    "ValidationReason",
    # Exceptions
    "SchedulerError",
    "ConfigurationError",
    "MissingEnvironmentVariableError",
    "ScheduleConfigError",
    "InvalidBreakRangeError",
    "InvertedWorkWindowError",
    "OverlappingBreaksError",
    "RepositoryError",
    "RepositoryConflictError",
    "RepositoryTimeoutError",
    "RecordNotFoundError",
    "CompensationError",
    "InvalidTransitionError",
    # Result
    "Failure",
    "Result",
    "Success",
    "err",
    "ok",
]
