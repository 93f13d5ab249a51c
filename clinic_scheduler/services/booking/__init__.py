"""Public booking workflow."""

from .booking_workflow import BookingFailure, BookingWorkflow, Recurrence

__all__ = [
    "BookingFailure",
    "BookingWorkflow",
    "Recurrence",
]
