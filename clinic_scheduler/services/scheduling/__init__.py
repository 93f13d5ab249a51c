"""Scheduling core: slots, conflicts, availability and recurring series.

The modules here (except ``scheduling_service``) are pure: they take the
schedule, a snapshot of appointments and ``now`` as arguments and never
touch a repository.
"""

from .availability import compute_availability, has_available_slots, next_available_date
from .config_validator import ScheduleConfigValidator
from .conflict_validator import check_schedule, find_conflict, overlaps, validate
from .recurrence import add_months, expand, validate_series
from .scheduling_service import SchedulingService
from .slot_generator import free_intervals, generate, generate_instants

__all__ = [
    # Slot generation
    "free_intervals",
    "generate",
    "generate_instants",
    # Conflicts
    "check_schedule",
    "find_conflict",
    "overlaps",
    "validate",
    # Availability
    "compute_availability",
    "has_available_slots",
    "next_available_date",
    # Recurrence
    "add_months",
    "expand",
    "validate_series",
    # Configuration
    "ScheduleConfigValidator",
    # Service
    "SchedulingService",
]
