"""Clinic scheduler - appointment availability and conflict resolution."""

import importlib as _importlib
from typing import TYPE_CHECKING, Any

__version__ = "1.0.0"
__license__ = "MIT"

if TYPE_CHECKING:
    from .core.config_loader import load_schedule_config as load_schedule_config
    from .core.logger import setup_structured_logging as setup_structured_logging
    from .core.settings import get_settings as get_settings
    from .models.schedule import DEFAULT_SCHEDULE_CONFIG as DEFAULT_SCHEDULE_CONFIG
    from .models.schedule import ScheduleConfig as ScheduleConfig
    from .repositories.memory import (
        InMemoryAppointmentRepository as InMemoryAppointmentRepository,
    )
    from .repositories.memory import (
        InMemoryScheduleConfigRepository as InMemoryScheduleConfigRepository,
    )
    from .services.booking.booking_workflow import BookingWorkflow as BookingWorkflow
    from .services.scheduling.scheduling_service import SchedulingService as SchedulingService

# Explicit lazy-loading map: name -> (module_path, attribute_name)
_LAZY_MODULE_MAP = {
    # Core
    "load_schedule_config": ("clinic_scheduler.core.config_loader", "load_schedule_config"),
    "setup_structured_logging": ("clinic_scheduler.core.logger", "setup_structured_logging"),
    "get_settings": ("clinic_scheduler.core.settings", "get_settings"),
    # Models
    "DEFAULT_SCHEDULE_CONFIG": ("clinic_scheduler.models.schedule", "DEFAULT_SCHEDULE_CONFIG"),
    "ScheduleConfig": ("clinic_scheduler.models.schedule", "ScheduleConfig"),
    # Repositories
    "InMemoryAppointmentRepository": (
        "clinic_scheduler.repositories.memory",
        "InMemoryAppointmentRepository",
    ),
    "InMemoryScheduleConfigRepository": (
        "clinic_scheduler.repositories.memory",
        "InMemoryScheduleConfigRepository",
    ),
    # Services
    "BookingWorkflow": ("clinic_scheduler.services.booking.booking_workflow", "BookingWorkflow"),
    "SchedulingService": (
        "clinic_scheduler.services.scheduling.scheduling_service",
        "SchedulingService",
    ),
}

# Auto-derive __all__ from _LAZY_MODULE_MAP to prevent manual sync issues
__all__ = list(_LAZY_MODULE_MAP.keys())


def __getattr__(name: str) -> Any:
    """Lazy import with explicit mapping - importlib based."""
    if name in _LAZY_MODULE_MAP:
        module_path, attr_name = _LAZY_MODULE_MAP[name]
        module = _importlib.import_module(module_path)
        attr = getattr(module, attr_name)
        # Cache in module globals to avoid repeated imports
        globals()[name] = attr
        return attr
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
