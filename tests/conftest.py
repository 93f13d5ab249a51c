"""Pytest configuration and common fixtures."""

import os
import sys
import warnings
from datetime import datetime, time, timedelta
from pathlib import Path

from dotenv import load_dotenv

# Try to load test-specific environment file if it exists
test_env_file = Path(__file__).parent / ".env.test"
if test_env_file.exists():
    load_dotenv(test_env_file)

# Set before any clinic_scheduler imports so settings load in testing mode
os.environ.setdefault("ENV", "testing")

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

import pytest

from clinic_scheduler.core.enums import DayOfWeek
from clinic_scheduler.models.schedule import (
    DEFAULT_SCHEDULE_CONFIG,
    BreakInterval,
    DaySchedule,
    ScheduleConfig,
    SessionPolicy,
)
from clinic_scheduler.repositories.memory import (
    InMemoryAppointmentRepository,
    InMemoryScheduleConfigRepository,
)

from helpers import MONDAY, local


def pytest_configure(config):
    """Configure pytest environment before tests run."""
    warnings.filterwarnings("ignore", message="coroutine.*was never awaited")


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Automatically set up test environment for all tests."""
    monkeypatch.setenv("ENV", "testing")
    for name in (
        "LOG_LEVEL",
        "LOG_JSON",
        "SCHEDULE_TIMEZONE",
        "SCHEDULE_CONFIG_PATH",
        "CONFIG_CACHE_TTL_SECONDS",
        "MAX_RECURRENCE_COUNT",
        "AVAILABILITY_SEARCH_DAYS",
    ):
        monkeypatch.delenv(name, raising=False)

    # Reset settings singleton so each test gets fresh settings
    from clinic_scheduler.core.settings import reset_settings

    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def default_config() -> ScheduleConfig:
    """Built-in schedule: Mon-Fri 07:00-19:00, lunch 12:00-13:00, 50+10 minutes."""
    return DEFAULT_SCHEDULE_CONFIG


@pytest.fixture
def clinic_config() -> ScheduleConfig:
    """Schedule of clinic 'c1': Mon-Thu 08:00-12:00 with a coffee break, 30+0 minutes."""
    days = {
        day: DaySchedule(
            day_of_week=day,
            is_active=day.weekday <= 3,
            work_start=time(8, 0),
            work_end=time(12, 0),
            breaks=[BreakInterval(start=time(10, 0), end=time(10, 30), label="Café")],
        )
        for day in DayOfWeek
    }
    return ScheduleConfig(
        scope_id="c1",
        days=days,
        policy=SessionPolicy(duration_minutes=30, interval_minutes=0),
    )


@pytest.fixture
def now() -> datetime:
    """Friday before the test week, so every slot of MONDAY is in the future."""
    return local(MONDAY - timedelta(days=3), 9)


@pytest.fixture
def appointment_repo() -> InMemoryAppointmentRepository:
    """Empty in-memory appointment store."""
    return InMemoryAppointmentRepository()


@pytest.fixture
def schedule_repo() -> InMemoryScheduleConfigRepository:
    """Empty in-memory schedule store."""
    return InMemoryScheduleConfigRepository()
