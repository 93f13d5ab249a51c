"""Tests for conflict detection and candidate validation."""

from datetime import date, datetime, timezone

import pytest

from clinic_scheduler.core.enums import AppointmentKind, AppointmentStatus, ValidationReason
from clinic_scheduler.services.scheduling.conflict_validator import (
    check_schedule,
    find_conflict,
    overlaps,
    validate,
)

from helpers import MONDAY, local, make_appointment


class TestOverlaps:
    """Tests for half-open interval overlap."""

    def test_touching_boundary_is_not_overlap(self):
        """Test 10:00-10:50 and 10:50-11:40 do not overlap."""
        existing = make_appointment("a1", local(MONDAY, 10))
        assert not overlaps(local(MONDAY, 10, 50), 50, existing)

    def test_candidate_ending_at_start(self):
        """Test a candidate ending exactly when the existing one starts."""
        existing = make_appointment("a1", local(MONDAY, 10))
        assert not overlaps(local(MONDAY, 9, 10), 50, existing)

    def test_partial_overlap(self):
        """Test 10:30-11:20 overlaps 10:00-10:50."""
        existing = make_appointment("a1", local(MONDAY, 10))
        assert overlaps(local(MONDAY, 10, 30), 50, existing)

    def test_containment(self):
        """Test a short candidate inside a long appointment overlaps."""
        existing = make_appointment("a1", local(MONDAY, 10), duration_minutes=120)
        assert overlaps(local(MONDAY, 10, 30), 15, existing)

    def test_naive_candidate_against_aware_appointment(self):
        """Test naive datetimes are compared as local wall time."""
        existing = make_appointment("a1", local(MONDAY, 10))
        assert overlaps(datetime(2024, 3, 4, 10, 30), 50, existing)


class TestFindConflict:
    """Tests for find_conflict."""

    def test_cancelled_is_ignored(self):
        """Test cancelled appointments never conflict."""
        cancelled = make_appointment(
            "a1", local(MONDAY, 10), status=AppointmentStatus.CANCELLED
        )
        assert find_conflict(local(MONDAY, 10), 50, [cancelled]) is None

    def test_self_conflict_unless_excluded(self):
        """Test an appointment conflicts with itself unless excluded."""
        existing = make_appointment("a1", local(MONDAY, 10))
        assert find_conflict(local(MONDAY, 10), 50, [existing]).id == "a1"
        assert find_conflict(local(MONDAY, 10), 50, [existing], exclude_id="a1") is None

    def test_first_conflict_by_start(self):
        """Test the earliest overlapping appointment is reported."""
        later = make_appointment("b", local(MONDAY, 11), duration_minutes=30)
        earlier = make_appointment("a", local(MONDAY, 10), duration_minutes=30)
        conflict = find_conflict(local(MONDAY, 10), 120, [later, earlier])
        assert conflict.id == "a"

    def test_other_kinds_block_time(self):
        """Test blocked and personal time conflict like sessions."""
        blocked = make_appointment("x", local(MONDAY, 14), kind=AppointmentKind.BLOCKED)
        assert find_conflict(local(MONDAY, 14, 20), 50, [blocked]).id == "x"


class TestCheckSchedule:
    """Tests for checks against the schedule shape."""

    def test_non_work_day(self, default_config):
        """Test Saturday is not a working day."""
        assert check_schedule(local(date(2024, 3, 9), 10), 50, default_config) == (
            ValidationReason.NON_WORK_DAY
        )

    @pytest.mark.parametrize(
        "hour, minute",
        [(6, 0), (6, 30), (18, 30), (19, 0)],
    )
    def test_outside_working_hours(self, default_config, hour, minute):
        """Test candidates starting or ending outside 07:00-19:00."""
        assert check_schedule(local(MONDAY, hour, minute), 50, default_config) == (
            ValidationReason.OUTSIDE_WORKING_HOURS
        )

    @pytest.mark.parametrize("hour, minute", [(11, 30), (12, 0), (12, 30)])
    def test_in_break(self, default_config, hour, minute):
        """Test candidates touching the lunch break."""
        assert check_schedule(local(MONDAY, hour, minute), 50, default_config) == (
            ValidationReason.IN_BREAK
        )

    def test_ends_exactly_at_break(self, default_config):
        """Test a session ending at 12:00 is allowed."""
        assert check_schedule(local(MONDAY, 11, 10), 50, default_config) is None

    def test_ends_exactly_at_close(self, default_config):
        """Test a session ending at 19:00 is allowed."""
        assert check_schedule(local(MONDAY, 18, 10), 50, default_config) is None

    def test_converts_to_schedule_timezone(self, default_config):
        """Test aware datetimes in another zone are checked in local time."""
        # 13:00 UTC is 10:00 in Sao Paulo (UTC-3)
        start = datetime(2024, 3, 4, 13, 0, tzinfo=timezone.utc)
        assert check_schedule(start, 50, default_config) is None
        # 15:30 UTC is 12:30 local, inside lunch
        start = datetime(2024, 3, 4, 15, 30, tzinfo=timezone.utc)
        assert check_schedule(start, 50, default_config) == ValidationReason.IN_BREAK


class TestValidate:
    """Tests for validate."""

    def test_boundary_example(self, default_config):
        """Test the 10:00-10:50 boundary example."""
        existing = [make_appointment("a1", local(MONDAY, 10))]
        assert validate(local(MONDAY, 10, 50), 50, default_config, existing).is_valid

        verdict = validate(local(MONDAY, 10, 30), 50, default_config, existing)
        assert verdict.reason == ValidationReason.CONFLICT
        assert verdict.conflicting_id == "a1"

    def test_schedule_checked_before_conflicts(self, default_config):
        """Test schedule reasons win over conflicts."""
        existing = [make_appointment("a1", local(MONDAY, 12))]
        verdict = validate(local(MONDAY, 12), 50, default_config, existing)
        assert verdict.reason == ValidationReason.IN_BREAK

    def test_exclude_id(self, default_config):
        """Test editing an appointment does not conflict with itself."""
        existing = [make_appointment("a1", local(MONDAY, 10))]
        assert not validate(local(MONDAY, 10), 50, default_config, existing).is_valid
        assert validate(local(MONDAY, 10), 50, default_config, existing, exclude_id="a1").is_valid

    def test_deterministic(self, default_config):
        """Test the same inputs give the same verdict."""
        existing = [make_appointment("a1", local(MONDAY, 10))]
        first = validate(local(MONDAY, 10, 30), 50, default_config, existing)
        second = validate(local(MONDAY, 10, 30), 50, default_config, existing)
        assert first == second
