"""Tests for the availability engine."""

from datetime import date, time, timedelta

from clinic_scheduler.core.enums import AppointmentStatus, ValidationReason
from clinic_scheduler.services.scheduling.availability import (
    compute_availability,
    has_available_slots,
    next_available_date,
)
from clinic_scheduler.services.scheduling.slot_generator import generate

from helpers import MONDAY, local, make_appointment


class TestComputeAvailability:
    """Tests for compute_availability."""

    def test_all_free(self, default_config, now):
        """Test an empty day has every slot free."""
        slots = compute_availability(MONDAY, default_config, [], now)
        assert [s.time for s in slots] == generate(MONDAY, default_config)
        assert all(s.available for s in slots)
        assert all(s.reason is None for s in slots)

    def test_booked_slot_marked(self, default_config, now):
        """Test a booked slot is unavailable with the conflicting id."""
        booked = [make_appointment("a1", local(MONDAY, 9))]
        slots = {s.time: s for s in compute_availability(MONDAY, default_config, booked, now)}
        assert slots[time(9)].available is False
        assert slots[time(9)].reason == ValidationReason.CONFLICT
        assert slots[time(9)].conflicting_id == "a1"
        assert slots[time(10)].available is True

    def test_cancelled_frees_slot(self, default_config, now):
        """Test cancelled appointments do not take slots."""
        cancelled = [
            make_appointment("a1", local(MONDAY, 9), status=AppointmentStatus.CANCELLED)
        ]
        slots = compute_availability(MONDAY, default_config, cancelled, now)
        assert all(s.available for s in slots)

    def test_past_slots(self, default_config):
        """Test slots before now are marked as past."""
        now = local(MONDAY, 10, 15)
        slots = {s.time: s for s in compute_availability(MONDAY, default_config, [], now)}
        assert slots[time(10)].reason == ValidationReason.PAST_TIME
        assert slots[time(7)].reason == ValidationReason.PAST_TIME
        assert slots[time(11)].available is True

    def test_exclude_id_when_rescheduling(self, default_config, now):
        """Test an appointment's own slot is free when it is being moved."""
        booked = [make_appointment("a1", local(MONDAY, 9))]
        slots = {
            s.time: s
            for s in compute_availability(MONDAY, default_config, booked, now, exclude_id="a1")
        }
        assert slots[time(9)].available is True

    def test_longer_service(self, default_config, now):
        """Test slots follow the requested session length."""
        slots = compute_availability(MONDAY, default_config, [], now, duration_minutes=80)
        assert [s.time for s in slots] == generate(MONDAY, default_config, duration_minutes=80)
        assert all(s.available for s in slots)

    def test_odd_appointment_blocks_neighbours(self, default_config, now):
        """Test an appointment off the slot grid blocks each slot it overlaps."""
        booked = [make_appointment("blk", local(MONDAY, 14, 30), duration_minutes=60)]
        slots = {s.time: s for s in compute_availability(MONDAY, default_config, booked, now)}
        assert slots[time(14)].available is False
        assert slots[time(15)].available is False
        assert slots[time(16)].available is True

    def test_idempotent(self, default_config, now):
        """Test repeated calls with the same inputs return the same result."""
        booked = [make_appointment("a1", local(MONDAY, 9))]
        first = compute_availability(MONDAY, default_config, booked, now)
        second = compute_availability(MONDAY, default_config, booked, now)
        assert first == second

    def test_non_work_day_empty(self, default_config, now):
        """Test weekends have no slots."""
        assert compute_availability(date(2024, 3, 9), default_config, [], now) == []

    def test_to_dict(self, default_config, now):
        """Test slot serialization."""
        slot = compute_availability(MONDAY, default_config, [], now)[0]
        data = slot.to_dict()
        assert data["time"] == "07:00"
        assert data["available"] is True
        assert data["reason"] is None


class TestNextAvailableDate:
    """Tests for has_available_slots and next_available_date."""

    def test_has_available_slots(self, default_config, now):
        """Test a free working day has slots, a weekend does not."""
        assert has_available_slots(MONDAY, default_config, [], now)
        assert not has_available_slots(date(2024, 3, 9), default_config, [], now)

    def test_fully_booked_day(self, default_config, now):
        """Test a day with every slot taken has no availability."""
        booked = [
            make_appointment(f"a{i}", local(MONDAY, s.hour, s.minute))
            for i, s in enumerate(generate(MONDAY, default_config))
        ]
        assert not has_available_slots(MONDAY, default_config, booked, now)
        found = next_available_date(MONDAY, default_config, booked, now, horizon_days=10)
        assert found == MONDAY + timedelta(days=1)

    def test_skips_weekend(self, default_config, now):
        """Test searching from Saturday lands on Monday."""
        saturday = MONDAY + timedelta(days=5)
        found = next_available_date(saturday, default_config, [], now, horizon_days=10)
        assert found == MONDAY + timedelta(days=7)

    def test_skips_past_day(self, default_config):
        """Test a day whose slots are all past is skipped."""
        now = local(MONDAY, 18, 30)
        found = next_available_date(MONDAY, default_config, [], now, horizon_days=5)
        assert found == MONDAY + timedelta(days=1)

    def test_nothing_within_horizon(self, default_config, now):
        """Test None when the horizon only covers non-working days."""
        saturday = MONDAY + timedelta(days=5)
        assert next_available_date(saturday, default_config, [], now, horizon_days=2) is None
