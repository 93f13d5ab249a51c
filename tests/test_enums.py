"""Tests for core/enums module."""

from datetime import date

import pytest

from clinic_scheduler.core.enums import (
    AppointmentStatus,
    BookingFailureKind,
    BookingStep,
    DayOfWeek,
    RecurrenceFrequency,
    ValidationReason,
)


class TestDayOfWeek:
    """Tests for the weekday mapping."""

    def test_weekday_numbers_start_on_monday(self):
        """Test Python weekday numbering (0 = Monday)."""
        assert DayOfWeek.MONDAY.weekday == 0
        assert DayOfWeek.SUNDAY.weekday == 6

    def test_calendar_numbers_start_on_sunday(self):
        """Test calendar numbering (0 = Sunday)."""
        assert DayOfWeek.SUNDAY.calendar_number == 0
        assert DayOfWeek.MONDAY.calendar_number == 1
        assert DayOfWeek.SATURDAY.calendar_number == 6

    @pytest.mark.parametrize("day", list(DayOfWeek))
    def test_numbering_is_consistent(self, day):
        """Test both numberings map back to the same day."""
        assert DayOfWeek.from_weekday(day.weekday) is day
        assert DayOfWeek.from_calendar_number(day.calendar_number) is day

    def test_from_date(self):
        """Test weekday of a known date."""
        assert DayOfWeek.from_date(date(2024, 3, 4)) is DayOfWeek.MONDAY
        assert DayOfWeek.from_date(date(2024, 3, 10)) is DayOfWeek.SUNDAY

    def test_parse_is_case_insensitive(self):
        """Test parsing admin-facing names."""
        assert DayOfWeek.parse("Monday") is DayOfWeek.MONDAY
        assert DayOfWeek.parse("  FRIDAY ") is DayOfWeek.FRIDAY

    def test_parse_unknown_name(self):
        """Test unknown names are rejected."""
        with pytest.raises(ValueError, match="Unknown weekday"):
            DayOfWeek.parse("funday")

    @pytest.mark.parametrize("number", [-1, 7])
    def test_out_of_range_numbers(self, number):
        """Test invalid weekday numbers raise."""
        with pytest.raises(ValueError):
            DayOfWeek.from_weekday(number)
        with pytest.raises(ValueError):
            DayOfWeek.from_calendar_number(number)


class TestStatusEnums:
    """Tests for the remaining enums."""

    def test_values(self):
        """Test values() helpers."""
        assert AppointmentStatus.values() == ["scheduled", "confirmed", "done", "cancelled"]
        assert RecurrenceFrequency.values() == ["weekly", "biweekly", "monthly"]
        assert "in_break" in ValidationReason.values()

    def test_enums_compare_as_strings(self):
        """Test str-based enums compare equal to their values."""
        assert RecurrenceFrequency("weekly") == "weekly"
        assert AppointmentStatus.CANCELLED == "cancelled"

    def test_failure_kind_recoverable(self):
        """Test only store failures are unrecoverable."""
        assert BookingFailureKind.SLOT_TAKEN.recoverable is True
        assert BookingFailureKind.INVALID_CONTACT.recoverable is True
        assert BookingFailureKind.REPOSITORY_FAILURE.recoverable is False

    def test_terminal_steps(self):
        """Test submitted and failed are terminal."""
        assert BookingStep.SUBMITTED.is_terminal
        assert BookingStep.FAILED.is_terminal
        assert not BookingStep.ENTER_DETAILS.is_terminal
