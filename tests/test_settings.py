"""Tests for core/settings module."""

import pytest
from pydantic import ValidationError

from clinic_scheduler.core.settings import SchedulerSettings, get_settings, reset_settings


class TestSchedulerSettings:
    """Tests for SchedulerSettings."""

    def test_defaults(self):
        """Test default values."""
        settings = SchedulerSettings()
        assert settings.env == "testing"
        assert settings.log_level == "INFO"
        assert settings.schedule_timezone == "America/Sao_Paulo"
        assert settings.max_recurrence_count == 26
        assert settings.availability_search_days == 60

    def test_env_vars_override(self, monkeypatch):
        """Test values are read from the environment."""
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("MAX_RECURRENCE_COUNT", "8")
        monkeypatch.setenv("SCHEDULE_TIMEZONE", "Europe/Lisbon")
        settings = SchedulerSettings()
        assert settings.log_level == "DEBUG"
        assert settings.max_recurrence_count == 8
        assert settings.schedule_timezone == "Europe/Lisbon"

    def test_invalid_env(self, monkeypatch):
        """Test unknown environment names are rejected."""
        monkeypatch.setenv("ENV", "moon")
        with pytest.raises(ValidationError):
            SchedulerSettings()

    def test_invalid_timezone(self, monkeypatch):
        """Test unknown timezones are rejected."""
        monkeypatch.setenv("SCHEDULE_TIMEZONE", "Mars/Olympus_Mons")
        with pytest.raises(ValidationError):
            SchedulerSettings()

    def test_recurrence_count_upper_bound(self, monkeypatch):
        """Test the series limit cannot be raised above 26."""
        monkeypatch.setenv("MAX_RECURRENCE_COUNT", "27")
        with pytest.raises(ValidationError):
            SchedulerSettings()


class TestSettingsSingleton:
    """Tests for get_settings / reset_settings."""

    def test_singleton(self):
        """Test get_settings returns the same instance."""
        assert get_settings() is get_settings()

    def test_reset(self, monkeypatch):
        """Test reset_settings picks up new environment values."""
        first = get_settings()
        monkeypatch.setenv("AVAILABILITY_SEARCH_DAYS", "14")
        reset_settings()
        second = get_settings()
        assert second is not first
        assert second.availability_search_days == 14
