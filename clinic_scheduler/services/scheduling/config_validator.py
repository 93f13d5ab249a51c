"""Schedule invariants checked when an administrator saves a schedule."""

from typing import List

from loguru import logger

from ...core.exceptions import (
    InvalidBreakRangeError,
    InvertedWorkWindowError,
    OverlappingBreaksError,
    ScheduleConfigError,
)
from ...models.schedule import DaySchedule, ScheduleConfig
from ...utils.time_utils import format_interval


class ScheduleConfigValidator:
    """Validate weekly schedules before they can reach booking code."""

    @classmethod
    def validate(cls, config: ScheduleConfig) -> ScheduleConfig:
        """
        Check every configured day of a schedule.

        Inactive days are checked too, so reactivating one later cannot
        bring an invalid window into use.

        Args:
            config: Schedule to check

        Returns:
            The same schedule, for chaining

        Raises:
            InvertedWorkWindowError: If a work window does not start before it ends
            InvalidBreakRangeError: If a break is empty or leaves the work window
            OverlappingBreaksError: If breaks overlap or are out of order
        """
        for day in config.days.values():
            cls.validate_day(day)
        return config

    @classmethod
    def validate_day(cls, day: DaySchedule) -> DaySchedule:
        """Check the invariants of a single weekday."""
        name = day.day_of_week.value

        if day.work_start >= day.work_end:
            raise InvertedWorkWindowError(
                name, day.work_start.strftime("%H:%M"), day.work_end.strftime("%H:%M")
            )

        previous = None
        for brk in day.breaks:
            label = format_interval(brk.start, brk.end)
            if brk.start >= brk.end:
                raise InvalidBreakRangeError(
                    name, brk.start.strftime("%H:%M"), brk.end.strftime("%H:%M"),
                    reason="break must start before it ends",
                )
            if brk.start < day.work_start or brk.end > day.work_end:
                raise InvalidBreakRangeError(
                    name, brk.start.strftime("%H:%M"), brk.end.strftime("%H:%M"),
                    reason=f"break must lie within {format_interval(day.work_start, day.work_end)}",
                )
            if previous is not None and brk.start < previous.end:
                raise OverlappingBreaksError(
                    name, format_interval(previous.start, previous.end), label
                )
            previous = brk

        return day

    @classmethod
    def collect_errors(cls, config: ScheduleConfig) -> List[ScheduleConfigError]:
        """
        Validate every day and return all problems instead of the first.

        Used by admin screens that want to highlight every invalid day.
        """
        errors: List[ScheduleConfigError] = []
        for day in config.days.values():
            try:
                cls.validate_day(day)
            except ScheduleConfigError as e:
                logger.debug(f"Schedule validation failed: {e}")
                errors.append(e)
        return errors
