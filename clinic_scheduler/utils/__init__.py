"""Utility helpers."""

from .time_utils import (
    at_time,
    format_interval,
    localize,
    minutes_of,
    time_from_minutes,
)

__all__ = [
    "at_time",
    "format_interval",
    "localize",
    "minutes_of",
    "time_from_minutes",
]
