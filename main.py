#!/usr/bin/env python3
"""
Clinic scheduler - appointment availability for a weekly schedule.

Main entry point for the command line.
"""

import argparse
import asyncio
import logging
import sys
from datetime import date, datetime, timezone
from typing import List, Optional

from clinic_scheduler.core.config_loader import load_schedule_config
from clinic_scheduler.core.exceptions import ConfigurationError
from clinic_scheduler.core.logger import setup_structured_logging
from clinic_scheduler.core.settings import get_settings
from clinic_scheduler.models.schedule import DEFAULT_SCHEDULE_CONFIG, ScheduleConfig
from clinic_scheduler.repositories.cached import CachedScheduleConfigRepository
from clinic_scheduler.repositories.memory import (
    InMemoryAppointmentRepository,
    InMemoryScheduleConfigRepository,
)
from clinic_scheduler.services.scheduling.scheduling_service import SchedulingService


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date (expected YYYY-MM-DD): {value}")


def _parse_datetime(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid datetime (expected ISO 8601): {value}")


def build_service(config: ScheduleConfig) -> SchedulingService:
    """Scheduling service over an empty appointment book and the given schedule."""
    settings = get_settings()
    schedules = CachedScheduleConfigRepository(
        InMemoryScheduleConfigRepository([config]),
        ttl_seconds=settings.config_cache_ttl_seconds,
    )
    return SchedulingService(InMemoryAppointmentRepository(), schedules, settings)


async def print_slots(
    service: SchedulingService,
    scope_id: Optional[str],
    day: date,
    now: datetime,
    duration: Optional[int],
    only_free: bool,
) -> None:
    """Print every slot of a date with its availability."""
    slots = await service.compute_availability(scope_id, day, now, duration_minutes=duration)
    if not slots:
        print(f"{day.isoformat()}: no working hours")
        return
    for slot in slots:
        if only_free and not slot.available:
            continue
        status = "free" if slot.available else slot.reason.value
        print(f"{day.isoformat()} {slot.time.strftime('%H:%M')}  {status}")


async def print_next(
    service: SchedulingService,
    scope_id: Optional[str],
    start: date,
    now: datetime,
    duration: Optional[int],
) -> None:
    """Print the first date with a free slot."""
    found = await service.next_available_date(scope_id, start, now, duration_minutes=duration)
    if found is None:
        print(f"No free slot within {service.settings.availability_search_days} days")
    else:
        print(found.isoformat())


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Clinic scheduler - appointment availability")
    parser.add_argument(
        "--config",
        default=settings.schedule_config_path,
        help="Path to the weekly schedule (YAML)",
    )
    parser.add_argument(
        "--default-schedule",
        action="store_true",
        help="Ignore --config and use the built-in schedule",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    parser.add_argument("--duration", type=int, help="Session length in minutes")
    parser.add_argument(
        "--now", type=_parse_datetime, help="Current instant (ISO 8601, defaults to now)"
    )

    commands = parser.add_subparsers(dest="command", required=True)
    slots = commands.add_parser("slots", help="List the slots of a date")
    slots.add_argument("date", type=_parse_date, help="Date (YYYY-MM-DD)")
    slots.add_argument("--free", action="store_true", help="Only show free slots")
    nxt = commands.add_parser("next", help="Find the next date with a free slot")
    nxt.add_argument("date", type=_parse_date, help="First date to look at (YYYY-MM-DD)")

    args = parser.parse_args(argv)

    setup_structured_logging(args.log_level, json_format=settings.log_json)
    logger = logging.getLogger(__name__)

    try:
        if args.default_schedule:
            config = DEFAULT_SCHEDULE_CONFIG
        else:
            logger.info(f"Loading schedule from {args.config}...")
            config = load_schedule_config(args.config)

        service = build_service(config)
        now = args.now or datetime.now(timezone.utc)

        if args.command == "slots":
            asyncio.run(
                print_slots(service, config.scope_id, args.date, now, args.duration, args.free)
            )
        else:
            asyncio.run(print_next(service, config.scope_id, args.date, now, args.duration))

    except FileNotFoundError as e:
        logger.error(f"Schedule file not found: {e}")
        logger.info("Pass --config or --default-schedule")
        sys.exit(1)
    except ConfigurationError as e:
        logger.error(f"Invalid schedule: {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
