"""Structured logging with Loguru."""

import contextvars
import logging
import sys
from pathlib import Path
from types import FrameType
from typing import Any, Dict, Optional

from loguru import logger

# Identifier of the booking attempt being processed, for log correlation
booking_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "booking_id", default=None
)

__all__ = ["booking_id_ctx", "setup_structured_logging", "InterceptHandler"]


def _booking_patcher(record: Dict[str, Any]) -> None:
    """
    Patch log records with booking_id from context.

    Called by Loguru for each record to inject the booking_id from the
    ContextVar into the record's extra fields.
    """
    booking_id = booking_id_ctx.get()
    record["extra"]["booking_id"] = booking_id or "-"


class InterceptHandler(logging.Handler):
    """Redirect standard logging records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: Any = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame: Optional[FrameType] = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_structured_logging(
    level: str = "INFO",
    json_format: bool = False,
    logs_dir: Optional[Path] = None,
) -> None:
    """
    Setup Loguru logging with structured output.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Write a JSON-lines file sink in addition to the console
        logs_dir: Directory for the file sink (defaults to ./logs)
    """
    level = level.upper()

    # Remove default handler
    logger.remove()
    logger.configure(patcher=_booking_patcher)

    console_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<magenta>{extra[booking_id]}</magenta> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    )
    logger.add(sys.stderr, format=console_format, level=level, colorize=True)

    if json_format:
        logs_dir = logs_dir or Path("logs")
        logs_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            logs_dir / "clinic_scheduler.jsonl",
            format="{message}",
            level=level,
            rotation="10 MB",
            retention="30 days",
            serialize=True,
        )

    # Intercept all standard logging
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logging.root.setLevel(getattr(logging, level))

    logger.info(f"Logging initialized (level={level}, json={json_format})")
