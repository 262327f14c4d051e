"""Logging configuration utilities."""

import sys

from loguru import logger

from collab_events.config.settings import EventSettings


def configure_logging(settings: EventSettings) -> None:
    """Configure loguru sinks based on settings."""

    logger.remove()
    level = settings.log_level.upper()

    logger.add(
        sink=sys.stdout,
        level=level,
        backtrace=True,
        diagnose=False,
        enqueue=True,
        colorize=True,
    )

    if settings.log_path is None:
        return

    log_path = settings.log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logger.add(log_path, level=level, rotation="1 day", retention="7 days", enqueue=True)
