"""
Logging configuration using loguru.

Call ``setup_logging()`` (or ``setup_logging_from_config()``) once at
startup.  Library modules only ever do ``from loguru import logger``.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from equilibrium.core.config import Config

CONSOLE_FORMAT = "<level>[{level.name}]</level> {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message}"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """
    Replace loguru's default sink with a console sink and an optional file sink.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR).
        log_file: Path to a log file. If None, only logs to stderr.
        rotation: Log file rotation size.
        retention: How long to keep rotated logs.
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=CONSOLE_FORMAT)

    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        logger.add(
            log_file,
            level=level.upper(),
            format=FILE_FORMAT,
            rotation=rotation,
            retention=retention,
        )


def setup_logging_from_config(config: Config) -> None:
    """Configure logging from the ``logging`` section of a :class:`Config`."""
    log_file = config.get("logging.file") or None
    if log_file is None and config.get("logging.to_file", False):
        log_file = os.path.join(config.get("paths.log_dir"), "equilibrium.log")

    setup_logging(
        level=str(config.get("logging.level", "WARNING")),
        log_file=log_file,
        rotation=config.get("logging.rotation", "10 MB"),
        retention=config.get("logging.retention", "7 days"),
    )
