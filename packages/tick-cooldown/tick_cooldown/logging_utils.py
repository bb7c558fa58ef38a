"""
Logger setup for the tracker process.
"""
import logging
import sys
from typing import TextIO

from pythonjsonlogger.json import JsonFormatter

LOGGER_NAME = "tick_cooldown"


def setup_logging(
    level: str = "WARNING", json_logs: bool = False, stream: TextIO | None = None
) -> logging.Logger:
    """
    Configures the package logger with a single stream handler.

    Args:
        level: The minimum logging level (e.g., "INFO", "DEBUG").
        json_logs: Format records as JSON objects, one per line.
        stream: Where to write; defaults to stderr.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.propagate = False

    # Remove existing handlers to avoid duplication
    if logger.hasHandlers():
        logger.handlers.clear()

    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    if json_logs:
        formatter: logging.Formatter = JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s"
        )
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger
