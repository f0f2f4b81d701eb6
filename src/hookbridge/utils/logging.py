"""Logging utilities for hookbridge."""

import sys

from loguru import logger


def configure_logging(level: str = "WARNING") -> None:
    """Route loguru output to a single stderr sink.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)

    Stdout is reserved for the JSON reply handed back to the hook caller,
    so nothing is ever logged there.
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format="{time:HH:mm:ss} | {level: <7} | {message}")
