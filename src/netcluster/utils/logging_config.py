"""
Logging setup for netcluster.

Usage:
    from netcluster.utils.logging_config import get_logger, setup_logging

    setup_logging()
    logger = get_logger(__name__)
"""

import logging
import sys
from typing import Optional, Union

ROOT_LOGGER_NAME = "netcluster"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: Optional[Union[str, int]] = None) -> logging.Logger:
    """
    Configure the package logger with a single stream handler.

    Safe to call more than once: the handler is only attached the first time,
    later calls just update the level.

    Args:
        level: Log level name or number. Defaults to ``config.logging.level``.

    Returns:
        The configured ``netcluster`` logger.
    """
    if level is None:
        from ..config import config

        level = config.logging.level
    if isinstance(level, str):
        level = level.upper()

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    if not any(getattr(h, "_netcluster_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._netcluster_handler = True
        logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger for *name*, nested under the package logger."""
    return logging.getLogger(name)
