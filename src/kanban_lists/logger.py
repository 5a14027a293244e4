"""Logging setup for the lists service."""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "kanban_lists"


# PUBLIC_INTERFACE
def setup_logger(name: str = LOGGER_NAME, level: int = logging.INFO) -> logging.Logger:
    """
    Configure and return the application logger.

    Module loggers (``logging.getLogger(__name__)``) live under this name and
    propagate to it. Calling this again only adjusts the level.

    Args:
        name: Logger name.
        level: Logging level.

    Returns:
        Configured logger.
    """
    log = logging.getLogger(name)
    log.setLevel(level)
    if log.handlers:
        return log

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    h = logging.StreamHandler(sys.stderr)
    h.setFormatter(fmt)
    log.addHandler(h)
    return log
