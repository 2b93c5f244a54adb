"""Logging setup for the cgraph command line."""

from __future__ import annotations

import logging
import sys

_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def level_for_verbosity(verbosity: int) -> int:
    """Map a ``-v`` count to a logging level (0 warning, 1 info, 2+ debug)."""
    return _LEVELS[min(max(verbosity, 0), len(_LEVELS) - 1)]


def setup_logging(verbosity: int = 0) -> None:
    """Configure the root logger to write to stderr.

    Args:
        verbosity: Number of ``-v`` flags given on the command line
    """
    level = level_for_verbosity(verbosity)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)

    logging.getLogger(__name__).debug("Logging configured at %s", logging.getLevelName(level))
