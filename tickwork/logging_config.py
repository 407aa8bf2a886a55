"""Logging setup for the command line runner."""
from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"


def setup_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> logging.Logger:
    """Configure the ``tickwork`` logger and return it.

    Calling this more than once replaces the previously installed handler
    instead of adding a second one.
    """

    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"unknown log level: {level}")

    logger = logging.getLogger("tickwork")
    logger.setLevel(numeric_level)
    for handler in list(logger.handlers):
        if getattr(handler, "_tickwork_handler", False):
            logger.removeHandler(handler)
            handler.close()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._tickwork_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
