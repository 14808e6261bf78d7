"""Logging utilities shared by the manager's components.

Everything logs through Loguru.  Messages about the log machinery
itself (a stale file that could not be archived, a root directory that
could not be created) go to the *fallback channel*: records bound with
``channel="fallback"``.  They reach whatever Loguru sinks are present,
by default the stderr sink Loguru installs at import, but the active
file sink filters them out.  That keeps diagnostics about logging
visible even before the file sink exists.

The module also bridges the standard Python ``logging`` module to
Loguru so that messages from third-party libraries end up in the same
place.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from loguru import logger

FALLBACK_CHANNEL = "fallback"

fallback_logger = logger.bind(channel=FALLBACK_CHANNEL)


def is_fallback_record(record: Dict[str, Any]) -> bool:
    """Return True when a Loguru record was emitted on the fallback channel."""
    return record["extra"].get("channel") == FALLBACK_CHANNEL


def exclude_fallback(record: Dict[str, Any]) -> bool:
    """Sink filter that drops fallback-channel records."""
    return not is_fallback_record(record)


class InterceptHandler(logging.Handler):
    """Handler to forward standard logging records to Loguru."""

    def __init__(self, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        # Root level in force before the handler was installed
        self.previous_level: Optional[int] = None

    def emit(self, record: logging.LogRecord) -> None:
        try:
            # Fetch the corresponding Loguru level if it exists
            level = logger.level(record.levelname).name
        except (KeyError, ValueError):
            level = record.levelno

        # Find the caller from where the logging call was made
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def intercept_standard_logging(level: int = logging.WARNING) -> InterceptHandler:
    """Route the root ``logging`` logger into Loguru and return the handler.

    The handler is added next to whatever handlers the host application
    already installed; :func:`release_standard_logging` undoes the change.
    """
    root = logging.getLogger()
    handler = InterceptHandler()
    handler.previous_level = root.level
    root.addHandler(handler)
    root.setLevel(level)
    logger.debug("Standard logging redirected to Loguru at level {}", logging.getLevelName(level))
    return handler


def release_standard_logging(handler: InterceptHandler) -> None:
    """Remove ``handler`` from the root logger and restore the root level."""
    root = logging.getLogger()
    root.removeHandler(handler)
    if handler.previous_level is not None:
        root.setLevel(handler.previous_level)
