"""Error handling utilities and custom exceptions."""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable

from ..models.archive import ArchiveResult
from ..models.log_file import RawLogFile
from .logger import fallback_logger


class LoggingServiceError(Exception):
    """Base class for errors raised by the logging manager."""

    pass


class LogRootError(LoggingServiceError, OSError):
    """Raised when the log root directory cannot be resolved or created.

    This is the only fatal error of initialization: without a root
    directory nothing can be logged at all.
    """

    pass


class ArchiveError(LoggingServiceError):
    """Raised when an archive container cannot be opened, read or written."""

    pass


class LoggingStateError(LoggingServiceError, RuntimeError):
    """Raised when an operation is not valid in the manager's current state."""

    pass


class LoggingNotInitializedError(LoggingStateError):
    """Raised when the log directory is read before initialization completes."""

    pass


def handle_archive_error(func: Callable[..., ArchiveResult]) -> Callable[..., ArchiveResult]:
    """Decorator isolating failures while archiving a single log file.

    The wrapped callable takes the log file as its first argument after
    ``self``.  Any exception is reported as a warning on the fallback
    channel and converted into a skipped :class:`ArchiveResult`; the
    source file is left where it is so the next run retries it.
    """

    @wraps(func)
    def wrapper(self: Any, log_file: RawLogFile, *args: Any, **kwargs: Any) -> ArchiveResult:
        try:
            return func(self, log_file, *args, **kwargs)
        except Exception as exc:
            reason = f"{type(exc).__name__}: {exc}"
            fallback_logger.warning(
                "Failed to compress log file {}: {}", log_file.name, reason
            )
            return ArchiveResult.skipped(log_file, reason)

    return wrapper
