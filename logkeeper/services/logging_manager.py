"""Lifecycle of the application's logging.

``LoggingManager`` is created once by the host application.  On
``initialize()`` it resolves and creates the log root, folds log files
from previous days into monthly archives and then opens today's log
file.  ``dispose()`` flushes and closes that file at shutdown.
"""

from __future__ import annotations

import threading
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Optional

from loguru import logger

from ..config.settings import LoggingSettings, get_settings
from ..models.archive import ArchiveResult
from ..models.enums import LifecycleState
from ..storage.filesystem import FileSystem, LocalFileSystem, PathLike
from ..utils.error_handler import LoggingNotInitializedError, LoggingStateError, LogRootError
from ..utils.logger import (
    InterceptHandler,
    fallback_logger,
    intercept_standard_logging,
    release_standard_logging,
)
from .archiver import ArchiveWriter
from .paths import ensure_directory, resolve_log_root
from .scanner import StaleFileScanner
from .sink import SinkConfigurator, SinkHandle

if TYPE_CHECKING:
    import loguru


class LoggingManager:
    """Own the log directory, the archival pass and the active sink.

    State moves ``UNINITIALIZED -> INITIALIZING -> INITIALIZED`` and
    finally to ``DISPOSED``.  Only failing to resolve or create the log
    root (or to open the log file in it) aborts initialization; the
    manager then returns to ``UNINITIALIZED`` and ``initialize()`` may
    be retried.  Problems with individual old log files are reported on
    the fallback channel and never stop the start.

    The manager can also be used as a context manager::

        with LoggingManager() as manager:
            manager.logger.info("Writing to {}", manager.log_directory)
    """

    def __init__(
        self,
        settings: Optional[LoggingSettings] = None,
        fs: Optional[FileSystem] = None,
        clock: Optional[Callable[[], datetime]] = None,
        configurator: Optional[SinkConfigurator] = None,
        cwd: Optional[PathLike] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.fs = fs or LocalFileSystem()
        self._clock = clock or datetime.now
        self._configurator = configurator or SinkConfigurator()
        self._cwd = cwd
        self._state = LifecycleState.UNINITIALIZED
        self._lock = threading.RLock()
        self._log_directory: Optional[Path] = None
        self._sink: Optional[SinkHandle] = None
        self._intercept: Optional[InterceptHandler] = None
        self.last_results: List[ArchiveResult] = []

    # ------------------------------------------------------------------
    # Properties

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is LifecycleState.INITIALIZED

    @property
    def log_directory(self) -> Path:
        if self._log_directory is None or self._state in (
            LifecycleState.UNINITIALIZED,
            LifecycleState.INITIALIZING,
        ):
            raise LoggingNotInitializedError(
                "LoggingManager not initialized. Call initialize() first."
            )
        return self._log_directory

    @property
    def sink(self) -> Optional[SinkHandle]:
        return self._sink

    @property
    def logger(self) -> "loguru.Logger":
        """Logger bound to the active sink."""
        if self._sink is None or self._sink.closed:
            raise LoggingNotInitializedError("No active log sink. Call initialize() first.")
        return self._sink.logger

    # ------------------------------------------------------------------
    # Lifecycle

    def initialize(self) -> None:
        """Prepare the log directory, archive old logs and open today's log.

        Calling it again once initialized is a no-op.  Raises
        :class:`LogRootError` when the log root cannot be set up.
        """
        with self._lock:
            if self._state in (LifecycleState.INITIALIZED, LifecycleState.INITIALIZING):
                return
            if self._state is LifecycleState.DISPOSED:
                raise LoggingStateError("LoggingManager has been disposed")

            self._state = LifecycleState.INITIALIZING
            try:
                root = self.prepare_log_root()
                self.last_results = self.compress_old_logs(root)
                sink = self._configurator.configure(root, self.settings.sink_config())
            except Exception as exc:
                self._state = LifecycleState.UNINITIALIZED
                fallback_logger.error("Failed to initialize LoggingManager: {}", exc)
                raise

            self._log_directory = root
            self._sink = sink
            if self.settings.intercept_stdlib:
                self._intercept = intercept_standard_logging()
            self._state = LifecycleState.INITIALIZED

        sink.logger.info("LoggingManager initialized successfully. Log directory: {}", root)

    def dispose(self) -> None:
        """Flush and close the active sink; repeated calls do nothing."""
        with self._lock:
            if self._state is LifecycleState.DISPOSED:
                return
            if self._intercept is not None:
                release_standard_logging(self._intercept)
                self._intercept = None
            if self._sink is not None:
                self._sink.close()
            self._state = LifecycleState.DISPOSED

    def __enter__(self) -> "LoggingManager":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    # ------------------------------------------------------------------
    # Steps

    def prepare_log_root(self) -> Path:
        """Resolve the log root for the configured mode and make sure it exists."""
        try:
            root = resolve_log_root(self.settings.app_env, self.settings, cwd=self._cwd)
        except (ValueError, OSError) as exc:
            raise LogRootError(f"Cannot resolve log directory: {exc}") from exc
        return ensure_directory(self.fs, root)

    def compress_old_logs(self, root: PathLike) -> List[ArchiveResult]:
        """Archive every stale log file in ``root``.

        Individual failures are already isolated by the archive writer;
        anything else going wrong during the pass is reported and the
        pass is abandoned without failing the caller.
        """
        scanner = StaleFileScanner(self.fs, self.settings, clock=self._clock)
        writer = ArchiveWriter(self.fs, root, self.settings)
        with self._lock:
            try:
                results = writer.archive_all(scanner.scan(root))
            except Exception as exc:
                fallback_logger.warning("Failed to compress old logs: {}", exc)
                return []
        skipped = sum(1 for result in results if not result.archived)
        logger.debug("Archived {} old log file(s), skipped {}", len(results) - skipped, skipped)
        return results
