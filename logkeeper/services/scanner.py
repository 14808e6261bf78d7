"""Find raw log files left over from previous days."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Callable, Iterator, Optional

from loguru import logger

from ..config.settings import LoggingSettings
from ..models.log_file import RawLogFile
from ..storage.filesystem import FileSystem, PathLike
from ..utils.logger import fallback_logger


class StaleFileScanner:
    """Classify log files in the root directory as active or stale.

    A file is stale when the calendar date of its last write is strictly
    before today.  Only the date is compared, so a file touched after
    midnight counts as today's even if its content is older.  The
    archive directory is never scanned because only files directly
    inside the root are listed.
    """

    def __init__(
        self,
        fs: FileSystem,
        settings: LoggingSettings,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.fs = fs
        self.settings = settings
        self._clock = clock or datetime.now

    def today(self) -> date:
        return self._clock().date()

    def is_stale(self, log_file: RawLogFile, today: Optional[date] = None) -> bool:
        return log_file.modified < (today or self.today())

    def scan(self, root: PathLike) -> Iterator[RawLogFile]:
        """Yield the stale log files in ``root``.

        Every call lists the directory again; nothing is cached.  A
        missing root yields nothing, and a file whose timestamp cannot
        be read is reported and skipped.
        """
        root = Path(root)
        if not self.fs.is_dir(root):
            logger.debug("Log directory {} does not exist; nothing to scan", root)
            return

        today = self.today()
        try:
            candidates = self.fs.list_files(root, self.settings.log_file_pattern)
        except OSError as exc:
            fallback_logger.warning("Failed to list log files in {}: {}", root, exc)
            return

        for path in candidates:
            try:
                modified = self.fs.modified_time(path).date()
            except OSError as exc:
                fallback_logger.warning("Failed to read timestamp of {}: {}", path.name, exc)
                continue
            log_file = RawLogFile(path=path, modified=modified)
            if self.is_stale(log_file, today):
                yield log_file
            else:
                logger.debug("Keeping active log file {}", path.name)
