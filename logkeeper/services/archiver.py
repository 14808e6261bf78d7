"""Fold stale log files into monthly archives.

Each stale file becomes one entry of the archive for its month::

    <root>/archive/2024/01/2024-01.zip
        01.txt
        02.txt

The entry is keyed by day of month, so archiving the same day twice
replaces the entry instead of duplicating it.  The source file is
deleted only after the archive has been durably written; if anything
fails the file stays where it is and is retried on the next start.
"""

from __future__ import annotations

import threading
from datetime import date
from pathlib import Path
from typing import Callable, Dict, Iterable, List

from ..config.settings import LoggingSettings
from ..models.archive import ArchiveKey, ArchiveResult
from ..models.log_file import RawLogFile
from ..storage.containers import ArchiveContainer, open_container
from ..storage.filesystem import FileSystem, PathLike
from ..utils.error_handler import handle_archive_error
from ..utils.logger import fallback_logger
from .paths import ensure_directory

ContainerOpener = Callable[..., ArchiveContainer]

# One lock per container path, shared by every writer in the process
_container_locks: Dict[Path, threading.Lock] = {}
_container_locks_guard = threading.Lock()


def container_lock(path: PathLike) -> threading.Lock:
    """Return the process-wide lock guarding the archive at ``path``."""
    key = Path(path).absolute()
    with _container_locks_guard:
        lock = _container_locks.get(key)
        if lock is None:
            lock = _container_locks[key] = threading.Lock()
        return lock


class ArchiveWriter:
    """Move raw log files into their monthly archive containers.

    Every update of a month container happens under that container's
    process-wide lock, so two writers (even from separate archival
    passes) never load and save the same container concurrently.
    """

    def __init__(
        self,
        fs: FileSystem,
        root: PathLike,
        settings: LoggingSettings,
        container_opener: ContainerOpener = open_container,
    ) -> None:
        self.fs = fs
        self.root = Path(root)
        self.settings = settings
        self._open_container = container_opener

    def archive_path_for(self, day: date) -> Path:
        key = ArchiveKey.for_date(day)
        return key.container_path(
            self.root,
            self.settings.archive_format.extension,
            self.settings.archive_dir_name,
        )

    def entry_name_for(self, day: date) -> str:
        return f"{day.day:02d}{self.settings.log_extension}"

    @handle_archive_error
    def archive(self, log_file: RawLogFile) -> ArchiveResult:
        """Archive one stale file and delete it once the archive is saved."""
        day = log_file.modified
        archive_path = self.archive_path_for(day)
        entry_name = self.entry_name_for(day)

        with container_lock(archive_path):
            ensure_directory(self.fs, archive_path.parent)
            data = self.fs.read_bytes(log_file.path)
            with self._open_container(self.fs, archive_path, self.settings.archive_format) as container:
                if entry_name in container:
                    container.delete(entry_name)
                container.write(entry_name, data)
            # Container closed without error: the archive is on disk
            self.fs.delete(log_file.path)

        fallback_logger.info("Compressed log file: {} -> {}", log_file.name, archive_path)
        return ArchiveResult(
            source=log_file,
            archived=True,
            archive_path=archive_path,
            entry_name=entry_name,
        )

    def archive_all(self, files: Iterable[RawLogFile]) -> List[ArchiveResult]:
        """Archive ``files`` in order; one failure never stops the rest."""
        return [self.archive(log_file) for log_file in files]
