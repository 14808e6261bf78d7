"""
Filesystem capability used by the logging manager.

The manager never touches ``os`` or ``pathlib`` I/O directly.  It goes
through a :class:`FileSystem`, which makes every component testable
without a real disk (see :mod:`logkeeper.storage.memory`).

Invariants:
    - ``write_bytes`` is durable: when it returns, the data is on disk
      and the target either holds the old or the new content, never a
      partial write; the rename is flushed with its directory
    - ``list_files`` only returns regular files directly inside the
      directory, never files from subdirectories
    - Failures are raised as ``OSError`` subclasses

How to change safely:
    - Keep LocalFileSystem and MemoryFileSystem behaviourally identical
    - Add new operations to the base class first
"""

from __future__ import annotations

import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import List, Union

PathLike = Union[str, Path]


def fsync_directory(path: PathLike) -> None:
    """Flush changes to the entries of directory ``path`` (POSIX only)."""
    if os.name != "posix":
        return
    fd = os.open(str(path), os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


class FileSystem(ABC):
    """Abstract set of filesystem operations.

    Paths are accepted as ``str`` or ``Path`` and returned as ``Path``.
    """

    @abstractmethod
    def exists(self, path: PathLike) -> bool:
        """Return True if a file or directory exists at ``path``."""

    @abstractmethod
    def is_dir(self, path: PathLike) -> bool:
        """Return True if ``path`` is an existing directory."""

    @abstractmethod
    def make_dirs(self, path: PathLike) -> None:
        """Create ``path`` and any missing ancestors; no-op if present."""

    @abstractmethod
    def list_files(self, directory: PathLike, pattern: str = "*") -> List[Path]:
        """Return regular files in ``directory`` matching ``pattern``, sorted by name."""

    @abstractmethod
    def modified_time(self, path: PathLike) -> datetime:
        """Return the last write time of ``path`` as a naive local datetime."""

    @abstractmethod
    def read_bytes(self, path: PathLike) -> bytes:
        """Return the full content of the file at ``path``."""

    @abstractmethod
    def write_bytes(self, path: PathLike, data: bytes) -> None:
        """Durably replace the content of ``path`` with ``data``."""

    @abstractmethod
    def delete(self, path: PathLike) -> None:
        """Delete the file at ``path``."""


class LocalFileSystem(FileSystem):
    """FileSystem backed by the local disk."""

    def exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def is_dir(self, path: PathLike) -> bool:
        return Path(path).is_dir()

    def make_dirs(self, path: PathLike) -> None:
        directory = Path(path)
        missing = [p for p in [directory, *directory.parents] if not p.exists()]
        directory.mkdir(parents=True, exist_ok=True)
        for created in reversed(missing):
            fsync_directory(created.parent)

    def list_files(self, directory: PathLike, pattern: str = "*") -> List[Path]:
        return sorted(p for p in Path(directory).glob(pattern) if p.is_file())

    def modified_time(self, path: PathLike) -> datetime:
        return datetime.fromtimestamp(Path(path).stat().st_mtime)

    def read_bytes(self, path: PathLike) -> bytes:
        return Path(path).read_bytes()

    def write_bytes(self, path: PathLike, data: bytes) -> None:
        target = Path(path)
        # Write next to the target so os.replace stays on one filesystem
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        # Persist the rename itself before callers act on it
        fsync_directory(target.parent)

    def delete(self, path: PathLike) -> None:
        Path(path).unlink()
