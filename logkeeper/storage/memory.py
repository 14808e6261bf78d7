"""
In-memory filesystem implementation for testing.

This module provides a FileSystem that keeps everything in dictionaries:
- Unit tests that need disk behaviour without touching the disk
- Deterministic modification times for date-based logic
- Injected read/write failures to exercise error paths

Invariants:
    - All data is lost when the instance is discarded
    - Mirrors LocalFileSystem error types (FileNotFoundError, ...)
    - Thread-safe for concurrent access

How to change safely:
    - This is test-only code, changes don't affect production
    - Keep interface compatible with the FileSystem base class
"""

from __future__ import annotations

import threading
from datetime import datetime
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set

from .filesystem import FileSystem, PathLike


class MemoryFileSystem(FileSystem):
    """FileSystem that stores files and directories in memory.

    Example:
        >>> fs = MemoryFileSystem()
        >>> fs.make_dirs("/logs")
        >>> fs.write_bytes("/logs/log.txt", b"hello")
        >>> fs.set_modified_time("/logs/log.txt", datetime(2024, 1, 1, 12, 0))
        >>> fs.list_files("/logs", "log*.txt")
        [PosixPath('/logs/log.txt')]
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or datetime.now
        self._files: Dict[Path, bytes] = {}
        self._mtimes: Dict[Path, datetime] = {}
        self._dirs: Set[Path] = set()
        self._unreadable: Set[Path] = set()
        self._unwritable: Set[Path] = set()
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # FileSystem interface

    def exists(self, path: PathLike) -> bool:
        p = Path(path)
        with self._lock:
            return p in self._files or p in self._dirs

    def is_dir(self, path: PathLike) -> bool:
        with self._lock:
            return Path(path) in self._dirs

    def make_dirs(self, path: PathLike) -> None:
        p = Path(path)
        with self._lock:
            for candidate in [p, *p.parents]:
                if candidate in self._files:
                    raise FileExistsError(f"File exists: '{candidate}'")
            self._dirs.add(p)
            self._dirs.update(p.parents)

    def list_files(self, directory: PathLike, pattern: str = "*") -> List[Path]:
        d = Path(directory)
        with self._lock:
            if d not in self._dirs:
                raise FileNotFoundError(f"No such directory: '{d}'")
            return sorted(
                p for p in self._files if p.parent == d and fnmatchcase(p.name, pattern)
            )

    def modified_time(self, path: PathLike) -> datetime:
        p = Path(path)
        with self._lock:
            if p not in self._files:
                raise FileNotFoundError(f"No such file: '{p}'")
            return self._mtimes[p]

    def read_bytes(self, path: PathLike) -> bytes:
        p = Path(path)
        with self._lock:
            if p in self._unreadable:
                raise PermissionError(f"Permission denied: '{p}'")
            if p not in self._files:
                raise FileNotFoundError(f"No such file: '{p}'")
            return self._files[p]

    def write_bytes(self, path: PathLike, data: bytes) -> None:
        p = Path(path)
        with self._lock:
            if p in self._unwritable:
                raise PermissionError(f"Permission denied: '{p}'")
            if p in self._dirs:
                raise IsADirectoryError(f"Is a directory: '{p}'")
            if p.parent not in self._dirs:
                raise FileNotFoundError(f"No such directory: '{p.parent}'")
            self._files[p] = bytes(data)
            self._mtimes[p] = self._clock()

    def delete(self, path: PathLike) -> None:
        p = Path(path)
        with self._lock:
            if p not in self._files:
                raise FileNotFoundError(f"No such file: '{p}'")
            del self._files[p]
            del self._mtimes[p]

    # ------------------------------------------------------------------
    # Test helpers

    def set_modified_time(self, path: PathLike, moment: datetime) -> None:
        """Override the last write time of an existing file."""
        p = Path(path)
        with self._lock:
            if p not in self._files:
                raise FileNotFoundError(f"No such file: '{p}'")
            self._mtimes[p] = moment

    def add_file(self, path: PathLike, data: bytes, modified: Optional[datetime] = None) -> Path:
        """Create a file, its parent directories and optionally its mtime."""
        p = Path(path)
        self.make_dirs(p.parent)
        self.write_bytes(p, data)
        if modified is not None:
            self.set_modified_time(p, modified)
        return p

    def fail_reads(self, path: PathLike) -> None:
        """Make every subsequent read of ``path`` raise PermissionError."""
        with self._lock:
            self._unreadable.add(Path(path))

    def fail_writes(self, path: PathLike) -> None:
        """Make every subsequent write of ``path`` raise PermissionError."""
        with self._lock:
            self._unwritable.add(Path(path))
