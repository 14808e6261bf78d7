"""
Archive containers holding one month of day-keyed log entries.

A container is opened, mutated in memory and persisted on close through
the FileSystem's durable ``write_bytes``.  Neither ``zipfile`` nor
``tarfile`` can remove a member in place, so persisting rewrites the
container from its in-memory entries.  The previous container stays
intact on disk until the replacement is complete.

Invariants:
    - Entry names are unique; ``write`` replaces an existing entry
    - Nothing is written unless the container was modified
    - A container closed after an error is never persisted

How to change safely:
    - New formats subclass ArchiveContainer and register in CONTAINER_TYPES
    - Keep ArchiveWriter unaware of the concrete format
"""

from __future__ import annotations

import io
import tarfile
import time
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Type

from loguru import logger

from ..models.enums import ArchiveFormat
from ..utils.error_handler import ArchiveError
from .filesystem import FileSystem, PathLike


class ArchiveContainer(ABC):
    """Mutable view over a compressed, multi-entry archive file.

    Use as a context manager so that changes are persisted only when
    the block completes::

        with open_container(fs, path, ArchiveFormat.ZIP) as container:
            if "01.txt" in container:
                container.delete("01.txt")
            container.write("01.txt", data)
    """

    format: ArchiveFormat

    def __init__(self, fs: FileSystem, path: PathLike) -> None:
        self.fs = fs
        self.path = Path(path)
        self._entries: Dict[str, bytes] = {}
        self._dirty = False
        self._closed = False
        if fs.exists(self.path):
            try:
                data = fs.read_bytes(self.path)
            except OSError as exc:
                raise ArchiveError(f"Cannot read archive {self.path}: {exc}") from exc
            self._entries = self._load(data)

    # ------------------------------------------------------------------
    # Entry access

    def names(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def read(self, name: str) -> bytes:
        """Return the content of entry ``name``; KeyError if missing."""
        return self._entries[name]

    def write(self, name: str, data: bytes) -> None:
        """Add entry ``name``, replacing any existing entry of that name."""
        self._check_open()
        self._entries.pop(name, None)
        self._entries[name] = bytes(data)
        self._dirty = True

    def delete(self, name: str) -> None:
        """Remove entry ``name``; KeyError if missing."""
        self._check_open()
        del self._entries[name]
        self._dirty = True

    # ------------------------------------------------------------------
    # Lifecycle

    def close(self) -> None:
        """Persist pending changes and close the container."""
        if self._closed:
            return
        if self._dirty:
            self.fs.write_bytes(self.path, self._dump())
            logger.debug("Wrote archive {} ({} entries)", self.path, len(self._entries))
        self._dirty = False
        self._closed = True

    def discard(self) -> None:
        """Close the container without persisting pending changes."""
        self._entries = {}
        self._dirty = False
        self._closed = True

    def __enter__(self) -> "ArchiveContainer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self.discard()

    def _check_open(self) -> None:
        if self._closed:
            raise ArchiveError(f"Archive {self.path} is closed")

    # ------------------------------------------------------------------
    # Format hooks

    @abstractmethod
    def _load(self, data: bytes) -> Dict[str, bytes]:
        """Decode a serialized container into its entries."""

    @abstractmethod
    def _dump(self) -> bytes:
        """Serialize the current entries."""


class ZipArchiveContainer(ArchiveContainer):
    """Deflate-compressed zip container."""

    format = ArchiveFormat.ZIP

    def _load(self, data: bytes) -> Dict[str, bytes]:
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                return {
                    info.filename: archive.read(info)
                    for info in archive.infolist()
                    if not info.is_dir()
                }
        except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError, ValueError) as exc:
            raise ArchiveError(f"Corrupt zip archive {self.path}: {exc}") from exc

    def _dump(self) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as archive:
            for name, data in self._entries.items():
                archive.writestr(name, data)
        return buffer.getvalue()


class TarArchiveContainer(ArchiveContainer):
    """Gzip-compressed tar container."""

    format = ArchiveFormat.TAR_GZ

    def _load(self, data: bytes) -> Dict[str, bytes]:
        entries: Dict[str, bytes] = {}
        try:
            with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as archive:
                for member in archive.getmembers():
                    if not member.isfile():
                        continue
                    handle = archive.extractfile(member)
                    if handle is not None:
                        entries[member.name] = handle.read()
        except (tarfile.TarError, EOFError, OSError) as exc:
            raise ArchiveError(f"Corrupt tar archive {self.path}: {exc}") from exc
        return entries

    def _dump(self) -> bytes:
        buffer = io.BytesIO()
        now = time.time()
        with tarfile.open(fileobj=buffer, mode="w:gz", compresslevel=9) as archive:
            for name, data in self._entries.items():
                info = tarfile.TarInfo(name)
                info.size = len(data)
                info.mtime = int(now)
                archive.addfile(info, io.BytesIO(data))
        return buffer.getvalue()


CONTAINER_TYPES: Dict[ArchiveFormat, Type[ArchiveContainer]] = {
    ArchiveFormat.ZIP: ZipArchiveContainer,
    ArchiveFormat.TAR_GZ: TarArchiveContainer,
}


def open_container(
    fs: FileSystem,
    path: PathLike,
    archive_format: Optional[ArchiveFormat] = None,
) -> ArchiveContainer:
    """Open (or start) the container at ``path``.

    A missing file yields an empty container that is created on close.
    Raises :class:`ArchiveError` when an existing file cannot be read or
    decoded.
    """
    container_type = CONTAINER_TYPES[ArchiveFormat(archive_format or ArchiveFormat.ZIP)]
    return container_type(fs, path)
