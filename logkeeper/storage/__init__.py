"""Filesystem and archive container capabilities."""

from .containers import (  # noqa: F401
    ArchiveContainer,
    TarArchiveContainer,
    ZipArchiveContainer,
    open_container,
)
from .filesystem import FileSystem, LocalFileSystem  # noqa: F401
from .memory import MemoryFileSystem  # noqa: F401
