"""Models describing monthly archives and archival outcomes."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .log_file import RawLogFile


class ArchiveKey(BaseModel):
    """Identifies the monthly archive a log file belongs to.

    There is exactly one archive container per ``(year, month)`` pair.
    Its location is fully determined by the key::

        <root>/<archive_dir>/<YYYY>/<MM>/<YYYY>-<MM><ext>
    """

    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)

    @classmethod
    def for_date(cls, day: date) -> "ArchiveKey":
        return cls(year=day.year, month=day.month)

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def directory(self, root: Path, archive_dir_name: str = "archive") -> Path:
        return root / archive_dir_name / f"{self.year:04d}" / f"{self.month:02d}"

    def container_path(self, root: Path, extension: str, archive_dir_name: str = "archive") -> Path:
        return self.directory(root, archive_dir_name) / f"{self.label}{extension}"


class ArchiveResult(BaseModel):
    """Outcome of archiving a single raw log file."""

    source: RawLogFile
    archived: bool
    archive_path: Optional[Path] = None
    entry_name: Optional[str] = None
    reason: Optional[str] = Field(
        default=None,
        description="Why the file was skipped.  Only set when ``archived`` is false.",
    )

    @classmethod
    def skipped(cls, source: RawLogFile, reason: str) -> "ArchiveResult":
        return cls(source=source, archived=False, reason=reason)
