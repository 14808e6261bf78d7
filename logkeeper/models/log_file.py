"""Model representing a raw log file on disk."""

from __future__ import annotations

from datetime import date
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class RawLogFile(BaseModel):
    """A plain-text log file written by the active sink.

    ``modified`` is the calendar date of the file's last write, not a
    timestamp.  It decides both whether the file is stale and which
    monthly archive it belongs to.
    """

    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="Absolute path of the log file.")
    modified: date = Field(..., description="Local calendar date of the last write.")

    @property
    def name(self) -> str:
        return self.path.name
