from __future__ import annotations

import os
import sys
from datetime import datetime
from pathlib import Path

import pytest
from loguru import logger

repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from logkeeper.config.settings import LoggingSettings
from logkeeper.models.sink_config import SinkConfig
from logkeeper.services.sink import SinkConfigurator, SinkHandle
from logkeeper.storage.memory import MemoryFileSystem
from logkeeper.utils.logger import FALLBACK_CHANNEL

JAN_3_2024 = datetime(2024, 1, 3, 9, 30)


class RecordingConfigurator(SinkConfigurator):
    """Configurator that sends the active sink to a list instead of a file."""

    def __init__(self) -> None:
        self.calls = 0
        self.messages: list[str] = []

    def configure(self, root, config: SinkConfig) -> SinkHandle:
        self.calls += 1
        handler_id = logger.add(self.messages.append, level=config.level, format="{message}")
        return SinkHandle(handler_id, Path(root) / config.file_name, config)


@pytest.fixture
def log_records():
    """Capture every Loguru record emitted during the test."""
    records: list[dict] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="TRACE")
    yield records
    logger.remove(handler_id)


@pytest.fixture
def fallback_warnings(log_records):
    def _warnings() -> list[str]:
        return [
            record["message"]
            for record in log_records
            if record["extra"].get("channel") == FALLBACK_CHANNEL
            and record["level"].name == "WARNING"
        ]

    return _warnings


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    return MemoryFileSystem(clock=lambda: JAN_3_2024)


@pytest.fixture
def make_settings():
    def _make(log_dir, **overrides) -> LoggingSettings:
        return LoggingSettings(log_dir=str(log_dir), **overrides)

    return _make


@pytest.fixture
def recording_configurator() -> RecordingConfigurator:
    return RecordingConfigurator()


def write_log(path: Path, text: str, modified: datetime) -> Path:
    """Create a real log file with the given content and last write time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    stamp = modified.timestamp()
    os.utime(path, (stamp, stamp))
    return path


@pytest.fixture
def log_file_writer():
    return write_log
