from __future__ import annotations

import threading
import time
from datetime import date, datetime
from pathlib import Path

from logkeeper.config.settings import LoggingSettings
from logkeeper.models.enums import ArchiveFormat
from logkeeper.models.log_file import RawLogFile
from logkeeper.services.archiver import ArchiveWriter, container_lock
from logkeeper.storage.containers import open_container

ROOT = Path("/logs")


def _stale(fs, name: str, content: bytes, day: date) -> RawLogFile:
    path = fs.add_file(ROOT / name, content, datetime(day.year, day.month, day.day, 18, 0))
    return RawLogFile(path=path, modified=day)


def _writer(fs, **overrides) -> ArchiveWriter:
    return ArchiveWriter(fs, ROOT, LoggingSettings(**overrides))


def test_archive_paths_follow_year_month_layout(memory_fs) -> None:
    writer = _writer(memory_fs)
    assert writer.archive_path_for(date(2024, 3, 9)) == ROOT / "archive" / "2024" / "03" / "2024-03.zip"
    assert writer.entry_name_for(date(2024, 3, 9)) == "09.txt"

    tar_writer = _writer(memory_fs, archive_format=ArchiveFormat.TAR_GZ)
    assert tar_writer.archive_path_for(date(2024, 3, 9)).name == "2024-03.tar.gz"


def test_stale_file_moves_into_its_month(memory_fs) -> None:
    log_file = _stale(memory_fs, "log20240102.txt", b"second of january\n", date(2024, 1, 2))

    result = _writer(memory_fs).archive(log_file)

    assert result.archived
    assert result.entry_name == "02.txt"
    assert result.archive_path == ROOT / "archive" / "2024" / "01" / "2024-01.zip"
    assert not memory_fs.exists(log_file.path)
    container = open_container(memory_fs, result.archive_path)
    assert container.names() == ["02.txt"]
    assert container.read("02.txt") == b"second of january\n"


def test_files_from_different_months_get_separate_archives(memory_fs) -> None:
    writer = _writer(memory_fs)
    results = writer.archive_all(
        [
            _stale(memory_fs, "log20231231.txt", b"dec", date(2023, 12, 31)),
            _stale(memory_fs, "log20240101.txt", b"jan", date(2024, 1, 1)),
        ]
    )

    assert [r.archive_path.name for r in results] == ["2023-12.zip", "2024-01.zip"]
    assert open_container(memory_fs, results[0].archive_path).read("31.txt") == b"dec"
    assert open_container(memory_fs, results[1].archive_path).read("01.txt") == b"jan"


def test_archiving_the_same_day_twice_replaces_the_entry(memory_fs) -> None:
    writer = _writer(memory_fs)
    first = writer.archive(_stale(memory_fs, "log20240101.txt", b"same content", date(2024, 1, 1)))
    # Simulated restart: the file shows up again for the same day
    second = writer.archive(_stale(memory_fs, "log20240101.txt", b"same content", date(2024, 1, 1)))

    container = open_container(memory_fs, second.archive_path)
    assert first.archived and second.archived
    assert container.names() == ["01.txt"]
    assert container.read("01.txt") == b"same content"


def test_replacing_keeps_latest_content_only(memory_fs) -> None:
    writer = _writer(memory_fs)
    writer.archive(_stale(memory_fs, "log.txt", b"partial", date(2024, 1, 1)))
    result = writer.archive(_stale(memory_fs, "log.txt", b"partial and more", date(2024, 1, 1)))

    assert open_container(memory_fs, result.archive_path).read("01.txt") == b"partial and more"


def test_unreadable_file_is_skipped_and_kept(memory_fs, fallback_warnings) -> None:
    writer = _writer(memory_fs)
    good_1 = _stale(memory_fs, "log20240101.txt", b"one", date(2024, 1, 1))
    bad = _stale(memory_fs, "log20240102.txt", b"two", date(2024, 1, 2))
    good_2 = _stale(memory_fs, "log20240103.txt", b"three", date(2024, 1, 3))
    memory_fs.fail_reads(bad.path)

    results = writer.archive_all([good_1, bad, good_2])

    assert [r.archived for r in results] == [True, False, True]
    assert "PermissionError" in results[1].reason
    assert memory_fs.exists(bad.path)
    assert not memory_fs.exists(good_1.path) and not memory_fs.exists(good_2.path)
    container = open_container(memory_fs, results[0].archive_path)
    assert sorted(container.names()) == ["01.txt", "03.txt"]
    assert any("log20240102.txt" in message for message in fallback_warnings())


def test_corrupt_archive_skips_only_its_month(memory_fs, fallback_warnings) -> None:
    memory_fs.add_file(ROOT / "archive" / "2024" / "01" / "2024-01.zip", b"garbage")
    writer = _writer(memory_fs)
    january = _stale(memory_fs, "log20240105.txt", b"jan", date(2024, 1, 5))
    february = _stale(memory_fs, "log20240205.txt", b"feb", date(2024, 2, 5))

    results = writer.archive_all([january, february])

    assert [r.archived for r in results] == [False, True]
    assert "ArchiveError" in results[0].reason
    assert memory_fs.exists(january.path)
    assert memory_fs.read_bytes(ROOT / "archive" / "2024" / "01" / "2024-01.zip") == b"garbage"
    assert len(fallback_warnings()) == 1


def test_source_is_kept_when_archive_cannot_be_written(memory_fs) -> None:
    writer = _writer(memory_fs)
    log_file = _stale(memory_fs, "log20240101.txt", b"data", date(2024, 1, 1))
    memory_fs.fail_writes(writer.archive_path_for(log_file.modified))

    result = writer.archive(log_file)

    assert not result.archived
    assert memory_fs.read_bytes(log_file.path) == b"data"
    assert not memory_fs.exists(writer.archive_path_for(log_file.modified))


def test_successful_archival_is_reported_on_fallback_channel(memory_fs, log_records) -> None:
    _writer(memory_fs).archive(_stale(memory_fs, "log20240101.txt", b"x", date(2024, 1, 1)))

    infos = [
        r["message"]
        for r in log_records
        if r["extra"].get("channel") == "fallback" and r["level"].name == "INFO"
    ]
    assert infos == ["Compressed log file: log20240101.txt -> /logs/archive/2024/01/2024-01.zip"]


def test_tar_archives_support_replacement(memory_fs) -> None:
    writer = _writer(memory_fs, archive_format=ArchiveFormat.TAR_GZ)
    writer.archive(_stale(memory_fs, "log.txt", b"v1", date(2024, 1, 1)))
    result = writer.archive(_stale(memory_fs, "log.txt", b"v2", date(2024, 1, 1)))

    container = open_container(memory_fs, result.archive_path, ArchiveFormat.TAR_GZ)
    assert container.names() == ["01.txt"]
    assert container.read("01.txt") == b"v2"


def test_container_lock_is_shared_per_archive_path() -> None:
    path = ROOT / "archive" / "2024" / "01" / "2024-01.zip"
    assert container_lock(path) is container_lock(str(path))
    assert container_lock(path) is not container_lock(ROOT / "archive" / "2024" / "02" / "2024-02.zip")


def test_overlapping_writers_on_one_month_keep_both_entries(memory_fs) -> None:
    settings = LoggingSettings()
    first_loaded = threading.Event()
    second_started = threading.Event()

    def slow_open(fs, path, archive_format=None):
        container = open_container(fs, path, archive_format)
        first_loaded.set()
        second_started.wait(timeout=2)
        # Give the second writer time to reach the container
        time.sleep(0.05)
        return container

    first_writer = ArchiveWriter(memory_fs, ROOT, settings, container_opener=slow_open)
    second_writer = ArchiveWriter(memory_fs, ROOT, settings)
    jan_1 = _stale(memory_fs, "log20240101.txt", b"first", date(2024, 1, 1))
    jan_2 = _stale(memory_fs, "log20240102.txt", b"second", date(2024, 1, 2))
    results = {}

    def run_first() -> None:
        results["first"] = first_writer.archive(jan_1)

    def run_second() -> None:
        first_loaded.wait(timeout=2)
        second_started.set()
        results["second"] = second_writer.archive(jan_2)

    threads = [threading.Thread(target=run_first), threading.Thread(target=run_second)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert results["first"].archived and results["second"].archived
    container = open_container(memory_fs, results["first"].archive_path)
    assert sorted(container.names()) == ["01.txt", "02.txt"]
    assert container.read("01.txt") == b"first"
    assert container.read("02.txt") == b"second"
    assert not memory_fs.exists(jan_1.path) and not memory_fs.exists(jan_2.path)
