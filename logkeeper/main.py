"""Command-line entry point.

Host applications normally embed :class:`LoggingManager` directly.  The
``logkeeper`` command runs the same start-up sequence from a shell, for
instance to sweep old logs while the application is stopped::

    logkeeper --mode production --archive-only

Only one process may own a log directory.  Do not run it while the
application is running: its active log file would be archived and
deleted underneath the open sink.
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from .config.settings import LoggingSettings, get_settings
from .models.enums import DeploymentMode
from .services.logging_manager import LoggingManager
from .utils.error_handler import LogRootError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logkeeper",
        description="Prepare the log directory and archive log files from previous days.",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in DeploymentMode],
        help="Deployment mode used to resolve the log directory.",
    )
    parser.add_argument("--log-dir", help="Use this log directory instead of resolving one.")
    parser.add_argument(
        "--archive-only",
        action="store_true",
        help="Only archive stale log files; do not open a log file.",
    )
    return parser


def _settings_from_args(args: argparse.Namespace) -> LoggingSettings:
    settings = get_settings()
    updates = {}
    if args.mode:
        updates["app_env"] = DeploymentMode(args.mode)
    if args.log_dir:
        updates["log_dir"] = args.log_dir
    return settings.model_copy(update=updates) if updates else settings


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    manager = LoggingManager(settings=_settings_from_args(args))

    if args.archive_only:
        try:
            root = manager.prepare_log_root()
        except LogRootError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
        results = manager.compress_old_logs(root)
        for result in results:
            if result.archived:
                print(f"archived {result.source.name} -> {result.archive_path}")
            else:
                print(f"skipped  {result.source.name}: {result.reason}")
        return 0 if all(result.archived for result in results) else 2

    try:
        manager.initialize()
    except LogRootError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    try:
        print(manager.log_directory)
    finally:
        manager.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
