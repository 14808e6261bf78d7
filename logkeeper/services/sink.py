"""Configure the active, daily-rotating log file.

The configurator adds one Loguru file sink and hands back a
:class:`SinkHandle` that owns it.  Closing the handle removes only that
sink, so other Loguru handlers in the process are left alone.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict

from loguru import logger

from ..models.sink_config import SinkConfig, level_code
from ..storage.filesystem import PathLike
from ..utils.error_handler import LogRootError
from ..utils.logger import exclude_fallback


def make_formatter(template: str) -> Callable[[Dict[str, Any]], str]:
    """Build a Loguru format function that fills in ``{level_code}``."""
    line = template + "\n{exception}"

    def _format(record: Dict[str, Any]) -> str:
        return line.replace("{level_code}", level_code(record["level"].name))

    return _format


class SinkHandle:
    """Owned reference to the active file sink."""

    def __init__(self, handler_id: int, path: Path, config: SinkConfig) -> None:
        self.handler_id = handler_id
        self.path = path
        self.config = config
        self.logger = logger.bind(log_file=str(path))
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def flush(self) -> None:
        """Wait until every queued message has been written."""
        logger.complete()

    def close(self) -> None:
        """Flush and remove the sink; safe to call more than once."""
        if self._closed:
            return
        logger.complete()
        logger.remove(self.handler_id)
        self._closed = True


class SinkConfigurator:
    """Create the active file sink for a log root.

    One file is written per calendar day at ``<root>/<file_name>``;
    Loguru renames it at midnight and keeps ``retention_count`` rotated
    files.  Rotated files that outlive a day are swept into the archive
    on the next start, so the two policies cover each other.
    """

    def configure(self, root: PathLike, config: SinkConfig) -> SinkHandle:
        path = Path(root) / config.file_name
        logger.debug("Opening active log file {}", path)
        try:
            handler_id = logger.add(
                str(path),
                level=config.level,
                format=make_formatter(config.format),
                rotation=config.rotation,
                retention=config.retention_count,
                encoding=config.encoding,
                filter=exclude_fallback,
                backtrace=True,
                diagnose=False,
            )
        except OSError as exc:
            raise LogRootError(f"Cannot open log file {path}: {exc}") from exc
        return SinkHandle(handler_id, path, config)
