"""Resolve and create the log root directory.

``resolve_log_root`` is pure: it only computes a path.  ``ensure_directory``
is the single place where the root (or an archive month directory) is
created, and the only failure of initialization that is fatal.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Union

import platformdirs
from loguru import logger

from ..config.settings import LoggingSettings
from ..models.enums import DeploymentMode
from ..storage.filesystem import FileSystem, PathLike
from ..utils.error_handler import LogRootError


def resolve_log_root(
    mode: Union[DeploymentMode, str],
    settings: LoggingSettings,
    cwd: Optional[PathLike] = None,
) -> Path:
    """Return the absolute log root for a deployment mode.

    Development logs live under the working directory
    (``<cwd>/logs``).  Production logs live under the per-user data
    directory, namespaced by vendor and application, e.g.
    ``%LOCALAPPDATA%/PixelForge Apps/ScheduleHelper/logs`` on Windows or
    ``~/.local/share/PixelForge Apps/ScheduleHelper/logs`` on Linux.
    """
    if settings.log_dir:
        return Path(settings.log_dir).expanduser().absolute()

    mode = DeploymentMode(mode)
    if mode is DeploymentMode.DEVELOPMENT:
        base = Path(cwd) if cwd is not None else Path(os.getcwd())
        return (base / settings.log_dir_name).absolute()

    data_root = Path(platformdirs.user_data_dir())
    return data_root / settings.vendor_name / settings.app_name / settings.log_dir_name


def ensure_directory(fs: FileSystem, path: PathLike) -> Path:
    """Create ``path`` and its ancestors if missing.

    Safe to call on every start.  Raises :class:`LogRootError` when the
    directory cannot be created or something other than a directory
    already occupies the path.
    """
    directory = Path(path)
    if fs.is_dir(directory):
        return directory
    if fs.exists(directory):
        raise LogRootError(f"Log path exists but is not a directory: {directory}")
    try:
        fs.make_dirs(directory)
    except OSError as exc:
        raise LogRootError(f"Cannot create log directory {directory}: {exc}") from exc
    logger.debug("Created directory {}", directory)
    return directory
