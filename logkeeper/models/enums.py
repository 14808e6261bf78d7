"""Enumerations used across models."""

from enum import Enum


class DeploymentMode(str, Enum):
    """Where the application is running.

    ``DEVELOPMENT`` keeps logs next to the working directory so they are
    easy to find while iterating.  ``PRODUCTION`` stores them under the
    per-user application data directory.
    """

    DEVELOPMENT = "development"
    PRODUCTION = "production"


class LifecycleState(str, Enum):
    """States of the logging manager."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    INITIALIZED = "initialized"
    DISPOSED = "disposed"


class ArchiveFormat(str, Enum):
    """Container formats supported for monthly archives."""

    ZIP = "zip"
    TAR_GZ = "tar.gz"

    @property
    def extension(self) -> str:
        return "." + self.value
