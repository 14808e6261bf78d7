"""Expose commonly used model classes at the package level.

Importing these classes here allows consumers to write concise imports like::

    from logkeeper.models import RawLogFile, ArchiveKey, SinkConfig
"""

from .archive import ArchiveKey, ArchiveResult  # noqa: F401
from .enums import ArchiveFormat, DeploymentMode, LifecycleState  # noqa: F401
from .log_file import RawLogFile  # noqa: F401
from .sink_config import SinkConfig  # noqa: F401
