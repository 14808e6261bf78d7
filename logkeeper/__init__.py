"""Log lifecycle and archival manager.

Importing from the package root gives access to the objects most host
applications need::

    from logkeeper import LoggingManager

    manager = LoggingManager()
    manager.initialize()
    ...
    manager.dispose()
"""

from .services.logging_manager import LoggingManager  # noqa: F401
from .config.settings import LoggingSettings, get_settings  # noqa: F401
from .models import ArchiveResult, LifecycleState, RawLogFile  # noqa: F401

__version__ = "0.1.0"
