"""Configuration handed to the active log sink."""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS Z} [{level_code}] {message}"

# Three-letter severity codes written in place of ``{level_code}``
LEVEL_CODES = {
    "TRACE": "VRB",
    "DEBUG": "DBG",
    "INFO": "INF",
    "SUCCESS": "INF",
    "WARNING": "WRN",
    "ERROR": "ERR",
    "CRITICAL": "FTL",
}


def level_code(level_name: str) -> str:
    """Return the three-letter code for a Loguru level name."""
    return LEVEL_CODES.get(level_name, level_name[:3].upper())


class SinkConfig(BaseModel):
    """Parameters for the daily-rotating file sink.

    The sink keeps at most ``retention_count`` rotated files uncompressed.
    Whatever is left over from earlier days is picked up by the archiver
    on the next start.  ``format`` is a Loguru format string that may use
    the extra ``{level_code}`` field (``DBG``, ``INF``, ``WRN``, ...); the
    exception detail, if any, is appended on the following lines.
    """

    model_config = ConfigDict(frozen=True)

    file_name: str = "log.txt"
    rotation: str = "00:00"
    retention_count: int = Field(7, ge=1)
    level: str = "DEBUG"
    format: str = DEFAULT_LOG_FORMAT
    encoding: str = "utf-8"
