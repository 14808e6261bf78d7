"""Logging manager settings loaded from environment variables.

Values are read from a ``.env`` file or the host environment using the
``LOGKEEPER_`` prefix, e.g. ``LOGKEEPER_APP_ENV=production``.  Using
Pydantic's ``BaseSettings`` keeps the configuration typesafe and allows
defaults for every value, so the manager can start with no
configuration at all.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.enums import ArchiveFormat, DeploymentMode
from ..models.sink_config import SinkConfig

# Load environment variables from .env file
load_dotenv()

LOGURU_LEVELS = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """Configuration for log placement, rotation and archival."""

    # ---------------------------------------------------------------------
    # Placement
    app_env: DeploymentMode = Field(DeploymentMode.DEVELOPMENT)
    vendor_name: str = Field("PixelForge Apps")
    app_name: str = Field("ScheduleHelper")
    log_dir_name: str = Field("logs")
    # Explicit root directory; bypasses mode-based resolution when set
    log_dir: Optional[str] = Field(None)

    # ---------------------------------------------------------------------
    # Active sink
    active_file_name: str = Field("log")
    log_extension: str = Field(".txt")
    retention_count: int = Field(7)
    log_level: str = Field("DEBUG")
    intercept_stdlib: bool = Field(False)

    # ---------------------------------------------------------------------
    # Archival
    archive_dir_name: str = Field("archive")
    archive_format: ArchiveFormat = Field(ArchiveFormat.ZIP)

    @field_validator("app_env", mode="before")
    def validate_app_env(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip().lower()
            if value not in [mode.value for mode in DeploymentMode]:
                raise ValueError("APP_ENV must be development or production")
        return value

    @field_validator("log_extension")
    def validate_log_extension(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("LOG_EXTENSION must not be empty")
        return value if value.startswith(".") else "." + value

    @field_validator("retention_count")
    def validate_retention_count(cls, value: int) -> int:
        if value < 1:
            raise ValueError("RETENTION_COUNT must be at least 1")
        return value

    @field_validator("log_level")
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOGURU_LEVELS:
            raise ValueError("LOG_LEVEL must be a valid Loguru level")
        return level

    model_config = SettingsConfigDict(env_prefix="LOGKEEPER_", env_file=".env", extra="ignore")

    @property
    def active_file(self) -> str:
        """File name of the active log, e.g. ``log.txt``."""
        return f"{self.active_file_name}{self.log_extension}"

    @property
    def log_file_pattern(self) -> str:
        """Glob matching the active log and every file rotated from it."""
        return f"{self.active_file_name}*{self.log_extension}"

    def sink_config(self) -> SinkConfig:
        """Build the immutable configuration for the active file sink."""
        return SinkConfig(
            file_name=self.active_file,
            retention_count=self.retention_count,
            level=self.log_level,
        )


@lru_cache()
def get_settings() -> LoggingSettings:
    """Return a cached settings instance.

    Pydantic reads environment variables on instantiation; the result is
    cached so settings are only loaded once per process.
    """
    return LoggingSettings()
