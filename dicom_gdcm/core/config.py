"""Configuration Management - Process-Wide Tool Settings.

Holds the settings every tool invocation reads: timeouts, error
strictness, validation of newly opened files, the execution backend and
the names of the GDCM executables. Values load from ``GDCM_*`` environment
variables and an optional ``.env`` file.

Lifecycle:
    get_settings() initialises the shared instance on first use,
    configure() replaces it with overridden values, and
    reset_settings() tears it down so the next call reloads.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any, Literal

import structlog
from pydantic import Field, PrivateAttr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class GdcmSettings(BaseSettings):
    """Settings shared by the shell executor, tools and packages.

    Usage:
        from dicom_gdcm.core.config import configure
        configure(timeout=5, whiny=False)
    """

    model_config = SettingsConfigDict(
        env_prefix="GDCM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds before a running tool is killed; unset means unbounded",
    )
    validate_on_create: bool = Field(
        default=True, description="Identify every newly opened package"
    )
    whiny: bool = Field(
        default=True, description="Raise on non-zero exit status of a tool"
    )
    shell_api: Literal["subprocess", "popen"] = Field(
        default="subprocess", description="Backend used to spawn tool processes"
    )

    cli_path: Path | None = Field(
        default=None, description="Directory holding the GDCM executables"
    )
    convert_executable: str = Field(default="gdcmconv")
    identify_executable: str = Field(default="gdcminfo")
    dump_executable: str = Field(default="gdcmdump")

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log format: json or console"
    )
    logger_name: str = Field(default="dicom_gdcm")

    _logger: Any = PrivateAttr(default=None)

    @field_validator("shell_api", mode="before")
    @classmethod
    def normalize_shell_api(cls, v: Any) -> Any:
        """Accept the backend name in any case."""
        if isinstance(v, str):
            v = v.strip().lower()
        return v

    @property
    def logger(self) -> Any:
        """Sink receiving one entry per executed command."""
        if self._logger is not None:
            return self._logger
        return structlog.get_logger(self.logger_name)

    def executable_path(self, name: str) -> str:
        """Resolve an executable name against ``cli_path`` when set."""
        if self.cli_path is None:
            return name
        return str(self.cli_path / name)


_settings: GdcmSettings | None = None


def get_settings(force_reload: bool = False) -> GdcmSettings:
    """Get the process-wide settings (singleton).

    Args:
        force_reload: Force reload settings from environment

    Returns:
        GdcmSettings instance

    """
    global _settings
    if _settings is None or force_reload:
        _settings = GdcmSettings()
    return _settings


def configure(
    callback: Callable[[GdcmSettings], None] | None = None, **overrides: Any
) -> GdcmSettings:
    """Replace the process-wide settings.

    Keyword overrides are applied on top of the environment; a callback,
    when given, receives the new instance for further changes. Unknown
    keywords raise TypeError.

    Example:
        >>> configure(timeout=5)
        >>> configure(lambda s: setattr(s, "whiny", False))

    """
    global _settings
    logger = overrides.pop("logger", None)
    unknown = sorted(set(overrides) - set(GdcmSettings.model_fields))
    if unknown:
        raise TypeError(f"Unknown setting(s): {', '.join(unknown)}")
    current = get_settings()
    values = current.model_dump()
    values.update(overrides)
    settings = GdcmSettings(**values)
    settings._logger = logger if logger is not None else current._logger
    if callback is not None:
        callback(settings)
    _settings = settings
    return settings


def reset_settings() -> None:
    """Drop the shared settings; the next get_settings() reloads them."""
    global _settings
    _settings = None
