"""Core GDCM wrapper functionality.

Shell execution, command building, package handling and metadata
parsing, plus the settings and exceptions they share.
"""

from .config import GdcmSettings, configure, get_settings, reset_settings
from .exceptions import (
    CommandFailedError,
    ExecutionError,
    GdcmError,
    InvalidPackageError,
    StateError,
    ToolNotFoundError,
    ToolSpawnError,
    ToolTimeoutError,
    ValidationError,
)
from .info import PackageInfo, parse_metadata
from .package import Package
from .shell import ExecutionResult, Shell
from .tool import Convert, Dump, Identify, Tool

__all__ = [
    "CommandFailedError",
    "Convert",
    "Dump",
    "ExecutionError",
    "ExecutionResult",
    "GdcmError",
    "GdcmSettings",
    "Identify",
    "InvalidPackageError",
    "Package",
    "PackageInfo",
    "Shell",
    "StateError",
    "Tool",
    "ToolNotFoundError",
    "ToolSpawnError",
    "ToolTimeoutError",
    "ValidationError",
    "configure",
    "get_settings",
    "parse_metadata",
    "reset_settings",
]
