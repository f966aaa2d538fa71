"""
dicom-gdcm - A Python interface to the GDCM command-line tools.

Runs gdcmconv, gdcminfo and gdcmdump as subprocesses, manages temporary
copies of the files they work on, and parses their metadata output.
"""

__version__ = "1.0.6"
__license__ = "MIT"

import re

from dicom_gdcm.core.config import configure, get_settings, reset_settings
from dicom_gdcm.core.exceptions import (
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
from dicom_gdcm.core.info import PackageInfo, parse_metadata
from dicom_gdcm.core.package import Package
from dicom_gdcm.core.tool import Convert, Dump, Identify, Tool

VERSION_RE = re.compile(r"\d+\.\d+\.\d+(-\d+)?")


def cli_version() -> str | None:
    """Version of the installed GDCM toolkit, e.g. ``"3.0.22"``."""
    output = Identify.invoke(lambda builder: builder.append_option("version"))
    match = VERSION_RE.search(output)
    return match.group() if match else None


__all__ = [
    "__version__",
    "__license__",
    "CommandFailedError",
    "Convert",
    "Dump",
    "ExecutionError",
    "GdcmError",
    "Identify",
    "InvalidPackageError",
    "Package",
    "PackageInfo",
    "StateError",
    "Tool",
    "ToolNotFoundError",
    "ToolSpawnError",
    "ToolTimeoutError",
    "ValidationError",
    "cli_version",
    "configure",
    "get_settings",
    "parse_metadata",
    "reset_settings",
]
