"""dicom-gdcm CLI Package.

Public API:
- SubcommandBase: Base class for subcommands
- main: CLI entry point
"""

from dicom_gdcm.cli.base import SubcommandBase
from dicom_gdcm.cli.main import main

__all__ = ["SubcommandBase", "main"]
