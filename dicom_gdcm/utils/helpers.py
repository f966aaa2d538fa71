"""File system helpers shared by packages and tools."""

from __future__ import annotations

import os
import shutil
import tempfile as _tempfile
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

TEMPFILE_PREFIX = "gdcm"


def which(cmd: str) -> Path | None:
    """Find an executable on PATH.

    Example:
        >>> which("gdcminfo")
        PosixPath('/usr/bin/gdcminfo')

    """
    found = shutil.which(cmd)
    return Path(found) if found else None


def tempfile(
    extension: str = "", writer: Callable[[BinaryIO], object] | None = None
) -> Path:
    """Allocate a named temporary file and return its path.

    The file is closed before returning; the caller owns it and must
    unlink it. If ``writer`` raises, the file is removed first.

    Args:
        extension: Suffix for the file name (e.g. ".dcm")
        writer: Optional callable receiving the open binary file

    """
    fd, name = _tempfile.mkstemp(prefix=TEMPFILE_PREFIX, suffix=extension)
    path = Path(name)
    try:
        with os.fdopen(fd, "wb") as handle:
            if writer is not None:
                writer(handle)
    except BaseException:
        path.unlink(missing_ok=True)
        raise
    return path
