"""Custom exceptions for GDCM tool invocations.

This module defines the exception hierarchy for the GDCM wrapper,
separating failures of the external process from validation failures
and misuse of the command builder.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class GdcmError(Exception):
    """Base exception for GDCM wrapper operations.

    Attributes:
        message: Human-readable error description
        error_code: Optional error code for categorization
        context: Additional context information

    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}


class ExecutionError(GdcmError):
    """Raised when an external GDCM tool could not be run successfully.

    Attributes:
        command: Argument vector that was executed
        stderr: Captured standard error, if any
        exit_code: Process exit status, if the process ran to completion

    """

    def __init__(
        self,
        message: str,
        command: Sequence[str] | None = None,
        stderr: str = "",
        exit_code: int | None = None,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code=error_code, context=context)
        self.command = list(command) if command else []
        self.stderr = stderr
        self.exit_code = exit_code


class ToolNotFoundError(ExecutionError):
    """Raised when the executable cannot be found on PATH."""

    pass


class ToolSpawnError(ExecutionError):
    """Raised when the executable exists but the OS refuses to start it."""

    pass


class ToolTimeoutError(ExecutionError, TimeoutError):
    """Raised when a tool exceeds its timeout and is killed."""

    pass


class CommandFailedError(ExecutionError):
    """Raised when a tool exits with a non-zero status in whiny mode."""

    pass


class ValidationError(GdcmError):
    """Raised when a DICOM file is rejected by the toolkit."""

    pass


class InvalidPackageError(ValidationError):
    """Raised by Package.validate() when identification fails."""

    pass


class StateError(GdcmError):
    """Raised when a command builder is used in an invalid state."""

    pass
