"""Shell Executor - runs GDCM binaries as subprocesses.

Commands are always passed to the OS as an argument vector; nothing is
ever joined into a shell string. Two backends are available, selected by
``GdcmSettings.shell_api``:

- ``subprocess``: ``subprocess.run`` with captured output
- ``popen``: ``subprocess.Popen`` driven through ``communicate``
"""

from __future__ import annotations

import subprocess
import time
from collections.abc import Sequence
from dataclasses import dataclass

from dicom_gdcm.core.config import GdcmSettings, get_settings
from dicom_gdcm.core.exceptions import (
    CommandFailedError,
    ToolNotFoundError,
    ToolSpawnError,
    ToolTimeoutError,
)


@dataclass(frozen=True)
class ExecutionResult:
    """Captured outcome of one external process."""

    command: tuple[str, ...]
    stdout: str
    stderr: str
    exit_code: int
    elapsed: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    def __iter__(self):
        # allows ``stdout, stderr, status = result``
        return iter((self.stdout, self.stderr, self.exit_code))


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


class Shell:
    """Runs commands and applies the timeout and whiny policies.

    Each ``run`` is independent; the instance only holds settings.
    """

    def __init__(self, settings: GdcmSettings | None = None):
        self.settings = settings or get_settings()

    def run(
        self,
        command: Sequence[str],
        stdin: bytes | None = None,
        timeout: float | None = None,
        whiny: bool | None = None,
    ) -> ExecutionResult:
        """Execute ``command`` and capture its output.

        Args:
            command: Argument vector, executable first
            stdin: Bytes written to the process's standard input
            timeout: Seconds before the process is killed
                (defaults to ``settings.timeout``)
            whiny: Raise on non-zero exit (defaults to ``settings.whiny``)

        Returns:
            ExecutionResult with decoded stdout/stderr and exit status

        Raises:
            ValueError: If ``command`` is empty
            ToolNotFoundError: If the executable does not exist
            ToolSpawnError: If the OS refuses to start the executable
            ToolTimeoutError: If the process outlives ``timeout``
            CommandFailedError: On non-zero exit when whiny

        """
        argv = [str(token) for token in command]
        if not argv:
            raise ValueError("Cannot execute an empty command")

        if timeout is None:
            timeout = self.settings.timeout
        if whiny is None:
            whiny = self.settings.whiny

        logger = self.settings.logger
        start_time = time.monotonic()
        try:
            stdout, stderr, exit_code = self.execute(argv, stdin, timeout)
        except FileNotFoundError as e:
            raise ToolNotFoundError(
                f"Executable not found: {argv[0]}",
                command=argv,
                error_code="TOOL_NOT_FOUND",
            ) from e
        except OSError as e:
            raise ToolSpawnError(
                f"Cannot execute {argv[0]}: {e.strerror or e}",
                command=argv,
                error_code="TOOL_SPAWN_FAILED",
                context={"errno": e.errno},
            ) from e
        except subprocess.TimeoutExpired as e:
            elapsed = time.monotonic() - start_time
            logger.warning(
                "command_timeout", command=argv, timeout=timeout, elapsed_s=elapsed
            )
            raise ToolTimeoutError(
                f"`{' '.join(argv)}` timed out after {timeout}s",
                command=argv,
                stderr=_decode(e.stderr),
                error_code="TOOL_TIMEOUT",
            ) from e

        elapsed = time.monotonic() - start_time
        logger.debug(
            "command_executed",
            command=argv,
            exit_code=exit_code,
            elapsed_s=round(elapsed, 3),
        )

        result = ExecutionResult(
            command=tuple(argv),
            stdout=stdout,
            stderr=stderr,
            exit_code=exit_code,
            elapsed=elapsed,
        )

        if exit_code != 0 and whiny:
            logger.warning("command_failed", command=argv, exit_code=exit_code)
            raise CommandFailedError(
                f"`{' '.join(argv)}` failed with error:\n{stderr}",
                command=argv,
                stderr=stderr,
                exit_code=exit_code,
                error_code="COMMAND_FAILED",
            )

        return result

    def execute(
        self, argv: list[str], stdin: bytes | None, timeout: float | None
    ) -> tuple[str, str, int]:
        """Dispatch to the configured backend."""
        if self.settings.shell_api == "popen":
            return self.execute_popen(argv, stdin, timeout)
        return self.execute_subprocess(argv, stdin, timeout)

    def execute_subprocess(
        self, argv: list[str], stdin: bytes | None, timeout: float | None
    ) -> tuple[str, str, int]:
        if stdin is not None:
            stdin_kwargs = {"input": stdin}
        else:
            stdin_kwargs = {"stdin": subprocess.DEVNULL}
        completed = subprocess.run(
            argv,
            **stdin_kwargs,
            capture_output=True,
            timeout=timeout,
            check=False,
        )
        return _decode(completed.stdout), _decode(completed.stderr), completed.returncode

    def execute_popen(
        self, argv: list[str], stdin: bytes | None, timeout: float | None
    ) -> tuple[str, str, int]:
        with subprocess.Popen(
            argv,
            stdin=subprocess.PIPE if stdin is not None else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        ) as process:
            try:
                stdout, stderr = process.communicate(input=stdin, timeout=timeout)
            except subprocess.TimeoutExpired:
                process.kill()
                process.communicate()
                raise
            return _decode(stdout), _decode(stderr), process.returncode
