"""Tool Invocation Core - fluent builders for GDCM command lines.

A ``Tool`` accumulates tokens in call order and hands the finished
argument vector to the Shell Executor. It is closer to the metal than
``Package``: use it to run any GDCM binary with any flags.

Example:
    >>> convert = Convert.build()
    >>> convert.append_option("raw").append_raw("in.dcm").append_raw("out.dcm")
    >>> convert.command
    ['gdcmconv', '--raw', 'in.dcm', 'out.dcm']
    >>> convert.execute()

    >>> Identify.invoke(lambda b: b.append_option("version"))
    'gdcminfo: gdcm 3.0.22 ...'
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from dicom_gdcm.core.config import GdcmSettings, get_settings
from dicom_gdcm.core.exceptions import StateError
from dicom_gdcm.core.shell import ExecutionResult, Shell

ToolT = TypeVar("ToolT", bound="Tool")

STACK_OPEN = "("
STACK_CLOSE = ")"
PSEUDO_FILE = "-"


def option_flag(name: str) -> str:
    """Map an option name to its CLI flag: ``foo_bar`` -> ``--foo-bar``."""
    return f"--{name.replace('_', '-')}"


def option_values(value: Any) -> tuple[Any, ...]:
    """Values following a flag: none for True/None, several for a sequence."""
    if value is None or value is True:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return (value,)


class Tool:
    """Builder for one invocation of a command-line tool.

    Args:
        name: Executable name, resolved on PATH or under ``cli_path``
        whiny: Raise on non-zero exit (defaults to ``settings.whiny``)
        settings: Settings to use instead of the process-wide ones

    """

    def __init__(
        self,
        name: str,
        whiny: bool | None = None,
        settings: GdcmSettings | None = None,
    ):
        self.settings = settings or get_settings()
        self.name = name
        self.args: list[str] = []
        self.whiny = self.settings.whiny if whiny is None else whiny
        self.last_result: ExecutionResult | None = None
        self._flag_index: int | None = None

    @classmethod
    def build(cls: type[ToolT], *args: Any, **kwargs: Any) -> ToolT:
        """Create a builder without executing it."""
        return cls(*args, **kwargs)

    @classmethod
    def invoke(
        cls,
        configure: Callable[[Any], object],
        *args: Any,
        **kwargs: Any,
    ) -> str:
        """Create a builder, let ``configure`` fill it, then execute it.

        Example:
            >>> Identify.invoke(lambda b: b.append_option("help"), whiny=False)

        Returns:
            The command's standard output

        """
        instance = cls(*args, **kwargs)
        configure(instance)
        return instance.execute()

    @property
    def executable(self) -> str:
        return self.settings.executable_path(self.name)

    @property
    def command(self) -> list[str]:
        """The currently built-up argument vector."""
        return [self.executable, *self.args]

    def execute(
        self,
        whiny: bool | None = None,
        stdin: bytes | None = None,
        timeout: float | None = None,
    ) -> str:
        """Execute the built command.

        The full result, including stderr and exit status, is kept in
        ``last_result``.

        Returns:
            Standard output with one trailing newline removed

        """
        if whiny is None:
            whiny = self.whiny
        shell = Shell(self.settings)
        self.last_result = shell.run(
            self.command, stdin=stdin, timeout=timeout, whiny=whiny
        )
        stdout = self.last_result.stdout
        if stdout.endswith("\n"):
            stdout = stdout[:-1]
        return stdout

    def append_raw(self: ToolT, arg: Any) -> ToolT:
        """Append a token verbatim, e.g. a file path."""
        self.args.append(str(arg))
        return self

    def merge(self: ToolT, new_args: Iterable[Any]) -> ToolT:
        """Append several raw tokens."""
        for arg in new_args:
            self.append_raw(arg)
        return self

    def append_option(self: ToolT, name: str, *values: Any) -> ToolT:
        """Append ``--name-with-dashes`` followed by its values.

        Any option the tool understands can be built this way, e.g.
        ``append_option("j2k")`` or ``append_option("split", 8)``.
        """
        self._flag_index = len(self.args)
        self.append_raw(option_flag(name))
        self.merge(values)
        return self

    def plus(self: ToolT, *values: Any) -> ToolT:
        """Turn the last flag into its ``+`` form and append ``values``.

        Only flags added by ``append_option`` count; raw tokens such as
        ``-5`` are never rewritten.

        Raises:
            StateError: If no flag has been appended yet

        """
        if self._flag_index is None:
            raise StateError(
                "No flag to turn into its plus form",
                error_code="NO_FLAG",
                context={"args": list(self.args)},
            )
        flag = self.args[self._flag_index]
        self.args[self._flag_index] = re.sub(r"^-", "+", flag, count=1)
        self.merge(values)
        return self

    def stack(
        self: ToolT,
        *children: Mapping[str, Any] | str,
        configure: Callable[[ToolT], object] | None = None,
    ) -> ToolT:
        """Wrap tokens in the toolkit's ``(`` ... ``)`` grouping.

        Mapping children become options, string children raw tokens.
        """
        self.append_raw(STACK_OPEN)
        for child in children:
            if isinstance(child, Mapping):
                for key, value in child.items():
                    self.append_option(key, *option_values(value))
            elif isinstance(child, str):
                self.append_raw(child)
        if configure is not None:
            configure(self)
        self.append_raw(STACK_CLOSE)
        return self

    def read_stdin(self: ToolT) -> ToolT:
        """Append the ``-`` pseudo file name for standard input."""
        return self.append_raw(PSEUDO_FILE)

    def write_stdout(self: ToolT) -> ToolT:
        """Append the ``-`` pseudo file name for standard output."""
        return self.append_raw(PSEUDO_FILE)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.command!r})"


class Convert(Tool):
    """``gdcmconv``: rewrite a DICOM file, e.g. change its transfer syntax."""

    def __init__(self, whiny: bool | None = None, settings: GdcmSettings | None = None):
        settings = settings or get_settings()
        super().__init__(settings.convert_executable, whiny=whiny, settings=settings)


class Identify(Tool):
    """``gdcminfo``: print a summary of a DICOM file."""

    def __init__(self, whiny: bool | None = None, settings: GdcmSettings | None = None):
        settings = settings or get_settings()
        super().__init__(settings.identify_executable, whiny=whiny, settings=settings)


class Dump(Tool):
    """``gdcmdump``: print every data element of a DICOM file."""

    def __init__(self, whiny: bool | None = None, settings: GdcmSettings | None = None):
        settings = settings or get_settings()
        super().__init__(settings.dump_executable, whiny=whiny, settings=settings)
