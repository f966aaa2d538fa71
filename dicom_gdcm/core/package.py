"""Package Facade - a DICOM file handled through the GDCM tools.

A Package wraps one path. ``Package.open`` copies the input into a
temporary the package owns, so conversions never touch the original.
``Package(path)`` wraps the path directly; conversions then replace the
file in place.

Example:
    >>> with Package.open("a.dcm") as package:
    ...     package.convert(configure=lambda c: c.append_option("raw"))
    ...     package.write("b.dcm")
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, BinaryIO

from dicom_gdcm.core.config import GdcmSettings, get_settings
from dicom_gdcm.core.exceptions import ExecutionError, InvalidPackageError
from dicom_gdcm.core.info import PackageInfo
from dicom_gdcm.core.tool import Convert, Dump, Identify, option_values
from dicom_gdcm.utils import helpers
from dicom_gdcm.utils.logger import get_logger

logger = get_logger(__name__)

CONVERTED_SUFFIX = ".dcm"


class Package:
    """A DICOM file on disk, optionally owned as a temporary.

    Args:
        input_path: Path of the file to wrap
        tempfile: Path of the owned temporary, when the package owns one
        settings: Settings to use instead of the process-wide ones

    """

    def __init__(
        self,
        input_path: str | os.PathLike[str],
        tempfile: Path | None = None,
        settings: GdcmSettings | None = None,
    ):
        self.path = str(input_path)
        self.tempfile = tempfile
        self.settings = settings or get_settings()
        self._info: PackageInfo | None = None

    @classmethod
    def new(
        cls, path: str | os.PathLike[str], settings: GdcmSettings | None = None
    ) -> Package:
        """Wrap ``path`` without copying; conversions modify it in place."""
        return cls(path, settings=settings)

    @classmethod
    def open(
        cls,
        path: str | os.PathLike[str],
        ext: str | None = None,
        validate: bool | None = None,
        settings: GdcmSettings | None = None,
    ) -> Package:
        """Copy a file into an owned temporary and wrap it.

        Args:
            path: Source file; it is never modified
            ext: Extension for the temporary (defaults to the source's)
            validate: Identify the copy (defaults to ``validate_on_create``)

        Raises:
            InvalidPackageError: If validation is on and the copy is rejected

        """
        source = Path(path)
        if ext is None:
            ext = source.suffix
        # suffixes like ".dcm:frame" are not part of the extension
        ext = ext.split(":", 1)[0]

        with source.open("rb") as handle:
            return cls.read(handle, ext, validate=validate, settings=settings)

    @classmethod
    def read(
        cls,
        stream: BinaryIO | bytes,
        ext: str | None = None,
        validate: bool | None = None,
        settings: GdcmSettings | None = None,
    ) -> Package:
        """Create a package from a binary stream or a bytes blob."""
        if isinstance(stream, (bytes, bytearray)):
            data = bytes(stream)
            return cls.create(ext, validate, lambda f: f.write(data), settings)
        return cls.create(
            ext, validate, lambda f: shutil.copyfileobj(stream, f), settings
        )

    @classmethod
    def create(
        cls,
        ext: str | None = None,
        validate: bool | None = None,
        writer: Callable[[BinaryIO], object] | None = None,
        settings: GdcmSettings | None = None,
    ) -> Package:
        """Allocate an owned temporary and let ``writer`` fill it."""
        settings = settings or get_settings()
        if validate is None:
            validate = settings.validate_on_create

        tempfile = helpers.tempfile((ext or "").lower(), writer)
        package = cls(tempfile, tempfile=tempfile, settings=settings)
        if validate:
            try:
                package.validate()
            except BaseException:
                package.destroy()
                raise
        return package

    @property
    def owned(self) -> bool:
        return self.tempfile is not None

    @property
    def info(self) -> PackageInfo:
        """Metadata of the wrapped file, cached until clear_info()."""
        if self._info is None:
            self._info = PackageInfo(self)
        return self._info

    def clear_info(self) -> None:
        self._info = None

    def to_bytes(self) -> bytes:
        return Path(self.path).read_bytes()

    def is_valid(self) -> bool:
        try:
            self.validate()
        except InvalidPackageError:
            return False
        return True

    def validate(self) -> None:
        """Identify the file, raising InvalidPackageError if rejected."""
        try:
            self.identify(whiny=True)
        except ExecutionError as error:
            logger.info("package_invalid", path=self.path, reason=error.message)
            raise InvalidPackageError(
                error.message,
                error_code="INVALID_PACKAGE",
                context={"path": self.path, "exit_code": error.exit_code},
            ) from error

    def identify(
        self,
        configure: Callable[[Identify], object] | None = None,
        whiny: bool | None = None,
    ) -> str:
        """Run gdcminfo on the wrapped file and return its output."""
        identify = Identify.build(whiny=whiny, settings=self.settings)
        if configure is not None:
            configure(identify)
        identify.append_raw(self.path)
        return identify.execute()

    def dump(self, configure: Callable[[Dump], object] | None = None) -> str:
        """Run gdcmdump on the wrapped file and return its output."""
        dump = Dump.build(settings=self.settings)
        if configure is not None:
            configure(dump)
        dump.append_raw(self.path)
        return dump.execute()

    def convert(
        self,
        options: Mapping[str, Any] | None = None,
        configure: Callable[[Convert], object] | None = None,
    ) -> Package:
        """Run gdcmconv on the wrapped file and adopt its output.

        Args:
            options: Option names mapped to values; ``True`` or ``None``
                gives a bare flag, a list or tuple several values
            configure: Receives the builder to add further flags

        Returns:
            self, now wrapping the converted file

        """
        new_tempfile: Path | None = None
        if self.owned:
            new_tempfile = helpers.tempfile(CONVERTED_SUFFIX)
            new_path = str(new_tempfile)
        else:
            new_path = str(Path(self.path).with_suffix(CONVERTED_SUFFIX))

        input_path = self.path
        convert = Convert.build(settings=self.settings)
        for name, value in (options or {}).items():
            convert.append_option(name, *option_values(value))
        if configure is not None:
            configure(convert)
        convert.append_raw(input_path)
        convert.append_raw(new_path)

        try:
            convert.execute()
        except BaseException:
            if new_tempfile is not None:
                new_tempfile.unlink(missing_ok=True)
            raise

        if self.owned:
            self.destroy()
            self.tempfile = new_tempfile
        elif input_path != new_path:
            Path(input_path).unlink()

        self.path = new_path
        self.clear_info()
        return self

    def write(self, output_to: str | os.PathLike[str] | BinaryIO) -> None:
        """Copy the wrapped file to a path or into a writable binary stream."""
        if isinstance(output_to, (str, os.PathLike)):
            if os.path.exists(output_to) and os.path.samefile(output_to, self.path):
                return
            shutil.copyfile(self.path, output_to)
        else:
            with open(self.path, "rb") as source:
                shutil.copyfileobj(source, output_to)

    def destroy(self) -> None:
        """Delete the owned temporary, if any. Safe to call repeatedly."""
        if self.tempfile is None:
            return
        if self.tempfile.suffix == ".mpc":
            self.tempfile.with_suffix(".cache").unlink(missing_ok=True)
        self.tempfile.unlink(missing_ok=True)

    def __enter__(self) -> Package:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.destroy()

    def __repr__(self) -> str:
        return f"Package(path={self.path!r}, owned={self.owned})"
