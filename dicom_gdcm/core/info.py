"""Metadata Parser - turns gdcminfo output into a key/value mapping.

gdcminfo prints one fact per line, mostly as ``Key: value``. Two lines
use a different shape and are matched explicitly::

    MediaStorage is 1.2.840.10008.5.1.4.1.1.2 [CT Image Storage]
    TransferSyntax is 1.2.840.10008.1.2.1 [Explicit VR Little Endian]
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from dicom_gdcm.core.package import Package
    from dicom_gdcm.core.tool import Dump, Identify

MEDIA_STORAGE_RE = re.compile(r"^MediaStorage is (?P<media_storage>[\d.]+)")
TRANSFER_SYNTAX_RE = re.compile(r"^TransferSyntax is (?P<transfer_syntax>[\d.]+)")
KEY_VALUE_SEPARATOR_RE = re.compile(r":\s*")
DUMP_TAG_RE = re.compile(r"^\s*\((?P<tag>[0-9a-f]{4},[0-9a-f]{4})\)")


def parse_metadata(raw_text: Any) -> dict[str, str] | None:
    """Parse gdcminfo output.

    Args:
        raw_text: Captured standard output of gdcminfo

    Returns:
        Mapping in line order, or None when there is no text to parse

    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        return None

    data: dict[str, str] = {}
    for line in raw_text.splitlines():
        if not line.strip():
            continue
        if match := MEDIA_STORAGE_RE.match(line):
            data["MediaStorage"] = match["media_storage"]
        elif match := TRANSFER_SYNTAX_RE.match(line):
            data["TransferSyntax"] = match["transfer_syntax"]
        else:
            key, _, value = _partition(line)
            data[key.strip()] = value.strip()
    return data


def _partition(line: str) -> tuple[str, str, str]:
    match = KEY_VALUE_SEPARATOR_RE.search(line)
    if match is None:
        return line, "", ""
    return line[: match.start()], match.group(), line[match.end() :]


class PackageInfo:
    """Lazily retrieved metadata of a Package.

    The gdcminfo text is fetched once and kept in ``meta`` until the
    owning package clears it.
    """

    def __init__(self, base: Package):
        self.base = base
        self._meta: str | None = None

    @property
    def meta(self) -> str:
        if self._meta is None:
            self._meta = self.identify()
        return self._meta

    @meta.setter
    def meta(self, value: str | None) -> None:
        self._meta = value

    @property
    def data(self) -> dict[str, str] | None:
        return parse_metadata(self.meta)

    def __getitem__(self, key: str) -> str:
        data = self.data or {}
        return data[key]

    def get(self, key: str, default: str | None = None) -> str | None:
        return (self.data or {}).get(key, default)

    def raw(self) -> list[str]:
        """Data element lines, ``(gggg,eeee) VR value``, from gdcmdump."""
        return [line for line in self.dump().splitlines() if DUMP_TAG_RE.match(line)]

    def identify(self, configure: Callable[[Identify], object] | None = None) -> str:
        return self.base.identify(configure)

    def dump(self, configure: Callable[[Dump], object] | None = None) -> str:
        return self.base.dump(configure)
