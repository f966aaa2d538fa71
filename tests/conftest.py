"""
Pytest configuration and shared fixtures for dicom-gdcm tests.

The GDCM binaries are replaced by small Python scripts written into a
temporary bin directory that is put first on PATH, so every test runs
real subprocesses without the toolkit being installed.
"""

import json
import os
import stat
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Generator

import pydicom
import pytest
import structlog
from pydicom.dataset import FileDataset
from pydicom.uid import generate_uid

from dicom_gdcm.core.config import reset_settings

FAKE_PREAMBLE = f"""#!{sys.executable}
import json
import os
import sys
import time

argv = sys.argv[1:]
log = os.environ.get("GDCM_FAKE_LOG")
if log:
    with open(log, "a") as handle:
        handle.write(json.dumps([os.path.basename(sys.argv[0])] + argv) + "\\n")


def is_dicom(path):
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError:
        return None
    if data[128:132] != b"DICM":
        return None
    return data
"""

FAKE_GDCMINFO = FAKE_PREAMBLE + """
if "--version" in argv:
    print("gdcminfo: gdcm 3.0.22 ")
    sys.exit(0)
if "--help" in argv:
    print("Usage: gdcminfo [OPTION]... FILE...")
    sys.exit(1)

data = is_dicom(argv[-1])
if data is None:
    sys.stderr.write("Could not read: " + argv[-1] + "\\n")
    sys.exit(1)
print("MediaStorage is 1.2.840.10008.5.1.4.1.1.2 [CT Image Storage]")
if data.endswith(b"CONVERTED"):
    print("TransferSyntax is 1.2.840.10008.1.2 [Implicit VR Little Endian]")
else:
    print("TransferSyntax is 1.2.840.10008.1.2.1 [Explicit VR Little Endian]")
print("NumberOfDimensions: 2")
print("Dimensions: (64,64,1)")
print("PhotometricInterpretation: MONOCHROME2")
"""

FAKE_GDCMCONV = FAKE_PREAMBLE + """
if "--sleep" in argv:
    time.sleep(10)
if "--fail" in argv:
    sys.stderr.write("gdcmconv: conversion failed\\n")
    sys.exit(2)

source, target = argv[-2], argv[-1]
data = is_dicom(source)
if data is None:
    sys.stderr.write("Could not read: " + source + "\\n")
    sys.exit(1)
with open(target, "wb") as handle:
    handle.write(data + b"CONVERTED")
"""

FAKE_GDCMDUMP = FAKE_PREAMBLE + """
data = is_dicom(argv[-1])
if data is None:
    sys.stderr.write("Could not read: " + argv[-1] + "\\n")
    sys.exit(1)
print("# Dicom-File-Format")
print("")
print("# Dicom-Meta-Information-Header")
print("(0002,0002) UI [1.2.840.10008.5.1.4.1.1.2]        # 26,1 Media Storage SOP Class UID")
print("")
print("# Dicom-Data-Set")
print("(0008,0060) CS [CT]                                # 2,1 Modality")
print("(0010,0010) PN [Test^Patient]                      # 12,1 Patient's Name")
"""


@dataclass
class FakeGdcm:
    """Handle on the fake toolkit installed for a test."""

    bin_dir: Path
    log_file: Path

    def calls(self) -> list[list[str]]:
        """Argument vectors the fake tools were invoked with, in order."""
        if not self.log_file.exists():
            return []
        return [json.loads(line) for line in self.log_file.read_text().splitlines()]


def _write_script(path: Path, source: str) -> None:
    path.write_text(source)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch) -> Generator[None, None, None]:
    """Give every test fresh settings and default structlog config."""
    for name in list(os.environ):
        if name.upper().startswith("GDCM_"):
            monkeypatch.delenv(name)
    reset_settings()
    yield
    reset_settings()
    structlog.reset_defaults()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for test files.

    Yields:
        Path to temporary directory that will be cleaned up after test
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_gdcm(tmp_path: Path, monkeypatch) -> FakeGdcm:
    """Install fake gdcminfo/gdcmconv/gdcmdump first on PATH."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    _write_script(bin_dir / "gdcminfo", FAKE_GDCMINFO)
    _write_script(bin_dir / "gdcmconv", FAKE_GDCMCONV)
    _write_script(bin_dir / "gdcmdump", FAKE_GDCMDUMP)

    log_file = tmp_path / "calls.jsonl"
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    monkeypatch.setenv("GDCM_FAKE_LOG", str(log_file))
    return FakeGdcm(bin_dir=bin_dir, log_file=log_file)


@pytest.fixture
def sample_dicom_file(temp_dir: Path) -> Path:
    """Create a minimal valid DICOM file for testing.

    Args:
        temp_dir: Temporary directory fixture

    Returns:
        Path to created DICOM file
    """
    file_path = temp_dir / "test.dcm"

    file_meta = pydicom.dataset.FileMetaDataset()
    file_meta.MediaStorageSOPClassUID = "1.2.840.10008.5.1.4.1.1.2"  # CT Image Storage
    file_meta.MediaStorageSOPInstanceUID = generate_uid()
    file_meta.TransferSyntaxUID = "1.2.840.10008.1.2.1"  # Explicit VR Little Endian
    file_meta.ImplementationClassUID = generate_uid()

    dataset = FileDataset(
        str(file_path), {}, file_meta=file_meta, preamble=b"\x00" * 128
    )
    dataset.PatientName = "Test^Patient"
    dataset.PatientID = "TEST123"
    dataset.StudyInstanceUID = generate_uid()
    dataset.SeriesInstanceUID = generate_uid()
    dataset.SOPInstanceUID = file_meta.MediaStorageSOPInstanceUID
    dataset.SOPClassUID = file_meta.MediaStorageSOPClassUID
    dataset.Modality = "CT"

    dataset.save_as(str(file_path), enforce_file_format=True)

    return file_path


@pytest.fixture
def invalid_file(temp_dir: Path) -> Path:
    """A file that is not DICOM."""
    file_path = temp_dir / "notes.txt"
    file_path.write_bytes(b"this is not a dicom file")
    return file_path
