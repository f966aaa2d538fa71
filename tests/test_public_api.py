"""Tests for the top-level dicom_gdcm package."""

import pytest

import dicom_gdcm
from dicom_gdcm.core.exceptions import ToolNotFoundError


class TestPublicApi:
    def test_version_string(self):
        assert dicom_gdcm.__version__ == "1.0.6"

    @pytest.mark.parametrize("name", dicom_gdcm.__all__)
    def test_exports_resolve(self, name):
        assert hasattr(dicom_gdcm, name)


class TestCliVersion:
    def test_reads_toolkit_version(self, fake_gdcm):
        assert dicom_gdcm.cli_version() == "3.0.22"
        assert fake_gdcm.calls() == [["gdcminfo", "--version"]]

    def test_missing_toolkit(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PATH", str(tmp_path))

        with pytest.raises(ToolNotFoundError):
            dicom_gdcm.cli_version()
