"""dicom-gdcm - Command Line Interface

Thin front end over Package and the GDCM tools.

Usage:
    dicom-gdcm info scan.dcm --json
    dicom-gdcm convert in.dcm out.dcm -o raw
    dicom-gdcm convert in.dcm out.dcm -o j2k -o quality=90
    dicom-gdcm validate scan.dcm
    dicom-gdcm version
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

import dicom_gdcm
from dicom_gdcm.cli.base import SubcommandBase
from dicom_gdcm.core.config import configure, get_settings
from dicom_gdcm.core.package import Package
from dicom_gdcm.utils.helpers import which
from dicom_gdcm.utils.logger import configure_logging


def parse_option(text: str) -> tuple[str, Any]:
    """Parse ``name`` or ``name=value`` into a convert option.

    Example:
        >>> parse_option("quality=90")
        ('quality', '90')
        >>> parse_option("raw")
        ('raw', True)

    """
    name, sep, value = text.partition("=")
    name = name.strip().lstrip("-")
    if not name:
        raise argparse.ArgumentTypeError(f"Invalid option: {text!r}")
    return name, value if sep else True


class InfoCommand(SubcommandBase):
    name = "info"
    description = "Print the metadata gdcminfo reports for a file"

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("file", help="DICOM file to inspect")
        parser.add_argument("--json", action="store_true", help="Print as JSON")

    def run(self, args: argparse.Namespace) -> int:
        data = Package.new(args.file).info.data or {}
        if args.json:
            print(json.dumps(data, indent=2))
        else:
            for key, value in data.items():
                print(f"{key}: {value}")
        return 0


class ConvertCommand(SubcommandBase):
    name = "convert"
    description = "Convert a file with gdcmconv, leaving the input untouched"

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("input", help="Source DICOM file")
        parser.add_argument("output", help="Destination path")
        parser.add_argument(
            "-o",
            "--option",
            dest="options",
            action="append",
            type=parse_option,
            default=[],
            metavar="NAME[=VALUE]",
            help="gdcmconv option, e.g. raw or j2k (repeatable)",
        )

    def run(self, args: argparse.Namespace) -> int:
        with Package.open(args.input) as package:
            package.convert(dict(args.options))
            package.write(args.output)
        print(f"[+] Wrote {args.output}")
        return 0


class ValidateCommand(SubcommandBase):
    name = "validate"
    description = "Exit 0 if gdcminfo accepts the file, 1 otherwise"

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("file", help="DICOM file to validate")

    def run(self, args: argparse.Namespace) -> int:
        if Package.new(args.file).is_valid():
            print(f"[+] {args.file} is valid")
            return 0
        print(f"[-] {args.file} is not a valid DICOM file")
        return 1


class VersionCommand(SubcommandBase):
    name = "version"
    description = "Print the installed GDCM toolkit version"

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        pass

    def run(self, args: argparse.Namespace) -> int:
        settings = get_settings()
        location = which(settings.executable_path(settings.identify_executable))
        if location is None:
            print(f"[-] {settings.identify_executable} not found on PATH")
            return 1
        version = dicom_gdcm.cli_version()
        if version is None:
            print("[-] Could not determine GDCM version")
            return 1
        print(f"GDCM {version} ({location.parent})")
        return 0


SUBCOMMANDS: list[SubcommandBase] = [
    InfoCommand(),
    ConvertCommand(),
    ValidateCommand(),
    VersionCommand(),
]


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dicom-gdcm",
        description="Run GDCM command-line tools on DICOM files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log every executed command"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        metavar="SEC",
        help="Kill tools running longer than SEC seconds",
    )
    parser.add_argument(
        "--version", action="version", version=f"dicom-gdcm v{dicom_gdcm.__version__}"
    )
    subparsers = parser.add_subparsers(dest="subcommand", required=True)
    for subcommand in SUBCOMMANDS:
        subcommand.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(
        log_level="DEBUG" if args.verbose else settings.log_level.value,
        json_format=settings.log_format == "json",
    )
    if args.timeout is not None:
        configure(timeout=args.timeout)

    return args.command.main(args)


if __name__ == "__main__":
    sys.exit(main())
