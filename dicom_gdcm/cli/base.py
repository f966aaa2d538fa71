"""Base class for CLI subcommands.

Provides common patterns for argument parsing and error handling.
"""

from __future__ import annotations

import argparse
import sys
import traceback
from abc import ABC, abstractmethod

from dicom_gdcm.core.exceptions import GdcmError


class SubcommandBase(ABC):
    """Abstract base class for CLI subcommands.

    Example:
        class InfoCommand(SubcommandBase):
            name = "info"
            description = "Print metadata"

            def configure_parser(self, parser):
                parser.add_argument("file")

            def run(self, args):
                print(Package.new(args.file).info.data)
                return 0

    """

    name: str
    description: str

    @abstractmethod
    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        """Add arguments to the parser."""
        ...

    @abstractmethod
    def run(self, args: argparse.Namespace) -> int:
        """Execute the command.

        Returns:
            Exit code: 0 for success, 1 for failure.

        """
        ...

    def register(self, subparsers: argparse._SubParsersAction) -> None:
        parser = subparsers.add_parser(
            self.name, help=self.description, description=self.description
        )
        self.configure_parser(parser)
        parser.set_defaults(command=self)

    def main(self, args: argparse.Namespace) -> int:
        """Run with GDCM errors reported on stderr."""
        try:
            return self.run(args)
        except (GdcmError, OSError) as e:
            print(f"[-] {self.name} failed: {e}", file=sys.stderr)
            if getattr(args, "verbose", False):
                traceback.print_exc()
            return 1
