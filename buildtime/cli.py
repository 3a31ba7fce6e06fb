# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
buildtime CLI entry point.

Provides command-line interface for compile timing extraction.
"""

import sys
from importlib.metadata import PackageNotFoundError, version

import click

from buildtime.scan.cli import scan_command


def _get_package_version() -> str:
    """Get package version from metadata."""
    try:
        return version("buildtime-analyzer")
    except PackageNotFoundError:
        return "0+unknown"


EXAMPLES = """
Examples:
  buildtime scan build.xcactivitylog
  buildtime scan build.log --top 20 --format json
  buildtime scan ~/Library/Developer/Xcode/DerivedData --product MyApp
"""


@click.group(epilog=EXAMPLES)
@click.version_option(version=_get_package_version(), prog_name="buildtime")
def main() -> None:
    """buildtime: find the slowest-compiling code in a build log."""
    pass


# Register subcommands
main.add_command(scan_command)


if __name__ == "__main__":
    sys.exit(main())
