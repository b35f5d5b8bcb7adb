"""``sprig check`` — report problems in a routes directory.

Prints malformed patterns and unloadable files as errors and ambiguous
routes as warnings. Exits with code 1 if any error is found; warnings
alone do not fail the check.
"""

import argparse
import sys

from sprig.cli._build import build_from_args


def run_check(args: argparse.Namespace) -> None:
    """Build the table and print every error and warning found."""
    table = build_from_args(args)

    for error in table.errors:
        print(f"error: {error}")
    for warning in table.warnings:
        print(f"warning: {warning}")

    print(
        f"{len(table.routes)} routes, {len(table.errors)} errors, "
        f"{len(table.warnings)} warnings"
    )
    if table.errors:
        sys.exit(1)
