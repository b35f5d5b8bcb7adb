"""Sprig CLI — inspect and check a routes directory.

Entry point registered as ``sprig`` in ``pyproject.toml``::

    [project.scripts]
    sprig = "sprig.cli:main"
"""

import argparse
import logging
import sys


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("routes_dir", metavar="DIR", help="Routes directory to scan")
    parser.add_argument("--prefix", default="", help="Prefix prepended to every route")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``sprig`` command."""
    parser = argparse.ArgumentParser(
        prog="sprig",
        description="Sprig — file-based routing for ASGI applications.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- sprig routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List discovered routes")
    _add_common(routes_parser)

    # -- sprig check ------------------------------------------------------
    check_parser = subparsers.add_parser(
        "check", help="Report malformed, unloadable, and ambiguous routes"
    )
    _add_common(check_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "routes":
        from sprig.cli._routes import run_routes

        run_routes(args)
    elif args.command == "check":
        from sprig.cli._check import run_check

        run_check(args)
