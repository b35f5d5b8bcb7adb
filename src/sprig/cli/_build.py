"""Shared helper: build a route table for a directory given on the command line."""

import argparse
import sys

from sprig.config import RouterConfig, check_config
from sprig.discovery import discover_routes
from sprig.routing.registry import RouteTable, build_table


def build_from_args(args: argparse.Namespace) -> RouteTable:
    """Discover and compile the routes under ``args.routes_dir``.

    Exits with status 2 when the configuration itself is unusable.
    """
    config = RouterConfig(routes_dir=args.routes_dir, base_prefix=args.prefix)
    problems = check_config(config)
    if problems:
        for problem in problems:
            print(f"Error: {problem}", file=sys.stderr)
        raise SystemExit(2)

    found = discover_routes(config)
    return build_table(
        found.definitions,
        files_scanned=found.files_scanned,
        errors=found.errors,
        verbose=False,
    )
