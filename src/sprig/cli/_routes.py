"""``sprig routes`` — list discovered routes.

Prints one row per route in registration order with methods, path,
route type, and the file it came from.
"""

import argparse
import os

from sprig.cli._build import build_from_args


def run_routes(args: argparse.Namespace) -> None:
    """Print a table of METHOD, PATH, TYPE, and FILE."""
    table = build_from_args(args)
    if not table.routes:
        print("No routes registered.")
        return

    rows: list[tuple[str, str, str, str]] = []
    for route in table.routes:
        file_path = route.file_path
        if file_path != "manual":
            file_path = os.path.relpath(file_path, args.routes_dir)
        rows.append((", ".join(route.methods), route.path, route.type.value, file_path))

    headers = ("METHOD", "PATH", "TYPE", "FILE")
    widths = [max(len(h), *(len(r[i]) for r in rows)) for i, h in enumerate(headers[:3])]
    fmt = f"{{:<{widths[0]}}}  {{:<{widths[1]}}}  {{:<{widths[2]}}}  {{}}"

    print(fmt.format(*headers))
    print("-" * min(sum(widths) + 6 + max(len(r[3]) for r in rows), 100))
    for row in rows:
        print(fmt.format(*row))

    stats = table.stats
    print()
    print(f"{stats.total_routes} routes from {stats.total_files} files")
