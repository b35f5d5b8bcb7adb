"""Router configuration.

RouterConfig is a frozen dataclass: immutable after creation, one typed
field per setting, no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(routes_dir="src/routes", base_prefix="/api")
    """

    # Discovery
    routes_dir: str | Path = "routes"
    extensions: tuple[str, ...] = (".py",)
    ignore: tuple[str, ...] = ("test_*.py", "*_test.py", "conftest.py")
    base_prefix: str = ""

    # Logging: gates info lines; warnings and errors always log
    enable_logging: bool = True

    # Request pipeline
    validate_params: bool = True
    handle_404: bool = True
    not_found_message: str | None = None
    health_path: str | None = None  # e.g. "/health"

    # Include exception details in 500 bodies
    debug: bool = False


def check_config(config: RouterConfig) -> list[str]:
    """Return human-readable problems with *config*; empty means usable."""
    problems: list[str] = []

    if not str(config.routes_dir).strip():
        problems.append("routes_dir is empty")
    else:
        routes_dir = Path(config.routes_dir)
        if not routes_dir.exists():
            problems.append(f"routes_dir does not exist: {routes_dir}")
        elif not routes_dir.is_dir():
            problems.append(f"routes_dir is not a directory: {routes_dir}")

    if not config.extensions:
        problems.append("extensions is empty; no file can be a route")
    for ext in config.extensions:
        if not ext.startswith("."):
            problems.append(f"extension {ext!r} must start with '.'")

    if config.base_prefix and not config.base_prefix.startswith("/"):
        problems.append(f"base_prefix {config.base_prefix!r} must start with '/'")
    if config.health_path is not None and not config.health_path.startswith("/"):
        problems.append(f"health_path {config.health_path!r} must start with '/'")

    return problems
