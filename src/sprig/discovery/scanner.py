"""Filesystem scanning for route files.

Walks a routes directory and lists the files that define routes. The
file's path relative to the routes directory *is* its URL::

    routes/api/users/index.py            -> /api/users
    routes/api/users/[id].py             -> /api/users/[id]
    routes/api/users/[id]/profile.py     -> /api/users/[id]/profile
    routes/api/products/[...segments].py -> /api/products/[...segments]

Names starting with ``_`` or ``.`` are private (helpers, ``__init__.py``,
``__pycache__``) and never become routes.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from fnmatch import fnmatch
from pathlib import Path, PurePosixPath

from sprig.routing.pattern import normalize_path

DEFAULT_EXTENSIONS: tuple[str, ...] = (".py",)
DEFAULT_IGNORE: tuple[str, ...] = ("test_*.py", "*_test.py", "conftest.py")


@dataclass(frozen=True, slots=True)
class RouteFile:
    """A route file found on disk.

    Attributes:
        file_path: Absolute path to the file.
        relative_path: Path relative to the routes directory, ``/``-separated.
        file_name: File name without extension.
        directory: Relative directory, ``"."`` for the root.
        last_modified: Modification time (UTC).
        size: File size in bytes.
    """

    file_path: str
    relative_path: str
    file_name: str
    directory: str
    last_modified: datetime
    size: int


def scan_routes(
    base_dir: str | Path,
    *,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    ignore: tuple[str, ...] = DEFAULT_IGNORE,
) -> list[RouteFile]:
    """List route files under *base_dir* in a stable, sorted order.

    Raises:
        FileNotFoundError: If *base_dir* is not a directory.
    """
    root = Path(base_dir).resolve()
    if not root.is_dir():
        raise FileNotFoundError(f"Routes directory does not exist: {root}")

    files: list[RouteFile] = []
    _walk(root, root, extensions=extensions, ignore=ignore, files=files)
    return files


def _walk(
    directory: Path,
    root: Path,
    *,
    extensions: tuple[str, ...],
    ignore: tuple[str, ...],
    files: list[RouteFile],
) -> None:
    entries = sorted(directory.iterdir(), key=lambda p: p.name)

    for item in entries:
        if item.is_file() and _is_route_file(item, root, extensions, ignore):
            stat = item.stat()
            relative = item.relative_to(root)
            files.append(
                RouteFile(
                    file_path=str(item),
                    relative_path=relative.as_posix(),
                    file_name=item.stem,
                    directory=relative.parent.as_posix(),
                    last_modified=datetime.fromtimestamp(stat.st_mtime, UTC),
                    size=stat.st_size,
                )
            )

    for item in entries:
        if not item.is_dir():
            continue
        if item.name.startswith(("_", ".")):
            continue
        _walk(item, root, extensions=extensions, ignore=ignore, files=files)


def _is_route_file(
    item: Path,
    root: Path,
    extensions: tuple[str, ...],
    ignore: tuple[str, ...],
) -> bool:
    if item.suffix not in extensions:
        return False
    if item.name.startswith(("_", ".")):
        return False
    relative = item.relative_to(root).as_posix()
    return not any(fnmatch(item.name, pat) or fnmatch(relative, pat) for pat in ignore)


def route_path_from_file(relative_path: str, base_prefix: str = "") -> str:
    """Turn a relative route file path into a bracket-notation route.

    ``index`` files map to their directory. The result is normalized and
    prefixed with *base_prefix*.
    """
    posix = PurePosixPath(relative_path.replace("\\", "/"))
    parts = list(posix.with_suffix("").parts) if posix.suffix else list(posix.parts)
    if parts and parts[-1] == "index":
        parts.pop()
    return normalize_path(f"{base_prefix}/{'/'.join(parts)}")
