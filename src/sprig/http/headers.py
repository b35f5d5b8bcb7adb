"""Immutable, case-insensitive request headers.

Built from the raw ASGI byte pairs; names are lower-cased and values
decoded as latin-1 once, at construction.
"""

from collections.abc import Iterator, Mapping


class Headers(Mapping[str, str]):
    """Read-only header mapping.

    ``headers["Content-Type"]`` returns the first value; ``get_list``
    returns every value sent under a name.
    """

    __slots__ = ("_pairs",)

    _pairs: tuple[tuple[str, str], ...]

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        pairs = tuple(
            (name.decode("latin-1").lower(), value.decode("latin-1")) for name, value in raw
        )
        object.__setattr__(self, "_pairs", pairs)

    def __getitem__(self, key: str) -> str:
        wanted = key.lower()
        for name, value in self._pairs:
            if name == wanted:
                return value
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._pairs))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._pairs))

    def __repr__(self) -> str:
        return f"Headers({dict(self)!r})"

    def get_list(self, key: str) -> list[str]:
        """Every value for *key*, in arrival order."""
        wanted = key.lower()
        return [value for name, value in self._pairs if name == wanted]
