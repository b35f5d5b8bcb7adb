"""Immutable query string parameters."""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qsl


class QueryParams(Mapping[str, str]):
    """Parsed query string. ``params[key]`` is the first value.

    Blank values are kept (``?flag=`` gives ``{"flag": ""}``).
    """

    __slots__ = ("_items", "_raw")

    _items: tuple[tuple[str, str], ...]
    _raw: bytes

    def __init__(self, query_string: bytes = b"") -> None:
        object.__setattr__(self, "_raw", query_string)
        items = parse_qsl(query_string.decode("latin-1"), keep_blank_values=True)
        object.__setattr__(self, "_items", tuple(items))

    def __getitem__(self, key: str) -> str:
        for name, value in self._items:
            if name == key:
                return value
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._items))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._items))

    def __repr__(self) -> str:
        return f"QueryParams({dict(self)!r})"

    @property
    def raw(self) -> bytes:
        return self._raw

    def get_list(self, key: str) -> list[str]:
        """All values for *key*."""
        return [value for name, value in self._items if name == key]

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """The value as an int, or *default* if missing or not numeric."""
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default
