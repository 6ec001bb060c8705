"""Request headers as the exchange handler reads them.

Names are folded to lower case once, when the ASGI scope is read. A
repeated header keeps its first value: the allow-list check compares
exactly one ``Origin`` and ignores any that follow.
"""

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Read-only, case-insensitive view of one request's headers."""

    __slots__ = ("_first",)

    def __init__(self, raw: Iterable[tuple[bytes, bytes]] = ()) -> None:
        first: dict[str, str] = {}
        for name, value in raw:
            first.setdefault(name.decode("latin-1").lower(), value.decode("latin-1"))
        self._first = first

    @classmethod
    def from_pairs(cls, pairs: Mapping[str, str]) -> "Headers":
        """Headers for a synthetic request, from ``{name: value}``."""
        return cls((k.encode("latin-1"), v.encode("latin-1")) for k, v in pairs.items())

    def __getitem__(self, key: str) -> str:
        return self._first[key.lower()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._first

    def __iter__(self) -> Iterator[str]:
        return iter(self._first)

    def __len__(self) -> int:
        return len(self._first)

    def __repr__(self) -> str:
        return f"Headers({self._first!r})"
