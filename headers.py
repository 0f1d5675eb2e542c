"""Ordered header collection with case-insensitive lookup."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Header:
    name: str
    value: str


class Headers:
    """Insertion-ordered headers; duplicates allowed, lookup returns the first match."""

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[Header | tuple[str, str]] = ()) -> None:
        self._items: list[Header] = []
        for item in items:
            if isinstance(item, Header):
                self._items.append(item)
            else:
                self.add(*item)

    def add(self, name: str, value: str) -> None:
        self._items.append(Header(name=name, value=value))

    def get(self, name: str, default: str | None = None) -> str | None:
        wanted = name.lower()
        for header in self._items:
            if header.name.lower() == wanted:
                return header.value
        return default

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return self.get(name) is not None

    def __iter__(self) -> Iterator[Header]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        pairs = ", ".join(f"{h.name}={h.value!r}" for h in self._items)
        return f"Headers({pairs})"
