"""Simple set containers with chaining mutators."""

from __future__ import annotations

from typing import Any, Hashable, Iterator


class Set:
    """A set of arbitrary hashable values; ``None`` is never stored."""

    def __init__(self, *args: Hashable) -> None:
        self._items: dict[Hashable, None] = {}
        self.union(*args)

    def add(self, value: Hashable) -> "Set":
        if value is not None:
            self._items[value] = None
        return self

    def remove(self, value: Hashable) -> "Set":
        self._items.pop(value, None)
        return self

    def union(self, *args: Hashable) -> "Set":
        for value in args:
            self.add(value)
        return self

    def __contains__(self, value: object) -> bool:
        if value is None:
            return False
        return value in self._items

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Set):
            return NotImplemented
        return self._items.keys() == other._items.keys()

    def __repr__(self) -> str:
        return f"Set({', '.join(map(repr, self._items))})"


class StringSet:
    """A set of strings; the empty string is never stored."""

    def __init__(self, *args: str) -> None:
        self._items: dict[str, None] = {}
        self.union(*args)

    def add(self, item: str) -> "StringSet":
        if not isinstance(item, str):
            raise TypeError(f"StringSet items must be str, not {type(item).__name__}")
        if item:
            self._items[item] = None
        return self

    def remove(self, item: str) -> "StringSet":
        self._items.pop(item, None)
        return self

    def union(self, *args: str) -> "StringSet":
        for item in args:
            self.add(item)
        return self

    def subtract(self, *args: str) -> "StringSet":
        for item in args:
            self.remove(item)
        return self

    def to_list(self) -> list[str]:
        return list(self._items)

    def __contains__(self, item: object) -> bool:
        if not item:
            return False
        return item in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StringSet):
            return NotImplemented
        return self._items.keys() == other._items.keys()

    def __repr__(self) -> str:
        return f"StringSet({', '.join(map(repr, self._items))})"


class IntSet:
    """A set of integers; anything that is not an int is stored as 0."""

    def __init__(self, *args: Any) -> None:
        self._items: dict[int, None] = {}
        for item in args:
            self.add(item)

    def add(self, item: Any) -> "IntSet":
        if not isinstance(item, int) or isinstance(item, bool):
            item = 0
        self._items[item] = None
        return self

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"IntSet({', '.join(map(repr, self._items))})"