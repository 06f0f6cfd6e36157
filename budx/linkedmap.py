"""An insertion-ordered, thread-safe mapping."""

from __future__ import annotations

import threading
from typing import Any, Hashable, Iterator


class LinkedMap:
    """Mapping that remembers the order in which keys were first appended.

    Re-appending an existing key replaces its value but keeps its position.
    All operations are guarded by a lock so the map can be shared between
    threads.
    """

    def __init__(self) -> None:
        self._data: dict[Hashable, Any] = {}
        self._lock = threading.RLock()

    def append(self, key: Hashable, value: Any) -> bool:
        """Store ``value`` under ``key``; new keys go to the end."""
        with self._lock:
            self._data[key] = value
        return True

    def remove(self, key: Hashable) -> bool:
        """Remove ``key``; return whether it was present."""
        with self._lock:
            if key not in self._data:
                return False
            del self._data[key]
            return True

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the value for ``key`` or ``default`` if it is absent."""
        with self._lock:
            return self._data.get(key, default)

    def items(self) -> list[tuple[Hashable, Any]]:
        """Return a snapshot of the ``(key, value)`` pairs in order."""
        with self._lock:
            return list(self._data.items())

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __iter__(self) -> Iterator[Hashable]:
        with self._lock:
            keys = list(self._data)
        return iter(keys)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __repr__(self) -> str:
        return f"LinkedMap({self.items()!r})"