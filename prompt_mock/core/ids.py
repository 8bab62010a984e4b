"""Identifier allocation for mock entities."""

from __future__ import annotations

import threading
from collections.abc import Iterable


class IdAllocator:
    """Hands out ``{prefix}_{n}`` ids with one counter per prefix.

    Ids registered through :meth:`reserve` (seed data, fixtures) are never
    handed out again.
    """

    def __init__(self) -> None:
        self._counters: dict[str, int] = {}
        self._taken: set[str] = set()
        self._lock = threading.Lock()

    def next(self, prefix: str) -> str:
        """Allocate the next free id for ``prefix``."""
        with self._lock:
            counter = self._counters.get(prefix, 0)
            while True:
                counter += 1
                candidate = f"{prefix}_{counter}"
                if candidate not in self._taken:
                    break
            self._counters[prefix] = counter
            self._taken.add(candidate)
            return candidate

    def reserve(self, ids: str | Iterable[str]) -> None:
        """Mark externally supplied ids as taken."""
        if isinstance(ids, str):
            ids = [ids]
        with self._lock:
            self._taken.update(ids)

    def is_taken(self, id: str) -> bool:
        return id in self._taken

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._taken.clear()
