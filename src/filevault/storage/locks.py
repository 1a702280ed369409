"""Per-logical-path mutual exclusion.

Read-modify-write sequences on one logical path (replace, rollback, delete,
snapshot minting) hold that path's lock for their whole duration. Locks are
in-process only; an entry is dropped once no holder or waiter remains.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class PathLockRegistry:
    """Hands out one threading.Lock per normalized logical path."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[str, _LockEntry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, logical_path: str) -> Iterator[None]:
        """Hold the lock for logical_path until the block exits."""
        with self._guard:
            entry = self._entries.get(logical_path)
            if entry is None:
                entry = _LockEntry()
                self._entries[logical_path] = entry
            entry.users += 1

        entry.lock.acquire()
        try:
            yield
        finally:
            entry.lock.release()
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[logical_path]
