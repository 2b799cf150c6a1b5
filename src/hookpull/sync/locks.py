"""Per-path exclusive locks."""

from __future__ import annotations

import asyncio


class PathLocks:
    """Lazily created ``asyncio.Lock`` per working-copy path.

    Entries live for the process lifetime; the key space is the set of
    configured paths. Lookup and insertion happen on the event loop thread
    with no await in between, so two callers never create two locks for
    the same path.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def lock_for(self, path: str) -> asyncio.Lock:
        """Get the lock guarding ``path``, creating it on first use."""
        lock = self._locks.get(path)
        if lock is None:
            lock = self._locks[path] = asyncio.Lock()
        return lock

    def __contains__(self, path: object) -> bool:
        return path in self._locks

    def __len__(self) -> int:
        return len(self._locks)
