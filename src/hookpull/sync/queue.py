"""Bounded FIFO between request handling and update work."""

from __future__ import annotations

import asyncio

DEFAULT_CAPACITY = 3


class DispatchQueue:
    """Fixed-capacity queue of path lists.

    ``put`` waits while the queue is full and never drops an item;
    ``get`` waits while it is empty. Items come out in insertion order.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            msg = f"queue capacity must be at least 1, got {capacity}"
            raise ValueError(msg)
        self._capacity = capacity
        self._queue: asyncio.Queue[list[str]] = asyncio.Queue(maxsize=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    async def put(self, paths: list[str]) -> None:
        """Enqueue one dispatch item, waiting for a free slot."""
        await self._queue.put(list(paths))

    async def get(self) -> list[str]:
        """Dequeue the oldest dispatch item, waiting for one to arrive."""
        item = await self._queue.get()
        self._queue.task_done()
        return item

    def qsize(self) -> int:
        return self._queue.qsize()

    def full(self) -> bool:
        return self._queue.full()

    def empty(self) -> bool:
        return self._queue.empty()
