"""Background consumer that drains the dispatch queue."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hookpull.sync.puller import UpdateWorker
    from hookpull.sync.queue import DispatchQueue

logger = logging.getLogger(__name__)


class Dispatcher:
    """Single consumer of the dispatch queue.

    Each dequeued item is handed to the update worker in its own task, so
    a slow pull never keeps the consumer from taking the next item.
    Start order follows queue order; completion order does not.
    """

    def __init__(self, queue: DispatchQueue, worker: UpdateWorker) -> None:
        """Initialize dispatcher.

        Args:
            queue: Queue of path lists to drain.
            worker: Update worker applying each dequeued item.
        """
        self._queue = queue
        self._worker = worker
        self._task: asyncio.Task[None] | None = None
        self._inflight: set[asyncio.Task[object]] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def inflight(self) -> int:
        """Number of dispatch items currently being processed."""
        return len(self._inflight)

    async def _consume(self) -> None:
        while True:
            paths = await self._queue.get()
            logger.debug("Dispatching %d path(s): %s", len(paths), ", ".join(paths))
            task = asyncio.create_task(self._worker.process(paths))
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    async def start(self) -> None:
        """Start the consumer task."""
        if self.running:
            return
        self._task = asyncio.create_task(self._consume())
        logger.info("Dispatcher started (queue capacity: %d)", self._queue.capacity)

    async def join(self) -> None:
        """Wait until the queue is empty and every taken item has finished."""
        while not self._queue.empty() or self._inflight:
            if self._inflight:
                await asyncio.wait(set(self._inflight))
            else:
                await asyncio.sleep(0)

    async def stop(self) -> None:
        """Stop consuming and wait for items already taken to finish.

        Items still in the queue are dropped.
        """
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self._inflight:
            await asyncio.wait(set(self._inflight))
        logger.info("Dispatcher stopped")
