"""Batch channel: the queue between the transport and the coordinator."""

from __future__ import annotations

import asyncio

from .models import NotificationBatch


class BatchChannel:
    """FIFO of notification batches.

    Transports :meth:`put` batches; the ingestion coordinator consumes them.
    With a positive *max_size*, ``put`` waits while the channel is full,
    which pushes back on the transport.
    """

    def __init__(self, max_size: int = 0) -> None:
        self._queue: asyncio.Queue[NotificationBatch] = asyncio.Queue(maxsize=max_size)

    async def put(self, batch: NotificationBatch) -> None:
        await self._queue.put(batch)

    async def get(self) -> NotificationBatch:
        return await self._queue.get()

    def get_nowait(self) -> NotificationBatch:
        return self._queue.get_nowait()

    def task_done(self) -> None:
        self._queue.task_done()

    async def join(self) -> None:
        """Wait until every batch put on the channel has been processed."""
        await self._queue.join()

    def qsize(self) -> int:
        return self._queue.qsize()

    def empty(self) -> bool:
        return self._queue.empty()
