"""Tests for whatsapp_relay.channel (BatchChannel)."""

from __future__ import annotations

import asyncio

import pytest

from whatsapp_relay.channel import BatchChannel
from whatsapp_relay.models import NotificationBatch


def _batch(mode: str = "notify") -> NotificationBatch:
    return NotificationBatch(type=mode, messages=[])


class TestBatchChannel:
    @pytest.mark.asyncio
    async def test_fifo_order(self):
        channel = BatchChannel()
        first, second = _batch("notify"), _batch("append")
        await channel.put(first)
        await channel.put(second)

        assert channel.qsize() == 2
        assert await channel.get() is first
        assert channel.get_nowait() is second
        assert channel.empty()

    @pytest.mark.asyncio
    async def test_bounded_put_waits_when_full(self):
        channel = BatchChannel(max_size=1)
        await channel.put(_batch())

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(channel.put(_batch()), timeout=0.05)
        assert channel.qsize() == 1

    @pytest.mark.asyncio
    async def test_bounded_put_resumes_after_get(self):
        channel = BatchChannel(max_size=1)
        await channel.put(_batch())
        pending_put = asyncio.create_task(channel.put(_batch("append")))
        await asyncio.sleep(0)
        assert not pending_put.done()

        await channel.get()
        await asyncio.wait_for(pending_put, timeout=0.5)
        assert channel.qsize() == 1

    @pytest.mark.asyncio
    async def test_unbounded_by_default(self):
        channel = BatchChannel()
        for _ in range(100):
            await channel.put(_batch())
        assert channel.qsize() == 100

    @pytest.mark.asyncio
    async def test_join_waits_for_task_done(self):
        channel = BatchChannel()
        await channel.put(_batch())
        await channel.get()

        join = asyncio.create_task(channel.join())
        await asyncio.sleep(0)
        assert not join.done()

        channel.task_done()
        await asyncio.wait_for(join, timeout=0.5)
