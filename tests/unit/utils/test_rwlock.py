"""Unit tests for the asyncio read/write lock."""
import asyncio

import pytest

from unified_replication.utils.rwlock import AsyncRWLock


class TestAsyncRWLock:
    @pytest.mark.asyncio
    async def test_readers_share_the_lock(self):
        lock = AsyncRWLock("test")
        entered = asyncio.Event()

        async def reader():
            async with lock.read_lock():
                if lock.readers == 3:
                    entered.set()
                await asyncio.wait_for(entered.wait(), 1)

        await asyncio.gather(reader(), reader(), reader())
        assert lock.readers == 0

    @pytest.mark.asyncio
    async def test_writer_excludes_readers(self):
        lock = AsyncRWLock()
        order = []

        await lock.acquire_write()

        async def reader():
            async with lock.read_lock():
                order.append("read")

        task = asyncio.ensure_future(reader())
        await asyncio.sleep(0.01)
        assert order == []
        assert lock.write_locked

        order.append("write-done")
        await lock.release_write()
        await task
        assert order == ["write-done", "read"]

    @pytest.mark.asyncio
    async def test_pending_writer_blocks_new_readers(self):
        lock = AsyncRWLock()
        order = []

        await lock.acquire_read()

        async def writer():
            async with lock.write_lock():
                order.append("write")

        async def reader():
            async with lock.read_lock():
                order.append("read")

        write_task = asyncio.ensure_future(writer())
        await asyncio.sleep(0.01)
        read_task = asyncio.ensure_future(reader())
        await asyncio.sleep(0.01)
        assert order == []

        await lock.release_read()
        await asyncio.gather(write_task, read_task)
        assert order == ["write", "read"]

    @pytest.mark.asyncio
    async def test_cancelled_writer_releases_waiting_readers(self):
        lock = AsyncRWLock()
        await lock.acquire_read()

        write_task = asyncio.ensure_future(lock.acquire_write())
        await asyncio.sleep(0.01)
        read_task = asyncio.ensure_future(lock.acquire_read())
        await asyncio.sleep(0.01)
        assert not read_task.done()

        write_task.cancel()
        await asyncio.wait_for(read_task, 1)
        assert lock.readers == 2

    @pytest.mark.asyncio
    async def test_release_without_acquire(self):
        lock = AsyncRWLock("idle")
        with pytest.raises(RuntimeError):
            await lock.release_read()
        with pytest.raises(RuntimeError):
            await lock.release_write()
