"""Asyncio read/write lock: concurrent readers, one writer at a time."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

logger = logging.getLogger(__name__)


class AsyncRWLock:
    """Writer-preferring read/write lock built on an asyncio.Condition.

    Pending writers block new readers so a steady stream of reads cannot
    starve a cache refresh.

    Usage:
        lock = AsyncRWLock()

        async with lock.read_lock():
            value = shared["key"]

        async with lock.write_lock():
            shared["key"] = new_value
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._pending_writers = 0

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def write_locked(self) -> bool:
        return self._writer

    async def acquire_read(self) -> None:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer and self._pending_writers == 0)
            self._readers += 1

    async def release_read(self) -> None:
        async with self._cond:
            if self._readers <= 0:
                raise RuntimeError(f"release_read on unlocked rwlock {self.name!r}")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    async def acquire_write(self) -> None:
        async with self._cond:
            self._pending_writers += 1
            try:
                await self._cond.wait_for(lambda: not self._writer and self._readers == 0)
            except BaseException:
                self._pending_writers -= 1
                # readers parked behind this writer must re-check
                self._cond.notify_all()
                raise
            self._pending_writers -= 1
            self._writer = True

    async def release_write(self) -> None:
        async with self._cond:
            if not self._writer:
                raise RuntimeError(f"release_write on unlocked rwlock {self.name!r}")
            self._writer = False
            self._cond.notify_all()

    @asynccontextmanager
    async def read_lock(self) -> AsyncIterator[None]:
        await self.acquire_read()
        try:
            yield
        finally:
            await self.release_read()

    @asynccontextmanager
    async def write_lock(self) -> AsyncIterator[None]:
        await self.acquire_write()
        try:
            yield
        finally:
            await self.release_write()
