import asyncio
import datetime as dt
import weakref
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager


class DateLocks:
    """Per-date ``asyncio.Lock`` registry serializing check-then-write on one day.

    Locks live in a ``WeakValueDictionary`` and disappear once no coroutine
    holds or waits on them.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[dt.date, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, date: dt.date) -> asyncio.Lock:
        lock = self._locks.get(date)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[date] = lock
        return lock

    @asynccontextmanager
    async def hold(self, *dates: dt.date) -> AsyncIterator[None]:
        """Hold the locks of every given date, acquired in ascending order."""
        locks = [self._lock_for(date) for date in sorted(set(dates))]
        async with AsyncExitStack() as stack:
            for lock in locks:
                await stack.enter_async_context(lock)
            yield
