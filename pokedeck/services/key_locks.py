"""
Per-key async locks.

Serializes read-modify-write sequences on a single deck or collection
entry within this process, while unrelated keys proceed concurrently.
Locks are created on demand and dropped once nobody holds or waits on
them, so the registry does not grow with the number of decks.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)


class KeyedLocks:
    """A registry of asyncio locks, one per key."""

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        """Hold the lock for `key` for the duration of the block."""
        if self.is_locked(key):
            logger.debug("Waiting for lock on %r", key)

        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._users[key] = self._users.get(key, 0) + 1

        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def is_locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
