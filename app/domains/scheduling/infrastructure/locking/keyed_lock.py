"""
Keyed Lock Registry

In-process asyncio locks, one per key (e.g. a slot id).
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager

from app.domains.scheduling.application.ports.services import ILockRegistry

logger = logging.getLogger(__name__)


class KeyedLockRegistry(ILockRegistry):
    """
    Per-key asyncio locks.

    Locks are created on first use and dropped once nobody holds or waits
    for them, so the registry does not grow with the number of slots ever booked.
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}
        self._global_lock = asyncio.Lock()

    async def _acquire_ref(self, key: Hashable) -> asyncio.Lock:
        """Get or create the lock for a key and register one user."""
        async with self._global_lock:
            if key not in self._locks:
                self._locks[key] = asyncio.Lock()
            self._users[key] = self._users.get(key, 0) + 1
            return self._locks[key]

    async def _release_ref(self, key: Hashable) -> None:
        async with self._global_lock:
            remaining = self._users.get(key, 1) - 1
            if remaining <= 0:
                self._users.pop(key, None)
                self._locks.pop(key, None)
            else:
                self._users[key] = remaining

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = await self._acquire_ref(key)
        try:
            async with lock:
                yield
        finally:
            await self._release_ref(key)

    def __len__(self) -> int:
        return len(self._locks)


_lock_registry: KeyedLockRegistry | None = None


def get_lock_registry() -> KeyedLockRegistry:
    """Process-wide registry shared by every request."""
    global _lock_registry
    if _lock_registry is None:
        _lock_registry = KeyedLockRegistry()
    return _lock_registry
