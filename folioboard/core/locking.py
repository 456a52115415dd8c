"""
FILE: folioboard/core/locking.py
PURPOSE: Single-writer-per-board lock registry
EXPORTS:
  - BoardLocks
DEPENDENCIES:
  - asyncio (stdlib)
NOTES:
  - Each mutation holds its board's lock across read -> compute -> write
  - Only serializes writers sharing the same registry (same process);
    services built from one Board facade share one registry
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Dict, Hashable


class BoardLocks:
    """Lazily created asyncio.Lock per board key."""

    def __init__(self):
        self._locks: Dict[Hashable, asyncio.Lock] = {}

    def lock_for(self, key: Hashable) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, key: Hashable):
        """Hold the writer lock for one board."""
        async with self.lock_for(key):
            yield

    def is_locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()
