from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class SeasonLockRegistry:
    """One asyncio lock per season key.

    Holders serialize "mutate match, recompute ranking" for a season while
    other seasons proceed independently. A season's lock exists only while
    some task holds or waits for it.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._claims: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def is_locked(self, season: str) -> bool:
        lock = self._locks.get(season)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, season: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(season, asyncio.Lock())
        self._claims[season] = self._claims.get(season, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._claims[season] -= 1
            if self._claims[season] == 0:
                del self._claims[season]
                del self._locks[season]
