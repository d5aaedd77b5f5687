"""Per-dashboard locks serializing import runs within one process."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import AsyncIterator, DefaultDict


class DashboardLocks:
    """Hand out one :class:`asyncio.Lock` per dashboard id."""

    def __init__(self) -> None:
        self._locks: DefaultDict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    def locked(self, dashboard_id: int) -> bool:
        return dashboard_id in self._locks and self._locks[dashboard_id].locked()

    @asynccontextmanager
    async def hold(self, dashboard_id: int) -> AsyncIterator[None]:
        lock = self._locks[dashboard_id]
        async with lock:
            yield


__all__ = ["DashboardLocks"]
