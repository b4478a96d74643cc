"""
Bounded concurrency for adapter invocations.
"""

import asyncio
from typing import Optional


class ConcurrencyLimiter:
    """
    Async context manager that caps simultaneous adapter calls.

    Only adapter invocations hold a permit; traversal tasks never do, so a
    recursive fan-out cannot deadlock waiting on permits held by its parents.
    A limit of None leaves calls unbounded.
    """

    def __init__(self, limit: Optional[int] = None) -> None:
        if limit is not None and limit < 1:
            raise ValueError("Concurrency limit must be at least 1")
        self.limit = limit
        self._semaphore = asyncio.Semaphore(limit) if limit else None
        self._active = 0
        self.peak = 0

    @property
    def active(self) -> int:
        return self._active

    async def __aenter__(self) -> "ConcurrencyLimiter":
        if self._semaphore is not None:
            await self._semaphore.acquire()
        self._active += 1
        self.peak = max(self.peak, self._active)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self._active -= 1
        if self._semaphore is not None:
            self._semaphore.release()
