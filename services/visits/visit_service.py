"""
Visit Service - per-request counter increments
"""

import asyncio

from redis_client import CacheClient
from utils.errors import CacheUnavailableError
from utils.logger import logger

GREETING = "Hello 🚀 Visits: {visits}"


def format_greeting(visits: int) -> str:
    return GREETING.format(visits=visits)


class VisitService:
    """
    Records one visit per call by incrementing a single cache key

    Every caller shares the same CacheClient. A call that gets no answer
    within `timeout` seconds fails with CacheUnavailableError instead of
    waiting on the store.
    """

    def __init__(self, cache: CacheClient, key: str = "visits", timeout: float = 5.0):
        self.cache = cache
        self.key = key
        self.timeout = timeout

    async def record_visit(self) -> int:
        """Increment the visit counter and return its new value"""
        try:
            visits = await asyncio.wait_for(self.cache.incr(self.key), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise CacheUnavailableError(
                f"INCR {self.key} got no reply within {self.timeout}s", e
            ) from e

        logger.debug(f"Visit recorded: {self.key}={visits}")
        return visits
