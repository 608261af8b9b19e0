"""
Redis cache client - atomic counters over a shared connection pool
"""

import asyncio
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from utils.errors import CacheUnavailableError
from utils.logger import CredentialLogFilter, logger


class CacheClient:
    """
    Thin wrapper around one redis.asyncio client

    The underlying client owns a connection pool that every request
    shares; INCR atomicity is provided by Redis itself.
    """

    def __init__(
        self,
        url: str,
        socket_timeout: Optional[float] = None,
        client: Optional[redis.Redis] = None,
    ):
        self.url = url
        if client is None:
            client = redis.from_url(
                url,
                decode_responses=True,
                socket_timeout=socket_timeout,
                socket_connect_timeout=socket_timeout,
            )
        self._client = client

    @property
    def safe_url(self) -> str:
        return CredentialLogFilter.filter_sensitive_data(self.url)

    async def connect(self) -> None:
        """Confirm the server answers; raises CacheUnavailableError otherwise"""
        try:
            await self._client.ping()
        except (RedisError, OSError) as e:
            raise CacheUnavailableError(f"Cannot reach cache at {self.safe_url}: {e}", e) from e
        logger.info(f"✅ Cache connection successful ({self.safe_url})")

    async def incr(self, key: str) -> int:
        """Increment the integer at key by one and return the new value"""
        try:
            value = await self._client.incr(key)
        except (RedisError, OSError) as e:
            raise CacheUnavailableError(f"INCR {key} failed: {e}", e) from e
        return int(value)

    async def ping(self, timeout: Optional[float] = None) -> bool:
        """Report whether the server answers within timeout; never raises"""
        try:
            return bool(await asyncio.wait_for(self._client.ping(), timeout=timeout))
        except asyncio.TimeoutError:
            logger.warning(f"Cache ping got no reply within {timeout}s")
            return False
        except (RedisError, OSError) as e:
            logger.warning(f"Cache ping failed: {type(e).__name__}")
            return False

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("Cache connection closed")
