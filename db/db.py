import asyncio
from typing import Optional, Union

from sqlalchemy import text
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from utils.errors import DatabaseUnavailableError
from utils.logger import logger


class RelationalClient:
    """
    Owns the async engine for the relational store

    No schema or query is used beyond the readiness probe.
    """

    def __init__(
        self,
        url: Union[str, URL],
        echo: bool = False,
        engine: Optional[AsyncEngine] = None,
    ):
        self.url = url
        if engine is None:
            engine = create_async_engine(
                url,
                echo=echo,
                pool_size=5,
                max_overflow=10,
                pool_pre_ping=True  # Verify connections before use
            )
        self.engine = engine

    @property
    def safe_url(self) -> str:
        if isinstance(self.url, URL):
            return self.url.render_as_string(hide_password=True)
        return str(self.url)

    async def _probe(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def connect(self) -> None:
        """Run one probe query; raises DatabaseUnavailableError on failure"""
        try:
            await self._probe()
        except (SQLAlchemyError, OSError) as e:
            raise DatabaseUnavailableError(f"Cannot reach database at {self.safe_url}: {type(e).__name__}", e) from e
        logger.info(f"✅ PostgreSQL connection successful ({self.safe_url})")

    async def ping(self, timeout: Optional[float] = None) -> bool:
        """Report whether the probe succeeds within timeout; never raises"""
        try:
            await asyncio.wait_for(self._probe(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Database ping got no reply within {timeout}s")
            return False
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Database ping failed: {type(e).__name__}")
            return False

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")
