from contextlib import AsyncExitStack, asynccontextmanager
from typing import Optional
import asyncio

from fastapi import FastAPI
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_fixed
import uvicorn

# Use centralized configuration
from config.settings import Settings, get_settings
from db.db import RelationalClient
from redis_client import CacheClient
from services.visits import VisitService
from utils.errors import BackendUnavailableError
from utils.logger import logger


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception()
    logger.warning(
        f"Attempt {retry_state.attempt_number} failed ({type(error).__name__}: {error}), "
        f"retrying in {retry_state.next_action.sleep}s"
    )


async def connect_with_retry(name: str, connect, settings: Settings) -> None:
    """
    Await one backing-store connect, retrying per the startup settings

    Each attempt is bounded by STARTUP_TIMEOUT; the last failure propagates.
    """
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(settings.STARTUP_RETRIES),
        wait=wait_fixed(settings.STARTUP_RETRY_WAIT),
        retry=retry_if_exception_type((BackendUnavailableError, asyncio.TimeoutError)),
        before_sleep=_log_retry,
        reraise=True,
    ):
        with attempt:
            logger.info(f"Connecting to {name} (attempt {attempt.retry_state.attempt_number}/{settings.STARTUP_RETRIES})")
            await asyncio.wait_for(connect(), timeout=settings.STARTUP_TIMEOUT)


def create_app(
    settings: Optional[Settings] = None,
    cache_client: Optional[CacheClient] = None,
    relational_client: Optional[RelationalClient] = None,
) -> FastAPI:
    """
    Build the visit counter application

    Clients passed in are used as-is; missing ones are built from settings
    when the lifespan starts. Both are connected before the first request
    is served and closed on shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        relational = relational_client or RelationalClient(**settings.get_database_config())
        cache = cache_client or CacheClient(settings.REDIS_URL, socket_timeout=settings.CACHE_TIMEOUT)

        async with AsyncExitStack() as stack:
            stack.push_async_callback(relational.close)
            stack.push_async_callback(cache.close)

            try:
                await connect_with_retry("database", relational.connect, settings)
                await connect_with_retry("cache", cache.connect, settings)
            except (BackendUnavailableError, asyncio.TimeoutError) as e:
                logger.error(f"❌ Startup aborted: {type(e).__name__}: {e}")
                raise

            app.state.settings = settings
            app.state.relational_client = relational
            app.state.cache_client = cache
            app.state.visit_service = VisitService(
                cache,
                key=settings.VISITS_KEY,
                timeout=settings.CACHE_TIMEOUT,
            )
            logger.info(f"🚀 Server ready on port {settings.PORT}")
            if settings.is_development():
                logger.info(f"🛠 Development mode (reload={settings.RELOAD}, sql echo={settings.DEBUG})")

            yield

            logger.info("Shutting down, closing backing store connections")

    app = FastAPI(
        title="Visit Counter",
        version="1.0.0",
        description="Greets every visitor with a Redis-backed visit count",
        lifespan=lifespan,
    )

    # Import routers after app creation to avoid circular imports
    from api.routes import health, visits
    app.include_router(visits.router, tags=["visits"])
    app.include_router(health.router, tags=["health"])

    return app


app = create_app()

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT, reload=settings.RELOAD)
