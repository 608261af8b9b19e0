"""
Health Routes - backing store diagnostics
"""
import asyncio
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_cache_client, get_relational_client
from db.db import RelationalClient
from redis_client import CacheClient

router = APIRouter()


@router.get("/api/health")
@router.get("/health")
async def unified_health_check(
    request: Request,
    cache: CacheClient = Depends(get_cache_client),
    database: RelationalClient = Depends(get_relational_client),
):
    """Report whether both backing stores answer; never touches the visit counter"""
    timeout = request.app.state.settings.CACHE_TIMEOUT
    database_ok, cache_ok = await asyncio.gather(
        database.ping(timeout=timeout),
        cache.ping(timeout=timeout),
    )

    health_info = {
        "status": "healthy" if database_ok and cache_ok else "degraded",
        "service": request.app.title,
        "version": request.app.version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database_status": "connected" if database_ok else "error",
        "cache_status": "connected" if cache_ok else "error",
    }
    return health_info
