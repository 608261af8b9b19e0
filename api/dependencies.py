from fastapi import Request

from db.db import RelationalClient
from redis_client import CacheClient
from services.visits import VisitService


# Clients are created by the application lifespan and kept on app.state

def get_visit_service(request: Request) -> VisitService:
    return request.app.state.visit_service


def get_cache_client(request: Request) -> CacheClient:
    return request.app.state.cache_client


def get_relational_client(request: Request) -> RelationalClient:
    return request.app.state.relational_client
