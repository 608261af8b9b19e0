"""
conftest.py - Shared fixtures for ALL tests.

The unit suite never talks to a real Redis or Postgres: FakeRedis stands in
for the redis.asyncio client under CacheClient, FakeEngine for the
SQLAlchemy async engine under RelationalClient.
"""
import asyncio

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import OperationalError

from config.settings import Settings
from db.db import RelationalClient
from main import create_app
from redis_client import CacheClient


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis (ping / incr / aclose)."""

    def __init__(self):
        self.store = {}
        self.ping_calls = 0
        self.incr_calls = 0
        self.closed = False
        # failure knobs
        self.fail_ping_times = 0
        self.stall_ping = False
        self.fail_incr = False
        self.stall_incr = False
        self.latency = 0.0

    async def ping(self):
        self.ping_calls += 1
        if self.stall_ping:
            await asyncio.sleep(3600)
        if self.fail_ping_times:
            self.fail_ping_times -= 1
            raise RedisConnectionError("Connection refused")
        return True

    async def incr(self, key):
        self.incr_calls += 1
        if self.stall_incr:
            await asyncio.sleep(3600)
        if self.fail_incr:
            raise RedisConnectionError("Connection reset by peer")
        if self.latency:
            await asyncio.sleep(self.latency)
        # read-modify-write without an await in between, like Redis INCR
        self.store[key] = self.store.get(key, 0) + 1
        return self.store[key]

    async def aclose(self):
        self.closed = True


class FakeConnection:
    def __init__(self, engine):
        self.engine = engine

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def execute(self, statement):
        self.engine.probes += 1
        if self.engine.stall:
            await asyncio.sleep(3600)
        if self.engine.fail:
            raise OperationalError(str(statement), {}, Exception("connection refused"))
        return None


class FakeEngine:
    """Stand-in for AsyncEngine: connect() and dispose() only."""

    def __init__(self):
        self.probes = 0
        self.fail = False
        self.stall = False
        self.disposed = False

    def connect(self):
        return FakeConnection(self)

    async def dispose(self):
        self.disposed = True


@pytest.fixture
def test_settings():
    """Settings tuned for fast tests: short timeouts, two quick attempts."""
    settings = Settings()
    settings.REDIS_URL = "redis://cache:6379"
    settings.VISITS_KEY = "visits"
    settings.CACHE_TIMEOUT = 0.2
    settings.STARTUP_TIMEOUT = 0.2
    settings.STARTUP_RETRIES = 2
    settings.STARTUP_RETRY_WAIT = 0
    return settings


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def cache_client(fake_redis):
    return CacheClient("redis://cache:6379", client=fake_redis)


@pytest.fixture
def relational_client(fake_engine):
    return RelationalClient("postgresql+asyncpg://postgres:password@db:5432/postgres", engine=fake_engine)


@pytest.fixture
def app(test_settings, cache_client, relational_client):
    return create_app(test_settings, cache_client=cache_client, relational_client=relational_client)


@pytest.fixture
def client(app):
    """TestClient with the lifespan running (startup connects the fakes)."""
    with TestClient(app) as test_client:
        yield test_client
