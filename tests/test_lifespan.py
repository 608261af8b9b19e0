"""
Startup / shutdown - connections are awaited before serving and closed after.
"""
import asyncio

import pytest
from fastapi.testclient import TestClient

from main import connect_with_retry
from utils.errors import CacheUnavailableError, DatabaseUnavailableError


class TestStartup:

    def test_startup_connects_both_stores(self, app, fake_redis, fake_engine):
        with TestClient(app) as client:
            assert fake_engine.probes == 1
            assert fake_redis.ping_calls == 1
            assert client.app.state.visit_service.key == "visits"

    def test_startup_retries_transient_cache_failure(self, app, fake_redis):
        fake_redis.fail_ping_times = 1
        with TestClient(app) as client:
            assert fake_redis.ping_calls == 2
            assert client.get("/").text == "Hello 🚀 Visits: 1"

    def test_unreachable_cache_aborts_startup(self, app, fake_redis, fake_engine, test_settings):
        fake_redis.fail_ping_times = 100
        with pytest.raises(CacheUnavailableError):
            with TestClient(app):
                pass
        assert fake_redis.ping_calls == test_settings.STARTUP_RETRIES
        # the database was already connected and must still be released
        assert fake_engine.disposed
        assert fake_redis.closed

    def test_unreachable_database_aborts_before_cache(self, app, fake_redis, fake_engine, test_settings):
        fake_engine.fail = True
        with pytest.raises(DatabaseUnavailableError):
            with TestClient(app):
                pass
        assert fake_engine.probes == test_settings.STARTUP_RETRIES
        assert fake_redis.ping_calls == 0

    def test_stalled_cache_connect_times_out(self, app, fake_redis):
        fake_redis.stall_ping = True
        with pytest.raises(asyncio.TimeoutError):
            with TestClient(app):
                pass
        assert fake_redis.ping_calls == 2


class TestShutdown:

    def test_shutdown_closes_both_stores(self, app, fake_redis, fake_engine):
        with TestClient(app):
            assert not fake_redis.closed
            assert not fake_engine.disposed
        assert fake_redis.closed
        assert fake_engine.disposed


@pytest.mark.asyncio
class TestConnectWithRetry:

    async def test_returns_after_first_success(self, test_settings):
        calls = []

        async def connect():
            calls.append(1)

        await connect_with_retry("cache", connect, test_settings)
        assert len(calls) == 1

    async def test_reraises_last_error_after_all_attempts(self, test_settings):
        test_settings.STARTUP_RETRIES = 3
        calls = []

        async def connect():
            calls.append(1)
            raise CacheUnavailableError(f"attempt {len(calls)}")

        with pytest.raises(CacheUnavailableError, match="attempt 3"):
            await connect_with_retry("cache", connect, test_settings)
        assert len(calls) == 3

    async def test_does_not_retry_unrelated_errors(self, test_settings):
        calls = []

        async def connect():
            calls.append(1)
            raise ValueError("bad config")

        with pytest.raises(ValueError):
            await connect_with_retry("cache", connect, test_settings)
        assert len(calls) == 1
