"""
Tests for CachedRequestGateway.

Tests cover:
- Cache hits skip the upstream call
- Empty and failed results are never cached
- Endpoint tag separates otherwise identical params
- Optional request coalescing
- Periodic cleanup lifecycle
"""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from flightlabs.services.cache import ResultCache
from flightlabs.services.errors import ClientRequestError, ServerError
from flightlabs.services.gateway import CLEANUP_JOB_ID, CachedRequestGateway
from flightlabs.services.retry import ResilientExecutor, RetryPolicy


@pytest.fixture
def executor():
    return ResilientExecutor(RetryPolicy(max_retries=2, retry_delay=0), sleep=AsyncMock())


@pytest.fixture
def cache(clock):
    return ResultCache(ttl=timedelta(seconds=60), max_size=10, clock=clock)


@pytest.fixture
def gateway(cache, executor):
    gw = CachedRequestGateway(cache, executor)
    yield gw
    gw.destroy()


@pytest.mark.anyio
class TestFetch:
    async def test_second_call_served_from_cache(self, gateway):
        fetch_fn = AsyncMock(return_value=[{"airline_iata": "EK"}])

        first = await gateway.fetch("routes", {"dep_iata": "DXB"}, fetch_fn)
        second = await gateway.fetch("routes", {"dep_iata": "DXB"}, fetch_fn)

        assert first == second == [{"airline_iata": "EK"}]
        fetch_fn.assert_awaited_once()

    async def test_access_key_does_not_split_cache(self, gateway):
        fetch_fn = AsyncMock(return_value=[1])
        await gateway.fetch("routes", {"dep_iata": "DXB", "access_key": "a"}, fetch_fn)
        await gateway.fetch("routes", {"dep_iata": "DXB", "access_key": "b"}, fetch_fn)
        fetch_fn.assert_awaited_once()

    async def test_expired_entry_refetched(self, gateway, clock):
        fetch_fn = AsyncMock(side_effect=[["old"], ["new"]])
        await gateway.fetch("routes", {"dep_iata": "DXB"}, fetch_fn)
        clock.advance(seconds=61)
        assert await gateway.fetch("routes", {"dep_iata": "DXB"}, fetch_fn) == ["new"]
        assert fetch_fn.await_count == 2

    async def test_empty_result_not_cached(self, gateway):
        fetch_fn = AsyncMock(return_value=[])
        assert await gateway.fetch("routes", {"dep_iata": "XXX"}, fetch_fn) == []
        assert await gateway.fetch("routes", {"dep_iata": "XXX"}, fetch_fn) == []
        assert fetch_fn.await_count == 2
        assert len(gateway.cache) == 0

    async def test_failure_not_cached(self, gateway):
        fetch_fn = AsyncMock(side_effect=ClientRequestError("bad", code=400))
        with pytest.raises(ClientRequestError):
            await gateway.fetch("routes", {"dep_iata": "XXX"}, fetch_fn)
        assert len(gateway.cache) == 0
        fetch_fn.assert_awaited_once()

    async def test_retries_then_caches(self, gateway):
        fetch_fn = AsyncMock(side_effect=[ServerError("x"), ["ok"]])
        assert await gateway.fetch("routes", {"dep_iata": "DXB"}, fetch_fn) == ["ok"]
        assert await gateway.fetch("routes", {"dep_iata": "DXB"}, fetch_fn) == ["ok"]
        assert fetch_fn.await_count == 2

    async def test_endpoint_separates_keys(self, gateway):
        routes_fn = AsyncMock(return_value=["route"])
        flights_fn = AsyncMock(return_value=["flight"])

        assert await gateway.fetch("routes", {"dep_iata": "DXB"}, routes_fn) == ["route"]
        assert await gateway.fetch("flights", {"dep_iata": "DXB"}, flights_fn) == ["flight"]
        flights_fn.assert_awaited_once()

    async def test_without_cache(self, executor):
        gateway = CachedRequestGateway(None, executor)
        fetch_fn = AsyncMock(return_value=[1])
        await gateway.fetch("routes", {"a": 1}, fetch_fn)
        await gateway.fetch("routes", {"a": 1}, fetch_fn)
        assert fetch_fn.await_count == 2
        assert gateway.get_stats() is None
        assert gateway.invalidate("routes", {"a": 1}) is False
        assert gateway.clear_cache() == 0

    async def test_invalidate(self, gateway):
        fetch_fn = AsyncMock(return_value=[1])
        await gateway.fetch("routes", {"a": 1}, fetch_fn)
        assert gateway.invalidate("routes", {"a": 1}) is True
        await gateway.fetch("routes", {"a": 1}, fetch_fn)
        assert fetch_fn.await_count == 2


@pytest.mark.anyio
class TestCoalescing:
    async def test_concurrent_misses_share_one_fetch(self, cache, executor):
        gateway = CachedRequestGateway(cache, executor, coalesce_requests=True)
        release = asyncio.Event()
        calls = 0

        async def fetch_fn():
            nonlocal calls
            calls += 1
            await release.wait()
            return ["shared"]

        tasks = [
            asyncio.ensure_future(gateway.fetch("routes", {"dep_iata": "DXB"}, fetch_fn))
            for _ in range(3)
        ]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*tasks)

        assert results == [["shared"]] * 3
        assert calls == 1
        health = gateway.get_health_status()
        assert health["deduplicator"]["started"] == 1
        assert health["deduplicator"]["coalesced"] == 2
        gateway.destroy()

    async def test_uncoalesced_misses_each_fetch(self, cache, executor):
        gateway = CachedRequestGateway(cache, executor)
        release = asyncio.Event()
        calls = 0

        async def fetch_fn():
            nonlocal calls
            calls += 1
            await release.wait()
            return ["data"]

        tasks = [
            asyncio.ensure_future(gateway.fetch("routes", {"dep_iata": "DXB"}, fetch_fn))
            for _ in range(2)
        ]
        await asyncio.sleep(0)
        release.set()
        await asyncio.gather(*tasks)

        assert calls == 2
        assert gateway.get_health_status()["deduplicator"] is None


@pytest.mark.anyio
class TestCleanupLifecycle:
    async def test_cleanup_not_started_without_interval(self, gateway):
        await gateway.fetch("routes", {"a": 1}, AsyncMock(return_value=[1]))
        assert gateway.is_cleanup_running() is False

    async def test_cleanup_started_lazily_and_destroyed(self, cache, executor):
        gateway = CachedRequestGateway(
            cache, executor, cleanup_interval=timedelta(seconds=30)
        )
        assert gateway.is_cleanup_running() is False

        await gateway.fetch("routes", {"a": 1}, AsyncMock(return_value=[1]))
        assert gateway.is_cleanup_running() is True
        assert gateway._scheduler.get_job(CLEANUP_JOB_ID) is not None

        gateway.destroy()
        assert gateway.is_cleanup_running() is False
        assert len(cache) == 0

    async def test_cleanup_job_sweeps_expired(self, cache, executor, clock):
        gateway = CachedRequestGateway(cache, executor)
        await gateway.fetch("routes", {"a": 1}, AsyncMock(return_value=[1]))
        clock.advance(seconds=61)

        gateway._cleanup_job()
        assert len(cache) == 0
