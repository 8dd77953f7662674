"""
CachedRequestGateway - cache check, resilient fetch, cache fill.

Within one fetch() the cache lookup, the network attempt(s) and the
cache write happen strictly in sequence. Two concurrent misses for the
same key both go upstream unless coalescing is enabled.
"""

from datetime import timedelta
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from flightlabs.services.cache import CacheStats, ParamMap, ResultCache, cache_key
from flightlabs.services.deduplicator import RequestDeduplicator
from flightlabs.services.retry import ResilientExecutor

T = TypeVar("T")

CLEANUP_JOB_ID = "flightlabs_cache_cleanup"


class CachedRequestGateway:
    """
    Composes ResultCache and ResilientExecutor.

    Usage:
        gateway = CachedRequestGateway(cache, executor)
        routes = await gateway.fetch(
            "routes",
            {"dep_iata": "LHR"},
            lambda: client.request("/routes", {"dep_iata": "LHR"}),
        )
    """

    def __init__(
        self,
        cache: ResultCache | None,
        executor: ResilientExecutor,
        cleanup_interval: timedelta | None = None,
        coalesce_requests: bool = False,
        debug: bool = False,
    ):
        self._cache = cache
        self._executor = executor
        self._cleanup_interval = cleanup_interval
        self._deduplicator = RequestDeduplicator(debug=debug) if coalesce_requests else None
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def cache(self) -> ResultCache | None:
        return self._cache

    @property
    def executor(self) -> ResilientExecutor:
        return self._executor

    async def fetch(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None,
        fetch_fn: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Return the cached payload for (endpoint, params) or fetch it.

        Args:
            endpoint: Endpoint tag folded into the cache key
            params: Request parameters
            fetch_fn: Performs one upstream attempt

        Returns:
            Payload from cache or upstream

        Raises:
            FlightLabsError: Classified failure once retries are exhausted
        """
        self._ensure_cleanup_started()
        param_map = ParamMap(endpoint=endpoint, fields=dict(params or {}))

        if self._cache is not None:
            cached = self._cache.get(param_map)
            if cached is not None:
                return cached

        async def do_fetch() -> T:
            return await self._executor.execute(fetch_fn)

        if self._deduplicator is not None:
            data = await self._deduplicator.dedupe(cache_key(param_map), do_fetch)
        else:
            data = await do_fetch()

        if self._cache is not None:
            self._cache.set(param_map, data)

        return data

    def invalidate(self, endpoint: str, params: Mapping[str, Any] | None = None) -> bool:
        """Drop the cached payload for (endpoint, params)."""
        if self._cache is None:
            return False
        return self._cache.invalidate(ParamMap(endpoint=endpoint, fields=dict(params or {})))

    def clear_cache(self) -> int:
        if self._cache is None:
            return 0
        return self._cache.clear()

    def get_stats(self) -> CacheStats | None:
        return self._cache.get_stats() if self._cache is not None else None

    def get_health_status(self) -> dict[str, Any]:
        """Cache, coalescing and cleanup status."""
        stats = self.get_stats()
        return {
            "cache": stats.to_dict() if stats else None,
            "deduplicator": (
                self._deduplicator.get_stats().to_dict() if self._deduplicator else None
            ),
            "cleanup_running": self.is_cleanup_running(),
        }

    # Periodic cleanup

    def _ensure_cleanup_started(self) -> None:
        if self._cleanup_interval and self._cache is not None and self._scheduler is None:
            self.start_cleanup()

    def start_cleanup(self) -> None:
        """Start the periodic expired-entry sweep. Needs a running event loop."""
        if self._scheduler is not None:
            logger.warning("Cache cleanup is already running")
            return
        if self._cache is None or not self._cleanup_interval:
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self._cleanup_job,
            trigger="interval",
            seconds=self._cleanup_interval.total_seconds(),
            id=CLEANUP_JOB_ID,
            name="FlightLabs cache cleanup",
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(
            f"Cache cleanup started: sweeping every "
            f"{self._cleanup_interval.total_seconds():.0f}s"
        )

    def _cleanup_job(self) -> None:
        if self._cache is None:
            return
        removed = self._cache.cleanup()
        if removed:
            logger.debug(f"Cache cleanup removed {removed} expired entries")

    def is_cleanup_running(self) -> bool:
        return self._scheduler is not None

    def destroy(self) -> None:
        """Clear the cache and stop the periodic cleanup."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Cache cleanup stopped")

        if self._deduplicator is not None:
            self._deduplicator.cancel_all()

        if self._cache is not None:
            self._cache.clear()
