"""
RequestDeduplicator - optional single-flight layer for cache misses.

When enabled on the gateway, concurrent misses for the same cache key
share one upstream fetch instead of each hitting the API.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from loguru import logger

T = TypeVar("T")


@dataclass
class DeduplicatorStats:
    """Statistics for request coalescing."""

    started: int = 0  # upstream fetches actually started
    coalesced: int = 0  # callers that joined an in-flight fetch
    in_flight: int = 0

    @property
    def coalesce_rate(self) -> float:
        total = self.started + self.coalesced
        if total == 0:
            return 0.0
        return self.coalesced / total

    def to_dict(self) -> dict[str, Any]:
        return {
            "started": self.started,
            "coalesced": self.coalesced,
            "in_flight": self.in_flight,
            "coalesce_rate": f"{self.coalesce_rate:.2%}",
        }


class RequestDeduplicator:
    """
    Shares one in-flight fetch between concurrent callers of the same key.

    Usage:
        dedup = RequestDeduplicator()
        routes = await dedup.dedupe(cache_key(params), fetch_routes)
    """

    def __init__(self, debug: bool = False):
        self._in_flight: dict[str, asyncio.Task[Any]] = {}
        self._debug = debug
        self._stats = DeduplicatorStats()

    async def dedupe(self, key: str, request_fn: Callable[[], Awaitable[T]]) -> T:
        """
        Run request_fn, or join the fetch already running for this key.

        Every waiter receives the same result or the same exception.
        """
        task = self._in_flight.get(key)
        if task is not None:
            self._stats.coalesced += 1
            self._log(f"JOIN: {key[:50]}")
        else:
            self._stats.started += 1
            self._log(f"START: {key[:50]}")
            task = asyncio.ensure_future(request_fn())
            self._in_flight[key] = task
            task.add_done_callback(lambda _: self._in_flight.pop(key, None))

        # shield so one cancelled waiter does not cancel the shared fetch
        return await asyncio.shield(task)

    def cancel_all(self) -> int:
        """Cancel all in-flight fetches."""
        count = len(self._in_flight)
        for task in self._in_flight.values():
            task.cancel()
        self._in_flight.clear()
        if count:
            self._log(f"CANCEL_ALL: {count} fetches cancelled")
        return count

    def get_stats(self) -> DeduplicatorStats:
        self._stats.in_flight = len(self._in_flight)
        return self._stats

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[Deduplicator] {message}")
