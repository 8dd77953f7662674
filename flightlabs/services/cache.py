"""
ResultCache - bounded in-memory cache with per-entry TTL.

Features:
- Keys derived from request parameters, independent of their order
- The access key never takes part in a cache key
- TTL checked lazily on every read, expired entries are never served
- Oldest-inserted eviction when the cache is full
- Empty payloads are never stored, so "no data" is always re-fetched
- A single lock guards every operation (cleanup may run on a worker thread)
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from itertools import count
from typing import Any, Callable, Mapping

from loguru import logger

EXCLUDED_FIELDS = frozenset({"access_key"})
EMPTY_KEY = "all"
ENDPOINT_FIELD = "@endpoint"  # reserved; FlightLabs parameters never start with "@"


@dataclass(frozen=True)
class ParamMap:
    """Request parameters tagged with the endpoint they are sent to."""

    endpoint: str | None = None
    fields: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def of(cls, params: "ParamMap | Mapping[str, Any] | None") -> "ParamMap":
        if isinstance(params, ParamMap):
            return params
        return cls(fields=dict(params or {}))

    def flatten(self) -> dict[str, Any]:
        """Fields with the endpoint folded in."""
        flat = dict(self.fields)
        if self.endpoint is not None:
            flat[ENDPOINT_FIELD] = self.endpoint
        return flat


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(sorted(str(v) for v in value))
    return str(value)


def cache_key(params: ParamMap | Mapping[str, Any] | None) -> str:
    """Canonical, order-independent key for a set of request parameters."""
    flat = ParamMap.of(params).flatten()
    parts = [
        f"{k}:{_stringify(v)}"
        for k, v in sorted(flat.items())
        if k not in EXCLUDED_FIELDS and v is not None
    ]
    return "|".join(parts) or EMPTY_KEY


def _is_empty(payload: Any) -> bool:
    if payload is None:
        return True
    try:
        return len(payload) == 0
    except TypeError:
        return False


@dataclass
class CacheEntry:
    """A single cache entry with metadata."""

    value: Any
    inserted_at: datetime
    key: str
    source_params: dict[str, Any]
    sequence: int = 0

    def age(self, now: datetime) -> timedelta:
        return now - self.inserted_at

    def is_expired(self, now: datetime, ttl: timedelta) -> bool:
        """An entry is valid while its age is at most the TTL."""
        return self.age(now) > ttl


@dataclass
class CacheStats:
    """Cache statistics."""

    size: int = 0
    max_size: int = 0
    ttl: timedelta = timedelta(0)
    entries: list[dict[str, Any]] = field(default_factory=list)
    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "size": self.size,
            "max_size": self.max_size,
            "ttl": self.ttl.total_seconds(),
            "entries": [
                {**e, "age": e["age"].total_seconds()} for e in self.entries
            ],
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": f"{self.hit_rate:.2%}",
        }


class ResultCache:
    """
    Bounded key/value cache with TTL expiry.

    Usage:
        cache = ResultCache(ttl=timedelta(seconds=60), max_size=100)

        params = ParamMap("routes", {"dep_iata": "LHR"})
        routes = cache.get(params)
        if routes is None:
            routes = await fetch_routes()
            cache.set(params, routes)
    """

    def __init__(
        self,
        ttl: timedelta = timedelta(seconds=60),
        max_size: int = 100,
        clock: Callable[[], datetime] = datetime.now,
        debug: bool = False,
    ):
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")
        self._entries: dict[str, CacheEntry] = {}
        self._ttl = ttl
        self._max_size = max_size
        self._clock = clock
        self._debug = debug
        self._lock = threading.Lock()
        self._sequence = count()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def max_size(self) -> int:
        return self._max_size

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, params: ParamMap | Mapping[str, Any] | None) -> Any | None:
        """
        Get a cached payload.

        Returns None on a miss. An expired entry counts as a miss and is
        removed.
        """
        key = cache_key(params)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                self._log(f"MISS: {key[:50]}")
                return None

            if entry.is_expired(self._clock(), self._ttl):
                del self._entries[key]
                self._misses += 1
                self._log(f"EXPIRED: {key[:50]}")
                return None

            self._hits += 1
            self._log(f"HIT: {key[:50]}")
            return entry.value

    def has(self, params: ParamMap | Mapping[str, Any] | None) -> bool:
        """Check for a valid (non-expired) entry. Does not count as a hit or miss."""
        key = cache_key(params)
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not entry.is_expired(self._clock(), self._ttl)

    def set(self, params: ParamMap | Mapping[str, Any] | None, value: Any) -> bool:
        """
        Store a payload.

        Args:
            params: Request parameters the payload answers
            value: Payload to cache

        Returns:
            True if stored, False if the payload was empty and skipped
        """
        if _is_empty(value):
            self._log("SKIP: empty payload not cached")
            return False

        param_map = ParamMap.of(params)
        key = cache_key(param_map)
        entry = CacheEntry(
            value=value,
            inserted_at=self._clock(),
            key=key,
            source_params={
                k: v
                for k, v in param_map.flatten().items()
                if k not in EXCLUDED_FIELDS
            },
            sequence=next(self._sequence),
        )

        with self._lock:
            if len(self._entries) >= self._max_size and key not in self._entries:
                self._evict_oldest()

            self._entries[key] = entry
            self._log(f"SET: {key[:50]} (TTL: {self._ttl.total_seconds()}s)")
        return True

    def invalidate(self, params: ParamMap | Mapping[str, Any] | None) -> bool:
        """Remove the entry for these parameters. No-op if absent."""
        key = cache_key(params)
        with self._lock:
            if self._entries.pop(key, None) is not None:
                self._log(f"INVALIDATE: {key[:50]}")
                return True
            return False

    def clear(self) -> int:
        """Clear all cache entries. Returns count of removed entries."""
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
            self._log(f"CLEAR: {removed} entries removed")
            return removed

    def cleanup(self) -> int:
        """Remove all expired entries. Returns count of removed entries."""
        with self._lock:
            now = self._clock()
            expired_keys = [
                k for k, v in self._entries.items() if v.is_expired(now, self._ttl)
            ]
            for key in expired_keys:
                del self._entries[key]

            if expired_keys:
                self._log(f"CLEANUP: {len(expired_keys)} expired entries removed")

            return len(expired_keys)

    def _evict_oldest(self) -> None:
        """Evict the oldest inserted entry. Caller holds the lock."""
        if not self._entries:
            return

        oldest_key = min(
            self._entries,
            key=lambda k: (self._entries[k].inserted_at, self._entries[k].sequence),
        )
        del self._entries[oldest_key]
        self._evictions += 1
        self._log(f"EVICT: {oldest_key[:50]}")

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        with self._lock:
            now = self._clock()
            return CacheStats(
                size=len(self._entries),
                max_size=self._max_size,
                ttl=self._ttl,
                entries=[
                    {
                        "key": entry.key,
                        "age": entry.age(now),
                        "params": dict(entry.source_params),
                    }
                    for entry in self._entries.values()
                ],
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
            )

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[ResultCache] {message}")
