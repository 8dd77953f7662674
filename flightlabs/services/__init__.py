"""
Request layer - resilience patterns for FlightLabs API calls.

Provides:
- Error classification: retryable vs fatal failures
- ResilientExecutor: bounded fixed-delay retry
- ResultCache: bounded TTL cache keyed by request parameters
- CachedRequestGateway: cache check, resilient fetch, cache fill
- FlightLabsClient: single-attempt httpx transport
"""

from flightlabs.services.errors import (
    ErrorKind,
    FlightLabsError,
    ClientRequestError,
    ServerError,
    NetworkError,
    RequestTimeoutError,
    UpstreamApplicationError,
    UnknownUpstreamError,
    InvalidQueryError,
    ConfigurationError,
)
from flightlabs.services.classifier import (
    AttemptOutcome,
    Classification,
    classify,
    error_from_outcome,
)
from flightlabs.services.retry import ResilientExecutor, RetryPolicy
from flightlabs.services.cache import (
    ResultCache,
    CacheEntry,
    CacheStats,
    ParamMap,
    cache_key,
)
from flightlabs.services.deduplicator import RequestDeduplicator
from flightlabs.services.gateway import CachedRequestGateway
from flightlabs.services.client import FlightLabsClient

__all__ = [
    # Errors
    "ErrorKind",
    "FlightLabsError",
    "ClientRequestError",
    "ServerError",
    "NetworkError",
    "RequestTimeoutError",
    "UpstreamApplicationError",
    "UnknownUpstreamError",
    "InvalidQueryError",
    "ConfigurationError",
    # Classifier
    "AttemptOutcome",
    "Classification",
    "classify",
    "error_from_outcome",
    # Retry
    "ResilientExecutor",
    "RetryPolicy",
    # Cache
    "ResultCache",
    "CacheEntry",
    "CacheStats",
    "ParamMap",
    "cache_key",
    # Gateway
    "RequestDeduplicator",
    "CachedRequestGateway",
    # Client
    "FlightLabsClient",
]
