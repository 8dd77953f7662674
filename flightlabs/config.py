"""
Client configuration, passed in at construction time.
"""

from dataclasses import dataclass
from datetime import timedelta

DEFAULT_BASE_URL = "https://app.goflightlabs.com"
DEFAULT_ROUTES_BASE_URL = "https://www.goflightlabs.com"


@dataclass
class FlightLabsConfig:
    """Configuration for a FlightLabs client instance."""

    access_key: str
    base_url: str = DEFAULT_BASE_URL
    routes_base_url: str = DEFAULT_ROUTES_BASE_URL
    timeout: float = 30.0  # per-attempt transport timeout, seconds

    # Retry
    max_retries: int = 3
    retry_delay: float = 1.0  # seconds

    # Cache
    cache_enabled: bool = True
    cache_ttl: timedelta = timedelta(seconds=60)
    cache_max_entries: int = 100
    cleanup_interval: timedelta | None = None
    coalesce_requests: bool = False

    debug: bool = False
