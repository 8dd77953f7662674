import os
from datetime import timedelta

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from flightlabs.config import DEFAULT_BASE_URL, FlightLabsConfig

load_dotenv()


class Settings(BaseModel):
    # FlightLabs API
    access_key: str = Field(default="", alias="FLIGHTLABS_ACCESS_KEY")
    base_url: str = Field(default=DEFAULT_BASE_URL, alias="FLIGHTLABS_BASE_URL")

    # Requests
    timeout: float = Field(default=30.0, alias="API_TIMEOUT")
    max_retries: int = Field(default=3, ge=0, alias="API_MAX_RETRIES")
    retry_delay: float = Field(default=1.0, ge=0, alias="API_RETRY_DELAY")

    # Cache
    cache_enabled: bool = Field(default=True, alias="CACHE_ENABLED")
    cache_ttl_seconds: int = Field(default=60, ge=0, alias="CACHE_TTL_SECONDS")
    cache_max_entries: int = Field(default=100, ge=1, alias="CACHE_MAX_ENTRIES")
    cleanup_interval_seconds: int = Field(default=300, ge=0, alias="CACHE_CLEANUP_INTERVAL")

    debug: bool = Field(default=False, alias="FLIGHTLABS_DEBUG")

    def to_config(self) -> FlightLabsConfig:
        """Build the client options record from these settings."""
        return FlightLabsConfig(
            access_key=self.access_key,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
            cache_enabled=self.cache_enabled,
            cache_ttl=timedelta(seconds=self.cache_ttl_seconds),
            cache_max_entries=self.cache_max_entries,
            cleanup_interval=(
                timedelta(seconds=self.cleanup_interval_seconds)
                if self.cleanup_interval_seconds
                else None
            ),
            debug=self.debug,
        )


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Validate settings from the environment (or an explicit mapping)."""
    return Settings.model_validate(dict(os.environ if environ is None else environ))


global_settings = load_settings()
