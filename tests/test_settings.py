"""
Tests for environment settings.
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from flightlabs.config import DEFAULT_BASE_URL
from flightlabs.settings import load_settings


def test_defaults():
    settings = load_settings({})
    assert settings.access_key == ""
    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.max_retries == 3
    assert settings.cache_ttl_seconds == 60


def test_env_values_and_to_config():
    settings = load_settings(
        {
            "FLIGHTLABS_ACCESS_KEY": "abc",
            "API_TIMEOUT": "12.5",
            "API_MAX_RETRIES": "5",
            "API_RETRY_DELAY": "0.25",
            "CACHE_ENABLED": "false",
            "CACHE_TTL_SECONDS": "120",
            "CACHE_MAX_ENTRIES": "7",
            "CACHE_CLEANUP_INTERVAL": "30",
            "FLIGHTLABS_DEBUG": "true",
            "UNRELATED": "ignored",
        }
    )
    config = settings.to_config()

    assert config.access_key == "abc"
    assert config.timeout == 12.5
    assert config.max_retries == 5
    assert config.retry_delay == 0.25
    assert config.cache_enabled is False
    assert config.cache_ttl == timedelta(seconds=120)
    assert config.cache_max_entries == 7
    assert config.cleanup_interval == timedelta(seconds=30)
    assert config.debug is True


def test_zero_cleanup_interval_disables_sweep():
    config = load_settings({"CACHE_CLEANUP_INTERVAL": "0"}).to_config()
    assert config.cleanup_interval is None


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        load_settings({"CACHE_MAX_ENTRIES": "0"})
    with pytest.raises(ValidationError):
        load_settings({"API_MAX_RETRIES": "-1"})
