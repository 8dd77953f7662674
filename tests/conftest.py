"""Shared fixtures for the FlightLabs test suite."""

from datetime import datetime, timedelta
from typing import Any, Callable

import pytest

from flightlabs.analysis.types import Route

from factories import route_record


@pytest.fixture
def anyio_backend():
    """Use only asyncio backend (trio not installed)."""
    return "asyncio"


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_route() -> Callable[..., Route]:
    """Factory building validated Route models."""

    def _make(*args: Any, **kwargs: Any) -> Route:
        return Route.model_validate(route_record(*args, **kwargs))

    return _make
