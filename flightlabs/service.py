"""
FlightLabsService - endpoint access with caching, retries and route analysis.

API Documentation: https://www.goflightlabs.com/docs
"""

import asyncio
from typing import Any, AsyncIterator, Callable

import httpx
from loguru import logger
from pydantic import ValidationError

from flightlabs.analysis.network import (
    analyze_network,
    connection_points,
    route_competition,
)
from flightlabs.analysis.route_graph import (
    DEFAULT_MAX_LAYOVER_MINUTES,
    DEFAULT_MIN_LAYOVER_MINUTES,
    find_connections,
)
from flightlabs.analysis.types import (
    AirlineNetwork,
    ConnectionSearchResult,
    Route,
    RouteCompetition,
)
from flightlabs.config import FlightLabsConfig
from flightlabs.services.cache import CacheStats, ResultCache
from flightlabs.services.client import FlightLabsClient
from flightlabs.services.errors import InvalidQueryError
from flightlabs.services.gateway import CachedRequestGateway
from flightlabs.services.retry import ResilientExecutor, RetryPolicy

ROUTE_FILTERS = ("dep_iata", "dep_icao", "arr_iata", "arr_icao", "airline_iata", "airline_icao")
MAX_PAGE_SIZE = 500


def parse_routes(data: Any) -> list[Route]:
    """Validate route records, skipping (and logging) malformed ones."""
    if not isinstance(data, list):
        data = [data] if data else []

    routes = []
    for item in data:
        try:
            routes.append(Route.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed route record: {e.error_count()} errors")
    return routes


class FlightLabsService:
    """
    FlightLabs API facade.

    Usage:
        async with FlightLabsService(FlightLabsConfig(access_key="...")) as service:
            result = await service.find_connecting_routes("LHR", "SIN")
            competition = await service.get_route_competition("LHR", "DXB")
    """

    def __init__(
        self,
        config: FlightLabsConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.client = FlightLabsClient(config, transport=transport)

        cache = (
            ResultCache(
                ttl=config.cache_ttl,
                max_size=config.cache_max_entries,
                debug=config.debug,
            )
            if config.cache_enabled
            else None
        )
        executor = ResilientExecutor(
            RetryPolicy(max_retries=config.max_retries, retry_delay=config.retry_delay)
        )
        self.gateway = CachedRequestGateway(
            cache,
            executor,
            cleanup_interval=config.cleanup_interval,
            coalesce_requests=config.coalesce_requests,
            debug=config.debug,
        )

    async def _get(
        self,
        endpoint: str,
        path: str,
        params: dict[str, Any] | None = None,
        base_url: str | None = None,
        parse: Callable[[Any], Any] | None = None,
    ) -> Any:
        """Fetch through the gateway. parse runs before caching, so only parsed payloads are stored."""
        params = {k: v for k, v in (params or {}).items() if v is not None}

        async def fetch_fn() -> Any:
            data = await self.client.request(path, params, base_url=base_url)
            return parse(data) if parse else data

        return await self.gateway.fetch(endpoint, params, fetch_fn)

    # Routes

    async def get_routes(self, **filters: Any) -> list[Route]:
        """
        Fetch scheduled routes.

        Args:
            **filters: dep_iata, arr_iata, airline_iata, flight_number, limit,
                offset... At least one airport or airline filter is required.

        Returns:
            Parsed Route records

        Raises:
            InvalidQueryError: No airport or airline filter given
            FlightLabsError: Request failed
        """
        if not any(filters.get(name) for name in ROUTE_FILTERS):
            raise InvalidQueryError(
                "At least one filter parameter is required for routes endpoint"
            )

        routes = await self._get(
            "routes",
            "/routes",
            filters,
            base_url=self.config.routes_base_url,
            parse=parse_routes,
        )
        logger.info(f"Fetched {len(routes)} routes")
        return routes

    async def get_routes_between_airports(
        self, dep_iata: str, arr_iata: str, **filters: Any
    ) -> list[Route]:
        return await self.get_routes(dep_iata=dep_iata, arr_iata=arr_iata, **filters)

    async def get_routes_from_airport(self, dep_iata: str, **filters: Any) -> list[Route]:
        return await self.get_routes(dep_iata=dep_iata, **filters)

    async def get_routes_to_airport(self, arr_iata: str, **filters: Any) -> list[Route]:
        return await self.get_routes(arr_iata=arr_iata, **filters)

    async def get_routes_by_airline(self, airline_iata: str, **filters: Any) -> list[Route]:
        return await self.get_routes(airline_iata=airline_iata, **filters)

    async def get_routes_by_flight_number(
        self, flight_number: str, airline_iata: str | None = None, **filters: Any
    ) -> list[Route]:
        return await self.get_routes(
            flight_number=flight_number, airline_iata=airline_iata, **filters
        )

    async def iter_routes(
        self, page_size: int = MAX_PAGE_SIZE, **filters: Any
    ) -> AsyncIterator[list[Route]]:
        """Yield pages of routes until a short page signals the end."""
        page_size = min(page_size, MAX_PAGE_SIZE)
        offset = 0
        while True:
            page = await self.get_routes(limit=page_size, offset=offset, **filters)
            if page:
                yield page
            if len(page) < page_size:
                return
            offset += len(page)

    # Route analysis

    async def get_route_competition(
        self, dep_iata: str, arr_iata: str, **filters: Any
    ) -> RouteCompetition:
        routes = await self.get_routes_between_airports(dep_iata, arr_iata, **filters)
        return route_competition(routes, dep_iata, arr_iata)

    async def find_connecting_routes(
        self,
        origin: str,
        destination: str,
        max_layover_minutes: int | None = None,
        min_layover_minutes: int = DEFAULT_MIN_LAYOVER_MINUTES,
        preferred_airlines: list[str] | None = None,
        **filters: Any,
    ) -> ConnectionSearchResult:
        """
        Direct routes plus one-stop connections between two airports.

        Connections are searched when there is no direct route, or when a
        layover bound is given explicitly.
        """
        direct = await self.get_routes_between_airports(origin, destination, **filters)

        connections = []
        if not direct or max_layover_minutes is not None:
            from_origin, to_destination = await asyncio.gather(
                self.get_routes_from_airport(origin, **filters),
                self.get_routes_to_airport(destination, **filters),
            )
            connections = find_connections(
                [*from_origin, *to_destination],
                origin,
                destination,
                min_layover_minutes=min_layover_minutes,
                max_layover_minutes=(
                    DEFAULT_MAX_LAYOVER_MINUTES
                    if max_layover_minutes is None
                    else max_layover_minutes
                ),
            )

            if preferred_airlines:
                preferred = set(preferred_airlines)
                connections = [
                    c
                    for c in connections
                    if c.outbound.airline_iata in preferred
                    or c.inbound.airline_iata in preferred
                ]

        logger.info(
            f"{origin}->{destination}: {len(direct)} direct, "
            f"{len(connections)} connections"
        )
        return ConnectionSearchResult(
            direct_routes=direct,
            connections=connections,
            connection_points=connection_points(connections),
        )

    async def analyze_airline_network(self, airline_iata: str, **filters: Any) -> AirlineNetwork:
        routes = await self.get_routes_by_airline(airline_iata, **filters)
        return analyze_network(routes)

    # Other endpoints, returned as raw records

    async def get_flights(self, **params: Any) -> list[dict[str, Any]]:
        return await self._get("flights", "/flights", params)

    async def get_airlines(self, **params: Any) -> list[dict[str, Any]]:
        return await self._get("airlines", "/airlines", params)

    async def get_airports(self, **filters: Any) -> list[dict[str, Any]]:
        return await self._get("airports", "/airports-by-filter", filters)

    async def get_countries(self) -> list[dict[str, Any]]:
        return await self._get("countries", "/retrieveCountries")

    async def get_city(self, iata_code: str) -> dict[str, Any] | None:
        data = await self._get("city", "/cities", {"iata_code": iata_code})
        if isinstance(data, list):
            return data[0] if data else None
        return data

    # Cache and lifecycle

    def get_cache_stats(self) -> CacheStats | None:
        return self.gateway.get_stats()

    def clear_cache(self, endpoint: str | None = None, **params: Any) -> int:
        """Invalidate one (endpoint, params) entry, or everything if no endpoint."""
        if endpoint is None:
            return self.gateway.clear_cache()
        return int(self.gateway.invalidate(endpoint, params))

    def destroy(self) -> None:
        """Clear the cache and stop the periodic cleanup."""
        self.gateway.destroy()

    async def close(self) -> None:
        self.destroy()
        await self.client.close()

    async def __aenter__(self) -> "FlightLabsService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
