"""
Route graph and one-stop connection search.

Routes are indexed by origin and destination airport; a connection pairs
an outbound leg from the origin with an inbound leg to the destination
that departs from the airport where the outbound leg lands.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable

from flightlabs.analysis.types import MINUTES_PER_DAY, ConnectionCandidate, Route

DEFAULT_MIN_LAYOVER_MINUTES = 45
DEFAULT_MAX_LAYOVER_MINUTES = 240


@dataclass
class RouteGraph:
    """
    Adjacency over a flat list of routes.

    Attributes:
        departures: airport -> routes departing from it
        arrivals: airport -> routes arriving at it
    """

    departures: dict[str, list[Route]] = field(default_factory=dict)
    arrivals: dict[str, list[Route]] = field(default_factory=dict)

    @classmethod
    def build(cls, routes: Iterable[Route]) -> "RouteGraph":
        departures: dict[str, list[Route]] = defaultdict(list)
        arrivals: dict[str, list[Route]] = defaultdict(list)
        for route in routes:
            departures[route.dep_iata].append(route)
            arrivals[route.arr_iata].append(route)
        return cls(departures=dict(departures), arrivals=dict(arrivals))

    @property
    def airports(self) -> set[str]:
        return set(self.departures) | set(self.arrivals)

    def departing_from(self, airport: str) -> list[Route]:
        return self.departures.get(airport, [])

    def arriving_at(self, airport: str) -> list[Route]:
        return self.arrivals.get(airport, [])

    def find_connections(
        self,
        origin: str,
        destination: str,
        min_layover_minutes: int = DEFAULT_MIN_LAYOVER_MINUTES,
        max_layover_minutes: int = DEFAULT_MAX_LAYOVER_MINUTES,
    ) -> list[ConnectionCandidate]:
        """
        Enumerate valid one-stop itineraries from origin to destination.

        A pair of legs is accepted when both meet at the same airport, the
        layover (modulo one day, so overnight connections work) lies in
        [min_layover_minutes, max_layover_minutes], and the legs share at
        least one day of operation.

        Returns:
            Candidates sorted by total duration, shortest first
        """
        connections: list[ConnectionCandidate] = []

        for outbound in self.departing_from(origin):
            for inbound in self.arriving_at(destination):
                if outbound.arr_iata != inbound.dep_iata:
                    continue

                layover = layover_minutes(outbound, inbound)
                if not min_layover_minutes <= layover <= max_layover_minutes:
                    continue

                common_days = outbound.days & inbound.days
                if not common_days:
                    continue

                connections.append(
                    ConnectionCandidate(
                        outbound=outbound,
                        inbound=inbound,
                        connecting_airport=outbound.arr_iata,
                        layover_minutes=layover,
                        operating_days=common_days,
                        total_duration_minutes=(
                            outbound.duration + layover + inbound.duration
                        ),
                    )
                )

        connections.sort(key=lambda c: c.total_duration_minutes)
        return connections


def layover_minutes(outbound: Route, inbound: Route) -> int:
    """Ground time between two legs, wrapping past midnight."""
    return (inbound.departure_minutes - outbound.arrival_minutes) % MINUTES_PER_DAY


def find_connections(
    routes: Iterable[Route],
    origin: str,
    destination: str,
    min_layover_minutes: int = DEFAULT_MIN_LAYOVER_MINUTES,
    max_layover_minutes: int = DEFAULT_MAX_LAYOVER_MINUTES,
) -> list[ConnectionCandidate]:
    """Build a RouteGraph over routes and search it. See RouteGraph.find_connections."""
    return RouteGraph.build(routes).find_connections(
        origin,
        destination,
        min_layover_minutes=min_layover_minutes,
        max_layover_minutes=max_layover_minutes,
    )
