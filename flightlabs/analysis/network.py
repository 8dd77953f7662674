"""
Network and competition analysis over route lists.

Computes:
- Per-route market share and competition level
- Hub / focus-city classification by connection count
- Duration-bucket distributions and haul filters
- General route statistics and groupings
"""

from collections import defaultdict
from typing import Iterable

from flightlabs.analysis.types import (
    WEEK,
    AirlineMarketShare,
    AirlineNetwork,
    AirportHub,
    CompetitionLevel,
    ConnectionCandidate,
    ConnectionPoint,
    HubType,
    Route,
    RouteCompetition,
    RoutePair,
    RouteStatistics,
    Weekday,
    ordered_days,
)

HUB_THRESHOLD = 10
FOCUS_THRESHOLD = 5

SHORT_HAUL_MAX = 180
MEDIUM_HAUL_MAX = 360

DURATION_CATEGORIES = (
    (60, "Under 1 hour"),
    (120, "1-2 hours"),
    (180, "2-3 hours"),
    (360, "3-6 hours"),
    (720, "6-12 hours"),
)
LONGEST_CATEGORY = "Over 12 hours"


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def _average(values: list[int]) -> int:
    if not values:
        return 0
    return _round_half_up(sum(values) / len(values))


def market_shares(counts: dict[str, int]) -> dict[str, int]:
    """
    Integer percentage per key, summing to exactly 100.

    Largest-remainder rounding: every share is floored, then the points
    left over go to the largest remainders (ties to the larger count,
    then to the earlier key).
    """
    total = sum(counts.values())
    if total <= 0:
        return {key: 0 for key in counts}

    shares = {key: count * 100 // total for key, count in counts.items()}
    leftover = 100 - sum(shares.values())
    by_remainder = sorted(
        counts,
        key=lambda key: (counts[key] * 100 % total, counts[key]),
        reverse=True,
    )
    for key in by_remainder[:leftover]:
        shares[key] += 1
    return shares


def competition_level(airline_count: int) -> CompetitionLevel:
    """Fixed thresholds on the number of distinct airlines."""
    if airline_count <= 0:
        return "none"
    if airline_count == 1:
        return "monopoly"
    if airline_count == 2:
        return "low"
    if airline_count <= 4:
        return "medium"
    return "high"


def group_by_airline(routes: Iterable[Route]) -> dict[str, list[Route]]:
    grouped: dict[str, list[Route]] = defaultdict(list)
    for route in routes:
        grouped[route.airline_iata].append(route)
    return dict(grouped)


def route_competition(
    routes: Iterable[Route],
    origin: str | None = None,
    destination: str | None = None,
) -> RouteCompetition:
    """
    Market share of each airline on a route.

    Args:
        routes: Routes to analyse
        origin: Keep only routes departing here (optional)
        destination: Keep only routes arriving here (optional)

    Returns:
        RouteCompetition, airlines sorted by market share descending
    """
    route_flights = [
        r
        for r in routes
        if (origin is None or r.dep_iata == origin)
        and (destination is None or r.arr_iata == destination)
    ]
    total_flights = len(route_flights)

    by_airline = group_by_airline(route_flights)
    shares = market_shares({airline: len(flights) for airline, flights in by_airline.items()})

    airlines = []
    for airline, flights in by_airline.items():
        all_days: set[Weekday] = set()
        for flight in flights:
            all_days |= flight.days

        airlines.append(
            AirlineMarketShare(
                airline=airline,
                flights=len(flights),
                market_share=shares[airline],
                avg_duration=_average([f.duration for f in flights]),
                has_codeshare=any(f.is_codeshare for f in flights),
                operating_days=ordered_days(all_days),
            )
        )

    airlines.sort(key=lambda a: a.market_share, reverse=True)

    return RouteCompetition(
        airlines=airlines,
        total_flights=total_flights,
        competition_level=competition_level(len(airlines)),
    )


def hub_type(connections: int) -> HubType:
    if connections >= HUB_THRESHOLD:
        return "hub"
    if connections >= FOCUS_THRESHOLD:
        return "focus"
    return "destination"


def airport_connections(routes: Iterable[Route]) -> dict[str, set[str]]:
    """Distinct airports each airport is linked to, in either direction."""
    connections: dict[str, set[str]] = defaultdict(set)
    for route in routes:
        connections[route.dep_iata].add(route.arr_iata)
        connections[route.arr_iata].add(route.dep_iata)
    return dict(connections)


def classify_hubs(routes: Iterable[Route]) -> list[AirportHub]:
    """Classify every airport in an airline's route set, most connected first."""
    routes = list(routes)
    route_counts: dict[str, int] = defaultdict(int)
    for route in routes:
        route_counts[route.dep_iata] += 1
        if route.arr_iata != route.dep_iata:
            route_counts[route.arr_iata] += 1

    hubs = [
        AirportHub(
            airport=airport,
            type=hub_type(len(linked)),
            connections=len(linked),
            routes=route_counts[airport],
        )
        for airport, linked in airport_connections(routes).items()
    ]
    hubs.sort(key=lambda h: h.connections, reverse=True)
    return hubs


def analyze_network(routes: Iterable[Route]) -> AirlineNetwork:
    """Summarise an airline's network: map, hubs, focus cities, connectivity."""
    routes = list(routes)

    network_map: dict[str, list[str]] = defaultdict(list)
    for route in routes:
        if route.arr_iata not in network_map[route.dep_iata]:
            network_map[route.dep_iata].append(route.arr_iata)

    hub_analysis = classify_hubs(routes)

    return AirlineNetwork(
        total_routes=len(routes),
        unique_airports=len(hub_analysis),
        network_map=dict(network_map),
        hubs=[h.airport for h in hub_analysis if h.type == "hub"],
        focus_cities=[h.airport for h in hub_analysis if h.type == "focus"],
        connectivity={h.airport: h.connections for h in hub_analysis},
        hub_analysis=hub_analysis,
    )


def duration_category(minutes: int) -> str:
    for upper, label in DURATION_CATEGORIES:
        if minutes < upper:
            return label
    return LONGEST_CATEGORY


def duration_distribution(routes: Iterable[Route]) -> dict[str, int]:
    """Route count per duration bucket, every bucket present, shortest first."""
    distribution = {label: 0 for _, label in DURATION_CATEGORIES}
    distribution[LONGEST_CATEGORY] = 0
    for route in routes:
        distribution[duration_category(route.duration)] += 1
    return distribution


def filter_by_duration(
    routes: Iterable[Route], min_minutes: float, max_minutes: float
) -> list[Route]:
    return [r for r in routes if min_minutes <= r.duration <= max_minutes]


def short_haul(routes: Iterable[Route]) -> list[Route]:
    return filter_by_duration(routes, 0, SHORT_HAUL_MAX)


def medium_haul(routes: Iterable[Route]) -> list[Route]:
    return filter_by_duration(routes, SHORT_HAUL_MAX, MEDIUM_HAUL_MAX)


def long_haul(routes: Iterable[Route]) -> list[Route]:
    return filter_by_duration(routes, MEDIUM_HAUL_MAX, float("inf"))


def daily_schedule(routes: Iterable[Route], day: str | Weekday) -> list[Route]:
    """Routes operating on a day, by departure time."""
    weekday = Weekday.parse(day)
    return sorted(
        (r for r in routes if weekday in r.days),
        key=lambda r: r.departure_minutes,
    )


def unique_route_pairs(routes: Iterable[Route]) -> list[RoutePair]:
    """Aggregate per origin-destination pair, busiest first."""
    pairs: dict[str, list[Route]] = defaultdict(list)
    for route in routes:
        pairs[f"{route.dep_iata}-{route.arr_iata}"].append(route)

    result = []
    for pair, pair_routes in pairs.items():
        durations = [r.duration for r in pair_routes]
        result.append(
            RoutePair(
                route=pair,
                airlines=sorted({r.airline_iata for r in pair_routes}),
                flights=len(pair_routes),
                min_duration=min(durations),
                max_duration=max(durations),
                avg_duration=_average(durations),
            )
        )
    result.sort(key=lambda p: p.flights, reverse=True)
    return result


def connection_points(connections: Iterable[ConnectionCandidate]) -> list[ConnectionPoint]:
    """Connecting airports with their option count and airlines, busiest first."""
    options: dict[str, int] = defaultdict(int)
    airlines: dict[str, set[str]] = defaultdict(set)
    for conn in connections:
        options[conn.connecting_airport] += 1
        airlines[conn.connecting_airport].add(conn.outbound.airline_iata)
        airlines[conn.connecting_airport].add(conn.inbound.airline_iata)

    points = [
        ConnectionPoint(airport=airport, options=count, airlines=sorted(airlines[airport]))
        for airport, count in options.items()
    ]
    points.sort(key=lambda p: p.options, reverse=True)
    return points


def route_statistics(routes: Iterable[Route]) -> RouteStatistics:
    """Totals, per-airline and per-day counts, and extremes."""
    routes = list(routes)
    if not routes:
        return RouteStatistics(by_day_of_week={day: 0 for day in WEEK})

    airports: set[str] = set()
    by_airline: dict[str, int] = defaultdict(int)
    by_day: dict[Weekday, int] = {day: 0 for day in WEEK}

    for route in routes:
        airports.add(route.dep_iata)
        airports.add(route.arr_iata)
        by_airline[route.airline_iata] += 1
        for day in route.days:
            by_day[day] += 1

    by_duration = sorted(routes, key=lambda r: r.duration)

    return RouteStatistics(
        total_routes=len(routes),
        unique_airlines=len(by_airline),
        unique_airports=len(airports),
        codeshare_routes=sum(1 for r in routes if r.is_codeshare),
        by_airline=dict(by_airline),
        by_day_of_week=by_day,
        average_duration=_average([r.duration for r in routes]),
        shortest_route=by_duration[0],
        longest_route=by_duration[-1],
        most_frequent_route=max(routes, key=lambda r: r.counter),
        routes_with_terminals=sum(
            1 for r in routes if r.dep_terminals or r.arr_terminals
        ),
        routes_with_aircraft=sum(1 for r in routes if r.aircraft_icao),
    )
