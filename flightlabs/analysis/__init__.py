"""
Route analysis: connection search, competition and network statistics.
"""

from flightlabs.analysis.types import (
    Weekday,
    Route,
    ConnectionCandidate,
    ConnectionPoint,
    ConnectionSearchResult,
    AirlineMarketShare,
    RouteCompetition,
    AirportHub,
    AirlineNetwork,
    RoutePair,
    RouteStatistics,
    parse_time_to_minutes,
)
from flightlabs.analysis.route_graph import RouteGraph, find_connections, layover_minutes
from flightlabs.analysis.network import (
    route_competition,
    competition_level,
    classify_hubs,
    analyze_network,
    duration_category,
    duration_distribution,
    route_statistics,
    unique_route_pairs,
    connection_points,
)
from flightlabs.analysis.export import export_routes_csv, format_duration, format_route

__all__ = [
    # Types
    "Weekday",
    "Route",
    "ConnectionCandidate",
    "ConnectionPoint",
    "ConnectionSearchResult",
    "AirlineMarketShare",
    "RouteCompetition",
    "AirportHub",
    "AirlineNetwork",
    "RoutePair",
    "RouteStatistics",
    "parse_time_to_minutes",
    # Connection search
    "RouteGraph",
    "find_connections",
    "layover_minutes",
    # Network
    "route_competition",
    "competition_level",
    "classify_hubs",
    "analyze_network",
    "duration_category",
    "duration_distribution",
    "route_statistics",
    "unique_route_pairs",
    "connection_points",
    # Export
    "export_routes_csv",
    "format_duration",
    "format_route",
]
