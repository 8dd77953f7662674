"""
Display formatting and CSV export for routes.
"""

import csv
import io
from typing import Iterable

from flightlabs.analysis.types import Route, ordered_days

CSV_HEADERS = [
    "Airline IATA",
    "Flight Number",
    "Departure",
    "Arrival",
    "Dep Time",
    "Arr Time",
    "Duration",
    "Days",
    "Aircraft",
    "Terminals",
    "Codeshare",
    "Frequency",
]


def format_duration(minutes: int) -> str:
    """125 -> "2h 5m", 120 -> "2h", 45 -> "45m"."""
    hours, mins = divmod(minutes, 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def _terminals(route: Route) -> list[str]:
    terminals = []
    if route.dep_terminals:
        terminals.append(f"Dep: T{','.join(route.dep_terminals)}")
    if route.arr_terminals:
        terminals.append(f"Arr: T{','.join(route.arr_terminals)}")
    return terminals


def _day_names(route: Route) -> list[str]:
    return [day.full_name for day in ordered_days(route.days)]


def format_route(route: Route) -> str:
    """Multi-line human readable summary of one route."""
    lines = [
        f"{route.flight_iata or route.flight_number} - {route.airline_iata}",
        f"Route: {route.dep_iata} → {route.arr_iata}",
        f"Time: {route.dep_time} - {route.arr_time} ({format_duration(route.duration)})",
        f"Days: {', '.join(_day_names(route))}",
    ]

    terminals = _terminals(route)
    if terminals:
        lines.append(f"Terminals: {', '.join(terminals)}")
    if route.aircraft_icao:
        lines.append(f"Aircraft: {route.aircraft_icao}")
    if route.is_codeshare:
        lines.append(f"Codeshare: {route.cs_airline_iata} {route.cs_flight_iata}")

    lines.append(f"Frequency: {route.counter} operations")
    return "\n".join(lines)


def export_routes_csv(routes: Iterable[Route]) -> str:
    """Routes as CSV text, header row first, every cell quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)

    for route in routes:
        writer.writerow(
            [
                route.airline_iata,
                route.flight_number,
                route.dep_iata,
                route.arr_iata,
                route.dep_time,
                route.arr_time,
                format_duration(route.duration),
                "/".join(_day_names(route)),
                route.aircraft_icao or "",
                "; ".join(_terminals(route)),
                (
                    f"{route.cs_airline_iata} {route.cs_flight_iata}"
                    if route.is_codeshare
                    else ""
                ),
                str(route.counter),
            ]
        )

    return buffer.getvalue().rstrip("\n")
