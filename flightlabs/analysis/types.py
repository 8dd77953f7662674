"""
Route analysis types using Pydantic models.
"""

from enum import Enum
from typing import Any, Iterable, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

MINUTES_PER_DAY = 24 * 60


class Weekday(str, Enum):
    """Day of operation, as the API abbreviates it."""

    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"
    SUN = "sun"

    @classmethod
    def parse(cls, value: "str | Weekday") -> "Weekday":
        """Accept "mon", "Monday", "MON"..."""
        if isinstance(value, Weekday):
            return value
        return cls(str(value).strip().lower()[:3])

    @property
    def full_name(self) -> str:
        return _FULL_NAMES[self]


_FULL_NAMES = {
    Weekday.MON: "Monday",
    Weekday.TUE: "Tuesday",
    Weekday.WED: "Wednesday",
    Weekday.THU: "Thursday",
    Weekday.FRI: "Friday",
    Weekday.SAT: "Saturday",
    Weekday.SUN: "Sunday",
}

WEEK = tuple(Weekday)


def ordered_days(days: Iterable[Weekday]) -> list[Weekday]:
    """Days in calendar order, Monday first."""
    day_set = set(days)
    return [day for day in WEEK if day in day_set]


def parse_time_to_minutes(value: str) -> int:
    """Parse "HH:MM" (seconds ignored) to minutes since midnight."""
    hours, minutes = value.strip().split(":")[:2]
    return int(hours) * 60 + int(minutes)


class Route(BaseModel):
    """A scheduled route record from the routes endpoint. Immutable."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    airline_iata: str
    airline_icao: str | None = None
    flight_number: str = ""
    flight_iata: str | None = None
    flight_icao: str | None = None
    cs_airline_iata: str | None = None
    cs_flight_iata: str | None = None
    cs_flight_number: str | None = None
    dep_iata: str
    dep_icao: str | None = None
    dep_terminals: tuple[str, ...] | None = None
    dep_time: str
    arr_iata: str
    arr_icao: str | None = None
    arr_terminals: tuple[str, ...] | None = None
    arr_time: str
    duration: int = 0
    aircraft_icao: str | None = None
    counter: int = 0
    days: frozenset[Weekday] = Field(default_factory=frozenset)

    @field_validator("days", mode="before")
    @classmethod
    def _normalize_days(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = value.split(",")
        return frozenset(Weekday.parse(day) for day in value if str(day).strip())

    @field_validator("flight_number", mode="before")
    @classmethod
    def _stringify_flight_number(cls, value: Any) -> Any:
        return "" if value is None else str(value)

    @field_validator("dep_time", "arr_time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        minutes = parse_time_to_minutes(value)
        if not 0 <= minutes < MINUTES_PER_DAY:
            raise ValueError(f"time of day out of range: {value}")
        return value

    @property
    def is_codeshare(self) -> bool:
        return self.cs_airline_iata is not None and self.cs_flight_iata is not None

    @property
    def departure_minutes(self) -> int:
        return parse_time_to_minutes(self.dep_time)

    @property
    def arrival_minutes(self) -> int:
        return parse_time_to_minutes(self.arr_time)

    def operates_on(self, day: "str | Weekday") -> bool:
        return Weekday.parse(day) in self.days


class ConnectionCandidate(BaseModel):
    """A one-stop itinerary: outbound leg, layover, inbound leg."""

    model_config = ConfigDict(frozen=True)

    outbound: Route
    inbound: Route
    connecting_airport: str
    layover_minutes: int
    operating_days: frozenset[Weekday]
    total_duration_minutes: int


class ConnectionPoint(BaseModel):
    """How many candidates pass through one connecting airport."""

    airport: str
    options: int
    airlines: list[str]


class ConnectionSearchResult(BaseModel):
    """Direct routes plus one-stop connections between two airports."""

    direct_routes: list[Route] = Field(default_factory=list)
    connections: list[ConnectionCandidate] = Field(default_factory=list)
    connection_points: list[ConnectionPoint] = Field(default_factory=list)

    @property
    def direct_available(self) -> bool:
        return bool(self.direct_routes)

    @property
    def best_connection(self) -> ConnectionCandidate | None:
        return self.connections[0] if self.connections else None


CompetitionLevel = Literal["none", "monopoly", "low", "medium", "high"]
HubType = Literal["hub", "focus", "destination"]


class AirlineMarketShare(BaseModel):
    """One airline's share of a route."""

    airline: str
    flights: int
    market_share: int
    avg_duration: int
    has_codeshare: bool
    operating_days: list[Weekday]


class RouteCompetition(BaseModel):
    """Competition analysis for one origin/destination pair."""

    airlines: list[AirlineMarketShare] = Field(default_factory=list)
    total_flights: int = 0
    competition_level: CompetitionLevel = "none"


class AirportHub(BaseModel):
    """Hub classification of one airport within an airline network."""

    airport: str
    type: HubType
    connections: int
    routes: int


class AirlineNetwork(BaseModel):
    """Summary of an airline's route network."""

    total_routes: int
    unique_airports: int
    network_map: dict[str, list[str]] = Field(default_factory=dict)
    hubs: list[str] = Field(default_factory=list)
    focus_cities: list[str] = Field(default_factory=list)
    connectivity: dict[str, int] = Field(default_factory=dict)
    hub_analysis: list[AirportHub] = Field(default_factory=list)


class RoutePair(BaseModel):
    """Aggregate over all flights on one origin-destination pair."""

    route: str
    airlines: list[str]
    flights: int
    min_duration: int
    max_duration: int
    avg_duration: int


class RouteStatistics(BaseModel):
    """Statistics over a list of routes."""

    total_routes: int = 0
    unique_airlines: int = 0
    unique_airports: int = 0
    codeshare_routes: int = 0
    by_airline: dict[str, int] = Field(default_factory=dict)
    by_day_of_week: dict[Weekday, int] = Field(default_factory=dict)
    average_duration: int = 0
    shortest_route: Route | None = None
    longest_route: Route | None = None
    most_frequent_route: Route | None = None
    routes_with_terminals: int = 0
    routes_with_aircraft: int = 0
