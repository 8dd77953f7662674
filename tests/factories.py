"""Raw API record builders shared by the tests."""

from typing import Any


def route_record(
    dep: str,
    arr: str,
    dep_time: str,
    arr_time: str,
    days: list[str] | str,
    airline: str = "EK",
    flight_number: str = "1",
    duration: int | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Routes-endpoint record as the API returns it."""
    record = {
        "airline_iata": airline,
        "airline_icao": f"{airline}X",
        "flight_number": flight_number,
        "flight_iata": f"{airline}{flight_number}",
        "dep_iata": dep,
        "arr_iata": arr,
        "dep_time": dep_time,
        "arr_time": arr_time,
        "duration": 60 if duration is None else duration,
        "days": days,
        "counter": 1,
        "cs_airline_iata": None,
        "cs_flight_iata": None,
    }
    record.update(extra)
    return record
