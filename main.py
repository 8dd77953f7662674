"""
FlightLabs example entry point.

Usage:
    python main.py LHR SIN
"""

import asyncio
import sys

from loguru import logger

from flightlabs import FlightLabsError, FlightLabsService
from flightlabs.analysis.export import format_duration
from flightlabs.settings import global_settings


async def main(origin: str, destination: str) -> None:
    """Print route competition and one-stop connections for a city pair."""
    config = global_settings.to_config()

    async with FlightLabsService(config) as service:
        try:
            competition = await service.get_route_competition(origin, destination)
            logger.info(
                f"{origin}->{destination}: {competition.total_flights} direct flights, "
                f"competition level {competition.competition_level}"
            )
            for share in competition.airlines:
                logger.info(
                    f"  {share.airline}: {share.market_share}% "
                    f"({share.flights} flights, avg {format_duration(share.avg_duration)})"
                )

            result = await service.find_connecting_routes(
                origin, destination, max_layover_minutes=240
            )
            for conn in result.connections[:10]:
                logger.info(
                    f"  via {conn.connecting_airport}: "
                    f"{conn.outbound.flight_iata} + {conn.inbound.flight_iata}, "
                    f"layover {format_duration(conn.layover_minutes)}, "
                    f"total {format_duration(conn.total_duration_minutes)}"
                )

            stats = service.get_cache_stats()
            if stats:
                logger.info(f"Cache: {stats.size}/{stats.max_size} entries")

        except FlightLabsError as e:
            logger.error(f"FlightLabs request failed [{e.kind.value}] {e.code}: {e.message}")
            raise SystemExit(1) from e


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(2)
    asyncio.run(main(sys.argv[1].upper(), sys.argv[2].upper()))
