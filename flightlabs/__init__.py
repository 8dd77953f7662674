"""
Async client for the FlightLabs flight-data API.
"""

from flightlabs.config import FlightLabsConfig
from flightlabs.service import FlightLabsService
from flightlabs.services.errors import ErrorKind, FlightLabsError

__all__ = ["FlightLabsConfig", "FlightLabsService", "ErrorKind", "FlightLabsError"]

__version__ = "0.1.0"
