"""
FlightLabsClient - async HTTP transport for the FlightLabs API.

One call to request() is exactly one HTTP attempt. Failures are turned
into classified FlightLabsError instances; retrying and caching are the
gateway's job.
"""

import logging
from typing import Any

import httpx
from loguru import logger

from flightlabs.config import FlightLabsConfig
from flightlabs.services.cache import EXCLUDED_FIELDS
from flightlabs.services.classifier import (
    AttemptOutcome,
    error_from_outcome,
    extract_api_error,
)
from flightlabs.services.errors import ConfigurationError

# httpx logs every request URL, access_key query parameter included, at INFO
logging.getLogger("httpx").setLevel(logging.WARNING)


def redact(params: dict[str, Any]) -> dict[str, Any]:
    """Params safe to log."""
    return {k: v for k, v in params.items() if k not in EXCLUDED_FIELDS}


def unwrap_payload(body: Any) -> Any:
    """Return the data part of a {success, data} envelope or a bare array."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


class FlightLabsClient:
    """
    Thin async client around httpx.

    Usage:
        client = FlightLabsClient(FlightLabsConfig(access_key="..."))
        routes = await client.request("/routes", {"dep_iata": "LHR"})
        await client.close()
    """

    def __init__(
        self,
        config: FlightLabsConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not config.access_key:
            raise ConfigurationError("FlightLabs access key is required")

        self._config = config
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    @property
    def config(self) -> FlightLabsConfig:
        return self._config

    def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=httpx.Timeout(self._config.timeout),
                headers={"Content-Type": "application/json"},
                follow_redirects=True,
                transport=self._transport,
            )
        return self._http_client

    def build_params(self, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Query parameters with the access key added and None values dropped."""
        query = {"access_key": self._config.access_key}
        for key, value in (params or {}).items():
            if value is None:
                continue
            if isinstance(value, bool):
                value = "true" if value else "false"
            query[key] = value
        return query

    async def request(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        base_url: str | None = None,
        unwrap: bool = True,
    ) -> Any:
        """
        Perform a single GET request.

        Args:
            path: Endpoint path, e.g. "/routes"
            params: Query parameters (without the access key)
            base_url: Override the configured base URL for this endpoint
            unwrap: Return only the "data" part of an enveloped response

        Returns:
            Decoded JSON payload

        Raises:
            FlightLabsError: Classified failure of this attempt
        """
        client = self._get_http_client()
        query = self.build_params(params)
        url = f"{base_url.rstrip('/')}{path}" if base_url else path

        logger.debug(f"GET {path} params={redact(query)}")

        try:
            response = await client.get(url, params=query)
        except httpx.TransportError as e:
            raise error_from_outcome(
                AttemptOutcome(transport_error=e, timeout=self._config.timeout)
            ) from e

        try:
            body = response.json()
        except ValueError as e:
            if response.is_success:
                raise error_from_outcome(
                    AttemptOutcome(status_code=response.status_code, transport_error=e)
                ) from e
            body = None

        if not response.is_success or extract_api_error(body) is not None:
            error = error_from_outcome(
                AttemptOutcome(status_code=response.status_code, body=body)
            )
            logger.warning(
                f"FlightLabs {path} failed [{error.kind.value}] "
                f"code={error.code}: {error.message}"
            )
            raise error

        return unwrap_payload(body) if unwrap else body

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("FlightLabsClient closed")

    async def __aenter__(self) -> "FlightLabsClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
