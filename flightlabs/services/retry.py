"""
ResilientExecutor - bounded retry with a fixed delay.

Wrapped calls must be read-only fetches: a failed attempt is simply
repeated. Identical concurrent calls are not deduplicated here.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from loguru import logger

from flightlabs.services.classifier import error_from_exception

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """Retry settings for a client instance."""

    max_retries: int = 3
    retry_delay: float = 1.0  # seconds, fixed between attempts


class ResilientExecutor:
    """
    Executes a request function, retrying failures classified as transient.

    Usage:
        executor = ResilientExecutor(RetryPolicy(max_retries=2))
        data = await executor.execute(lambda: client.request("/routes", params))
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    async def execute(
        self,
        request_fn: Callable[[], Awaitable[T]],
        max_retries: int | None = None,
        retry_delay: float | None = None,
    ) -> T:
        """
        Run request_fn until it succeeds or retries are exhausted.

        Args:
            request_fn: Zero-argument coroutine factory, called once per attempt
            max_retries: Override the policy's retry count for this call
            retry_delay: Override the policy's delay (seconds) for this call

        Returns:
            Whatever request_fn returns

        Raises:
            FlightLabsError: The last classified failure
        """
        retries_left = self.policy.max_retries if max_retries is None else max_retries
        delay = self.policy.retry_delay if retry_delay is None else retry_delay
        attempt = 1

        while True:
            try:
                return await request_fn()
            except Exception as e:
                error = error_from_exception(e)

                if not error.retryable or retries_left <= 0:
                    if error.retryable:
                        logger.error(
                            f"Request failed after {attempt} attempts "
                            f"[{error.kind.value}]: {error.message}"
                        )
                    if error is e:
                        raise
                    raise error from e

                logger.warning(
                    f"Attempt {attempt} failed [{error.kind.value}]: {error.message}; "
                    f"retrying in {delay}s ({retries_left} retries left)"
                )
                retries_left -= 1
                attempt += 1
                await self._sleep(delay)
