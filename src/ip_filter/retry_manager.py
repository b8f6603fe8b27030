"""
Retry Manager for denylist fetches.

Retries transient fetch errors (timeouts, connection failures, 5xx, 429)
with exponential backoff. When retries run out, the last error response is
returned and the cache falls back to its previous snapshot.
"""

import asyncio
from typing import Awaitable, Callable

from .config import RetryConfig
from .denylist_client import DenylistFetchResponse


class RetryManager:
    """Manages retry logic with exponential backoff."""

    def __init__(
        self,
        config: RetryConfig,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the retry manager.

        Args:
            config: Retry configuration with max_retries, delays, and retryable errors
            sleep: Awaitable used to wait between attempts (tests pass a fake)
        """
        self._config = config
        self._sleep = sleep

    def _calculate_delay(self, attempt: int) -> float:
        """
        Calculate wait time with exponential backoff.

        delay(n) = base_delay * 2^n, capped at max_delay.

        Args:
            attempt: The current attempt number (0-indexed)
        """
        delay = self._config.base_delay_seconds * (2 ** attempt)
        return min(delay, self._config.max_delay_seconds)

    def should_retry(self, response: DenylistFetchResponse) -> bool:
        """Retry only error responses whose code is configured as retryable."""
        if response.ok or response.error is None:
            return False
        return response.error.code.value in self._config.retryable_errors

    async def execute_fetch_with_retry(
        self,
        operation: Callable[[], Awaitable[DenylistFetchResponse]],
    ) -> tuple[DenylistFetchResponse, int]:
        """
        Execute a denylist fetch with retry logic.

        Args:
            operation: The async fetch operation to execute

        Returns:
            Tuple of (final DenylistFetchResponse, number of attempts)
        """
        max_attempts = self._config.max_retries + 1
        attempts = 0

        while True:
            response = await operation()
            attempts += 1

            if not self.should_retry(response) or attempts >= max_attempts:
                return response, attempts

            await self._sleep(self._calculate_delay(attempts - 1))
