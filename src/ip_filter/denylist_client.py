"""
Denylist client for the Tor exit-node list.

This module provides an async HTTP client that downloads the exit-address
list and extracts the address field of every line starting with the
configured token (``ExitAddress`` for the Tor Project's list). The client
never raises: network, status and parse problems come back as an ERROR
response so callers can fall back to cached data.
"""

import time
from dataclasses import dataclass, field
from typing import Optional

import httpx

from .config import DenylistConfig
from .enums import DenylistErrorCode, DenylistStatus


@dataclass
class DenylistError:
    """Error information from a denylist fetch."""

    code: DenylistErrorCode
    message: str
    http_status_code: Optional[int] = None


@dataclass
class DenylistFetchResponse:
    """Complete denylist fetch response."""

    status: DenylistStatus
    entries: list[str] = field(default_factory=list)
    http_status_code: int = 0
    error: Optional[DenylistError] = None
    response_time_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == DenylistStatus.OK


def parse_exit_addresses(text: str, token: str = "ExitAddress") -> list[str]:
    """
    Extract denylisted addresses from the exit-address list format.

    Lines look like ``ExitAddress 192.0.2.1 2024-01-01 00:00:00``; the second
    space-separated field is the address. Other lines are ignored, as are
    token lines without an address field.

    Args:
        text: Raw response body
        token: Literal token a relevant line starts with

    Returns:
        Addresses in upstream order
    """
    entries = []
    for line in text.splitlines():
        if not line.startswith(token):
            continue
        fields = line.split(" ")
        if fields[0] != token or len(fields) < 2 or not fields[1]:
            continue
        entries.append(fields[1])
    return entries


class DenylistClient:
    """
    Async client for the exit-node denylist.

    Usable as an async context manager; otherwise the underlying
    httpx.AsyncClient is created lazily on first fetch and released by close().
    """

    def __init__(
        self,
        config: Optional[DenylistConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the denylist client.

        Args:
            config: Denylist source configuration (URL, token, timeout)
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self._config = config or DenylistConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def url(self) -> str:
        return self._config.url

    @property
    def is_open(self) -> bool:
        """Whether an underlying HTTP client currently exists."""
        return self._client is not None

    async def __aenter__(self) -> "DenylistClient":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout_seconds),
                follow_redirects=True,
                headers={"User-Agent": self._config.user_agent},
                transport=self._transport,
            )
        return self._client

    async def fetch(self) -> DenylistFetchResponse:
        """
        Download and parse the denylist.

        Returns:
            DenylistFetchResponse with status OK and the parsed entries, or
            status ERROR with error details
        """
        start_time = time.perf_counter()
        client = self._ensure_client()

        try:
            response = await client.get(
                self._config.url,
                headers={"Accept": "text/plain"},
            )
        except httpx.TimeoutException:
            return self._error(
                DenylistErrorCode.TIMEOUT,
                f"Denylist request timed out after {self._config.timeout_seconds}s",
                start_time,
            )
        except httpx.HTTPError as e:
            return self._error(
                DenylistErrorCode.NETWORK_ERROR,
                f"Connection error: {e}",
                start_time,
            )

        if response.status_code == 429:
            return self._error(
                DenylistErrorCode.RATE_LIMITED,
                "Rate limited by denylist server",
                start_time,
                http_status_code=429,
            )

        if response.status_code >= 500:
            return self._error(
                DenylistErrorCode.SERVER_ERROR,
                f"Denylist server error: {response.status_code}",
                start_time,
                http_status_code=response.status_code,
            )

        if response.status_code != 200:
            return self._error(
                DenylistErrorCode.NETWORK_ERROR,
                f"Unexpected HTTP status: {response.status_code}",
                start_time,
                http_status_code=response.status_code,
            )

        try:
            body = response.text
        except (UnicodeDecodeError, LookupError) as e:
            return self._error(
                DenylistErrorCode.PARSE_ERROR,
                f"Failed to decode denylist response: {e}",
                start_time,
                http_status_code=200,
            )

        return DenylistFetchResponse(
            status=DenylistStatus.OK,
            entries=parse_exit_addresses(body, self._config.line_token),
            http_status_code=200,
            response_time_ms=self._elapsed_ms(start_time),
        )

    def _error(
        self,
        code: DenylistErrorCode,
        message: str,
        start_time: float,
        http_status_code: Optional[int] = None,
    ) -> DenylistFetchResponse:
        return DenylistFetchResponse(
            status=DenylistStatus.ERROR,
            http_status_code=http_status_code or 0,
            error=DenylistError(
                code=code,
                message=message,
                http_status_code=http_status_code,
            ),
            response_time_ms=self._elapsed_ms(start_time),
        )

    def _elapsed_ms(self, start_time: float) -> float:
        """Calculate elapsed time in milliseconds."""
        return (time.perf_counter() - start_time) * 1000

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
