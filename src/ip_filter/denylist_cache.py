"""
Time-bounded cache of the exit-node denylist.

The cache owns one immutable DenylistSnapshot. A snapshot younger than the
TTL is served without I/O. Otherwise the source is fetched once (concurrent
callers share the in-flight refresh) and the snapshot is swapped on success.
A failed refresh keeps the previous snapshot and its timestamp, so the next
call tries again; with no previous snapshot the denylist reads as empty.
Fetch problems never reach the caller.
"""

import asyncio
import time
from typing import Callable, Optional, Protocol

from .audit_logger import AuditLogger
from .config import DEFAULT_TTL_SECONDS
from .denylist_client import DenylistError, DenylistFetchResponse
from .enums import DenylistErrorCode, DenylistStatus
from .i18n import get_message
from .models import Address, DenylistSnapshot
from .retry_manager import RetryManager


COMPONENT = "denylist"


class DenylistSource(Protocol):
    """Anything that can fetch the denylist (DenylistClient or a test double)."""

    async def fetch(self) -> DenylistFetchResponse:
        ...


class DenylistCache:
    """
    Injectable denylist cache with TTL and stale-on-failure fallback.

    Each server instance owns its cache; nothing is shared at module level.
    """

    def __init__(
        self,
        source: DenylistSource,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        retry_manager: Optional[RetryManager] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the cache.

        Args:
            source: Denylist source to refresh from
            ttl_seconds: How long a snapshot is served without refetching
            clock: Monotonic time source in seconds (tests pass a fake)
            retry_manager: Optional retry policy around each refresh
            logger: Optional audit logger for refresh outcomes
        """
        self._source = source
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._retry_manager = retry_manager
        self._logger = logger
        self._snapshot: Optional[DenylistSnapshot] = None
        self._refresh_task: Optional[asyncio.Future] = None

    @property
    def snapshot(self) -> Optional[DenylistSnapshot]:
        """The last successfully fetched snapshot, if any."""
        return self._snapshot

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def is_fresh(self, snapshot: Optional[DenylistSnapshot] = None) -> bool:
        """Check whether a snapshot (default: the current one) is within the TTL."""
        if snapshot is None:
            snapshot = self._snapshot
        if snapshot is None:
            return False
        return self._clock() - snapshot.fetched_at < self._ttl_seconds

    async def current_snapshot(self) -> tuple[str, ...]:
        """
        Return the current denylist entries, refreshing if stale.

        Returns:
            Entries of the fresh snapshot, the previous snapshot when a
            refresh fails, or an empty tuple when nothing was ever fetched
        """
        snapshot = self._snapshot
        if self.is_fresh(snapshot):
            return snapshot.entries

        if self._refresh_task is None:
            self._refresh_task = asyncio.ensure_future(self._refresh())

        # Shielded so one cancelled waiter does not cancel the shared refresh
        return await asyncio.shield(self._refresh_task)

    async def is_listed(self, address: Address) -> bool:
        """Check whether the address's canonical text is a denylist entry."""
        await self.current_snapshot()
        snapshot = self._snapshot
        return snapshot is not None and snapshot.contains(address.text)

    async def _refresh(self) -> tuple[str, ...]:
        try:
            started_at = self._clock()
            try:
                response, attempts = await self._fetch()
            except Exception as e:
                # Any source failure degrades to the previous snapshot
                response = DenylistFetchResponse(
                    status=DenylistStatus.ERROR,
                    error=DenylistError(
                        code=DenylistErrorCode.NETWORK_ERROR,
                        message=getattr(e, "message", None) or str(e) or type(e).__name__,
                    ),
                )
                return self._fall_back(response, 1, error=e)

            if response.status == DenylistStatus.OK:
                snapshot = DenylistSnapshot(
                    entries=tuple(response.entries),
                    fetched_at=started_at,
                )
                self._snapshot = snapshot
                if self._logger:
                    self._logger.info(
                        COMPONENT,
                        get_message("denylist.refreshed", count=len(snapshot)),
                        {"attempts": attempts, "response_time_ms": response.response_time_ms},
                    )
                return snapshot.entries

            return self._fall_back(response, attempts)
        finally:
            self._refresh_task = None

    async def _fetch(self) -> tuple[DenylistFetchResponse, int]:
        if self._retry_manager is not None:
            return await self._retry_manager.execute_fetch_with_retry(self._source.fetch)
        return await self._source.fetch(), 1

    def _fall_back(
        self,
        response: DenylistFetchResponse,
        attempts: int,
        error: Optional[Exception] = None,
    ) -> tuple[str, ...]:
        previous = self._snapshot
        error_message = response.error.message if response.error else "unknown error"

        if self._logger:
            self._logger.log_error(
                COMPONENT,
                get_message("denylist.fetch_failed", error=error_message),
                error=error,
                request_url=getattr(self._source, "url", None),
                response_status_code=response.http_status_code or None,
                additional_data={"attempts": attempts},
            )

        if previous is None:
            return ()

        if self._logger:
            self._logger.warn(
                COMPONENT,
                get_message("denylist.using_stale", count=len(previous)),
                {"age_seconds": self._clock() - previous.fetched_at},
            )
        return previous.entries
