"""Booking fetcher — retrieves the full bookings snapshot with timeout and retry."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from app.application.interfaces import BookingBackend
from app.domain.entities import FetchResult
from app.domain.exceptions import BackendError, ConfigError, FetchTimeoutError
from app.infrastructure.logging.colored_logger import DashboardLogger, DashboardStage

logger = logging.getLogger(__name__)

# Async delay used between retries; injected so tests never wait in real time
Sleeper = Callable[[float], Awaitable[None]]


class BookingFetcher:
    """Fetches every booking row and tracks growth of the table between fetches.

    The fetcher is the sole owner of the last FetchResult and of the row-count
    baseline used to detect new bookings. It never touches view state; the
    caller decides what a result or an error means for the dashboard.

    Retry policy: a failed non-silent fetch is retried ``max_retries`` times,
    waiting ``retry_base_delay * attempt`` seconds before each retry (1s, 2s,
    3s by default). Silent fetches run once and swallow their failure.
    """

    def __init__(
        self,
        backend: BookingBackend | None,
        *,
        table: str = "bookings",
        order_by: str = "created_at",
        descending: bool = True,
        timeout_seconds: float = 10.0,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
        sleep: Sleeper = asyncio.sleep,
        missing_config: list[str] | None = None,
    ) -> None:
        self._backend = backend
        self._table = table
        self._order_by = order_by
        self._descending = descending
        self._timeout_seconds = timeout_seconds
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._sleep = sleep
        self._missing_config = missing_config or ([] if backend else ["backend"])
        self._last_count: int | None = None
        self._last_result: FetchResult | None = None
        self._log = DashboardLogger("BookingFetcher")

    @property
    def last_result(self) -> FetchResult | None:
        return self._last_result

    @property
    def last_count(self) -> int | None:
        """Row count of the previous successful fetch (None before the first one)."""
        return self._last_count

    async def fetch(self, *, silent: bool = False) -> FetchResult | None:
        """Fetch all bookings.

        Returns the new FetchResult. In silent mode any failure is logged and
        ``None`` is returned; otherwise the final error is raised after the
        retries are exhausted (``FetchTimeoutError`` or ``BackendError``).
        A missing backend raises ``ConfigError`` without retrying.
        """
        if self._backend is None:
            error = ConfigError(self._missing_config)
            if silent:
                logger.warning("Skipping silent fetch: %s", error)
                return None
            raise error

        retries = 0 if silent else self._max_retries
        attempt = 0
        while True:
            try:
                return await self._fetch_once(attempt=attempt + 1, silent=silent)
            except (FetchTimeoutError, BackendError) as exc:
                if silent:
                    self._log.step_warning(
                        DashboardStage.FETCH,
                        "Silent fetch failed — will try again on the next poll",
                        error=exc,
                    )
                    return None
                if attempt >= retries:
                    self._log.step_error(
                        DashboardStage.FETCH,
                        f"Fetch failed after {attempt + 1} attempt(s)",
                        error=exc,
                    )
                    raise
                attempt += 1
                delay = self._retry_base_delay * attempt
                self._log.step_warning(
                    DashboardStage.FETCH,
                    f"Retrying fetch (attempt {attempt}) in {delay:g}s",
                    error=exc,
                )
                await self._sleep(delay)

    async def _fetch_once(self, *, attempt: int, silent: bool) -> FetchResult:
        self._log.step_start(
            DashboardStage.FETCH, "Fetching bookings", attempt=attempt, silent=silent
        )
        try:
            rows = await asyncio.wait_for(
                self._backend.list_rows(
                    self._table,
                    order_by=self._order_by,
                    descending=self._descending,
                ),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise FetchTimeoutError(self._timeout_seconds) from exc

        new_rows = self._track_count(len(rows))
        result = FetchResult(rows=tuple(rows), new_rows=new_rows)
        self._last_result = result
        self._log.step_complete(
            DashboardStage.FETCH, "Fetched bookings", rows=result.count, new=new_rows
        )
        return result

    def _track_count(self, count: int) -> int:
        """Update the count baseline and return the positive delta, if any.

        The first successful fetch only establishes the baseline.
        """
        previous = self._last_count
        self._last_count = count
        if previous is None or count <= previous:
            return 0
        delta = count - previous
        logger.info("%d new booking(s) detected", delta)
        return delta
