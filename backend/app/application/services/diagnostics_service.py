"""Diagnostics service — configuration report and backend connection test."""

import logging
from dataclasses import dataclass, field
from typing import Any

from app.application.interfaces import BookingBackend
from app.domain.exceptions import BackendError, FetchTimeoutError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectionTestResult:
    """Outcome of a connection test against the bookings table."""

    ok: bool
    row_count: int | None = None
    columns: list[str] = field(default_factory=list)
    sample: dict[str, Any] | None = None
    error: str | None = None


class DiagnosticsService:
    """Troubleshooting helpers for the operator's debug panel."""

    def __init__(
        self,
        backend: BookingBackend | None,
        *,
        table: str,
        supabase_url: str,
        supabase_anon_key: str,
        poll_interval_seconds: float,
    ):
        self._backend = backend
        self._table = table
        self._url = supabase_url
        self._key = supabase_anon_key
        self._poll_interval = poll_interval_seconds

    def describe(self) -> dict[str, Any]:
        """Which settings are present; the key itself is never exposed."""
        key = self._key.strip()
        return {
            "supabase_url_configured": bool(self._url.strip()),
            "supabase_key_configured": bool(key),
            "supabase_key_length": len(key) if key else None,
            "bookings_table": self._table,
            "poll_interval_seconds": self._poll_interval,
        }

    async def test_connection(self) -> ConnectionTestResult:
        """Count the bookings and inspect one sample row's columns.

        A failing sample lookup does not fail the test once the count succeeded.
        """
        if self._backend is None:
            return ConnectionTestResult(ok=False, error="Database configuration is incomplete.")

        try:
            count = await self._backend.count_rows(self._table)
        except (BackendError, FetchTimeoutError) as exc:
            logger.error("Test connection error: %s", exc)
            return ConnectionTestResult(ok=False, error=str(exc))

        try:
            sample = await self._backend.sample_row(self._table)
        except (BackendError, FetchTimeoutError) as exc:
            logger.warning("Error fetching sample booking: %s", exc)
            sample = None

        return ConnectionTestResult(
            ok=True,
            row_count=count,
            columns=sorted(sample) if sample else [],
            sample=sample,
        )
