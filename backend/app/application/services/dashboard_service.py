"""Dashboard service — owns the operator-facing view state and its notifications."""

import logging
from dataclasses import dataclass
from datetime import datetime

from app.application.services.booking_fetcher import BookingFetcher
from app.application.services.edit_buffer import EditBuffer
from app.application.services.sse_manager import SSEManager
from app.domain.entities import Booking, FetchResult, PendingEdit, SaveSummary, Toast, ToastKind
from app.domain.exceptions import (
    BackendError,
    ConfigError,
    FetchTimeoutError,
    SaveError,
)

logger = logging.getLogger(__name__)

SORT_FIELDS = ("created_at", "preferred_date")

# Newest bookings first, soonest appointments first
_DEFAULT_DIRECTION = {"created_at": "desc", "preferred_date": "asc"}


@dataclass(frozen=True)
class DashboardView:
    """Read model rendered by the bookings page."""

    bookings: list[Booking]
    loading: bool
    refreshing: bool
    error: str | None
    last_updated: datetime | None
    new_bookings_count: int
    pending_count: int
    config_error: str | None


class DashboardService:
    """Orchestrates fetches, local edits and notifications for one dashboard.

    The fetched rows live in the fetcher's last FetchResult and the edits in
    the EditBuffer; this service only keeps the loading/error flags and the
    new-bookings badge. Silent refreshes never touch loading or error state.
    """

    def __init__(
        self,
        fetcher: BookingFetcher,
        edit_buffer: EditBuffer,
        notifier: SSEManager | None = None,
        *,
        config_error: ConfigError | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._edits = edit_buffer
        self._notifier = notifier
        self._config_error = config_error
        self.loading = config_error is None
        self.refreshing = False
        self.error: str | None = str(config_error) if config_error else None
        self.new_bookings_count = 0

    @property
    def config_error(self) -> ConfigError | None:
        return self._config_error

    @property
    def last_updated(self) -> datetime | None:
        result = self._fetcher.last_result
        return result.fetched_at if result else None

    # ── Refresh ──────────────────────────────────────────────────────

    async def refresh(self, *, manual: bool = False, silent: bool = False) -> FetchResult | None:
        """Fetch bookings and fold the outcome into the view state.

        Fetch errors never propagate: non-silent failures set ``error`` and
        emit a ``fetch_failed`` toast, silent ones are only logged.
        """
        if self._config_error is not None:
            logger.warning("Refresh skipped: %s", self._config_error)
            return None

        if manual:
            self.refreshing = True
            self.new_bookings_count = 0
        elif self.last_updated is None and not silent:
            self.loading = True
        if not silent:
            self.error = None

        try:
            result = await self._fetcher.fetch(silent=silent)
        except FetchTimeoutError as exc:
            await self._fetch_failed(
                f"Connection error: {exc}. Please check your network connection and try again."
            )
            return None
        except BackendError as exc:
            await self._fetch_failed(f"Failed to load bookings: {exc.message or 'Unknown error'}")
            return None
        except ConfigError as exc:
            self.error = str(exc)
            return None
        finally:
            if not silent:
                self.loading = False
                self.refreshing = False

        if result is not None and result.new_rows > 0:
            await self._announce_new_bookings(result.new_rows)
        return result

    async def _fetch_failed(self, message: str) -> None:
        self.error = message
        await self._notify(
            Toast(
                kind=ToastKind.FETCH_FAILED,
                title="Error loading bookings",
                description=message,
                variant="destructive",
                retryable=True,
            )
        )

    async def _announce_new_bookings(self, count: int) -> None:
        self.new_bookings_count += count
        await self._notify(
            Toast(
                kind=ToastKind.NEW_BOOKINGS,
                title=f"{count} New Booking{'s' if count > 1 else ''}",
                description="New bookings have been received",
                count=count,
            )
        )

    # ── View ─────────────────────────────────────────────────────────

    def list_bookings(
        self, sort_field: str = "created_at", direction: str | None = None
    ) -> list[Booking]:
        """Merged rows (pending edits overlaid) sorted for display."""
        if sort_field not in SORT_FIELDS:
            raise ValueError(f"Cannot sort by '{sort_field}'")
        direction = direction or _DEFAULT_DIRECTION[sort_field]
        if direction not in ("asc", "desc"):
            raise ValueError(f"Unknown sort direction '{direction}'")

        result = self._fetcher.last_result
        rows = self._edits.merge_rows(result.rows) if result else []

        dated = [r for r in rows if getattr(r, sort_field) is not None]
        undated = [r for r in rows if getattr(r, sort_field) is None]
        dated.sort(key=lambda r: getattr(r, sort_field), reverse=direction == "desc")
        return dated + undated

    def view(self, sort_field: str = "created_at", direction: str | None = None) -> DashboardView:
        return DashboardView(
            bookings=self.list_bookings(sort_field, direction),
            loading=self.loading,
            refreshing=self.refreshing,
            error=self.error,
            last_updated=self.last_updated,
            new_bookings_count=self.new_bookings_count,
            pending_count=len(self._edits),
            config_error=str(self._config_error) if self._config_error else None,
        )

    # ── Edits ────────────────────────────────────────────────────────

    def pending_edits(self) -> list[PendingEdit]:
        return self._edits.pending

    def set_field(self, booking_id: str, field_name: str, value: str) -> PendingEdit:
        return self._edits.set_field(booking_id, field_name, value)

    def discard(self, booking_id: str) -> bool:
        return self._edits.discard(booking_id)

    def discard_all(self) -> int:
        return self._edits.discard_all()

    async def save(self) -> SaveSummary:
        """Persist all pending edits; always notifies the outcome."""
        if self._config_error is not None:
            raise self._config_error
        try:
            summary = await self._edits.save()
        except SaveError as exc:
            await self._notify(
                Toast(
                    kind=ToastKind.SAVE_FAILED,
                    title="Update failed",
                    description=str(exc),
                    variant="destructive",
                    count=len(exc.failed),
                )
            )
            raise

        if summary.updated_count:
            await self._notify(
                Toast(
                    kind=ToastKind.SAVE_SUCCESS,
                    title="Changes saved",
                    description=f"{summary.updated_count} booking(s) updated",
                    count=summary.updated_count,
                )
            )
        return summary

    async def _notify(self, toast: Toast) -> None:
        if self._notifier is not None:
            await self._notifier.notify(toast)
