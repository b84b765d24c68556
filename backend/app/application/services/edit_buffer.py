"""Edit buffer — optimistic, unsaved status edits and their batch save."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import Any

from app.application.interfaces import BookingBackend
from app.domain.entities import EDITABLE_FIELDS, Booking, PendingEdit, SaveSummary
from app.domain.exceptions import InvalidEditError, SaveError
from app.infrastructure.logging.colored_logger import DashboardLogger, DashboardStage

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[], Awaitable[Any]]


class EditBuffer:
    """Sole owner of the PendingEdits, keyed by booking id.

    Edits are only overlaid on fetched rows for display until ``save()``
    writes them. On a partial failure, succeeded rows are cleared and failed
    rows keep their edits so the operator can retry.
    """

    def __init__(
        self,
        backend: BookingBackend | None,
        *,
        table: str = "bookings",
        on_saved: RefreshCallback | None = None,
    ) -> None:
        self._backend = backend
        self._table = table
        self._on_saved = on_saved
        self._edits: dict[str, PendingEdit] = {}
        self._log = DashboardLogger("EditBuffer")

    @property
    def pending(self) -> list[PendingEdit]:
        return list(self._edits.values())

    def get(self, booking_id: str) -> PendingEdit | None:
        return self._edits.get(booking_id)

    def __len__(self) -> int:
        return len(self._edits)

    def set_field(self, booking_id: str, field_name: str, value: str) -> PendingEdit:
        """Upsert a PendingEdit for ``booking_id`` with one field override."""
        if not booking_id:
            raise InvalidEditError(field_name, value, "missing booking id")
        canonical = self._validate(field_name, value)

        edit = self._edits.get(booking_id)
        if edit is None:
            edit = PendingEdit(booking_id=booking_id)
            self._edits[booking_id] = edit
        edit.set(field_name, canonical)
        self._log.step_complete(
            DashboardStage.EDIT, f"Pending change for {booking_id}", field=field_name, value=canonical
        )
        return edit

    def get_merged_row(self, row: Booking) -> Booking:
        """Return ``row`` with its pending overrides applied; ``row`` is not modified."""
        edit = self._edits.get(row.id)
        if edit is None or edit.is_empty:
            return row
        return replace(row, **edit.fields)

    def merge_rows(self, rows: list[Booking] | tuple[Booking, ...]) -> list[Booking]:
        return [self.get_merged_row(row) for row in rows]

    def discard(self, booking_id: str) -> bool:
        """Drop the pending edit for one booking. Returns False if there was none."""
        return self._edits.pop(booking_id, None) is not None

    def discard_all(self) -> int:
        count = len(self._edits)
        self._edits.clear()
        return count

    async def save(self) -> SaveSummary:
        """Write every pending edit concurrently, one update per booking.

        Only the overridden fields are sent. Raises ``SaveError`` if any
        update fails; the edits of the failed bookings are retained.
        """
        if self._backend is None:
            raise SaveError({"*": "Database configuration is incomplete."}, [])

        snapshot = {
            booking_id: dict(edit.fields)
            for booking_id, edit in self._edits.items()
            if not edit.is_empty
        }
        if not snapshot:
            return SaveSummary(updated_ids=())

        with self._log.timed_step(DashboardStage.SAVE, f"Saving {len(snapshot)} booking(s)"):
            ids = list(snapshot)
            results = await asyncio.gather(
                *(
                    self._backend.update_row(self._table, booking_id, fields)
                    for booking_id, fields in snapshot.items()
                ),
                return_exceptions=True,
            )

        succeeded: list[str] = []
        failed: dict[str, str] = {}
        for booking_id, result in zip(ids, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error("Update of booking %s failed: %s", booking_id, result)
                failed[booking_id] = str(result)
            else:
                succeeded.append(booking_id)
                self._clear_sent(booking_id, snapshot[booking_id])

        if succeeded and self._on_saved is not None:
            try:
                await self._on_saved()
            except Exception:
                logger.exception("Refresh after save failed")

        if failed:
            raise SaveError(failed, succeeded)
        return SaveSummary(updated_ids=tuple(succeeded))

    def _clear_sent(self, booking_id: str, sent: dict[str, str]) -> None:
        edit = self._edits.get(booking_id)
        if edit is None:
            return
        edit.forget(sent)
        if edit.is_empty:
            del self._edits[booking_id]

    @staticmethod
    def _validate(field_name: str, value: str) -> str:
        """Check the field is editable and return the canonical spelling of ``value``."""
        options = EDITABLE_FIELDS.get(field_name)
        if options is None:
            raise InvalidEditError(
                field_name, value, f"only {', '.join(EDITABLE_FIELDS)} can be edited"
            )
        if not value or not value.strip():
            raise InvalidEditError(field_name, value, "missing status value")
        for option in options:
            if option.value.lower() == value.strip().lower():
                return option.value
        allowed = ", ".join(o.value for o in options)
        raise InvalidEditError(field_name, value, f"expected one of: {allowed}")
