"""In-memory stand-ins shared by the unit and integration tests."""

import asyncio
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any

from app.application.interfaces import BookingBackend
from app.domain.entities import Booking

BASE_TIME = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def make_booking(booking_id: str, minutes: int = 0, **overrides: Any) -> Booking:
    """Booking created ``minutes`` after BASE_TIME."""
    return Booking(
        id=booking_id,
        created_at=BASE_TIME + timedelta(minutes=minutes),
        **overrides,
    )


class FakeBookingBackend(BookingBackend):
    """In-memory fake backend for unit testing.

    ``list_errors`` are raised by successive ``list_rows`` calls before they
    start succeeding; ``fail_updates`` maps booking ids to the error their
    update raises. Setting ``hang`` makes ``list_rows`` never answer.
    """

    def __init__(self, rows: list[Booking] | None = None):
        self.rows: list[Booking] = list(rows or [])
        self.list_calls = 0
        self.list_errors: list[Exception] = []
        self.hang = False
        self.updates: list[tuple[str, str, dict[str, Any]]] = []
        self.fail_updates: dict[str, Exception] = {}
        self.update_gate: asyncio.Event | None = None

    async def list_rows(
        self,
        table: str,
        *,
        order_by: str = "created_at",
        descending: bool = True,
    ) -> list[Booking]:
        self.list_calls += 1
        if self.hang:
            await asyncio.Event().wait()
        if self.list_errors:
            raise self.list_errors.pop(0)
        return sorted(self.rows, key=lambda b: getattr(b, order_by), reverse=descending)

    async def update_row(self, table: str, row_id: str, fields: dict[str, Any]) -> None:
        self.updates.append((table, row_id, dict(fields)))
        if self.update_gate is not None:
            await self.update_gate.wait()
        if row_id in self.fail_updates:
            raise self.fail_updates[row_id]
        self.rows = [replace(b, **fields) if b.id == row_id else b for b in self.rows]

    async def count_rows(self, table: str) -> int:
        return len(self.rows)

    async def sample_row(self, table: str) -> dict[str, Any] | None:
        if not self.rows:
            return None
        first = self.rows[0]
        return {"id": first.id, "created_at": first.created_at.isoformat(), "status": first.status}

    def add(self, *bookings: Booking) -> None:
        self.rows.extend(bookings)


class RecordingSleeper:
    """Replaces asyncio.sleep in retry loops and records the requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class RecordingNotifier:
    """Collects toasts instead of broadcasting them."""

    def __init__(self) -> None:
        self.toasts = []

    async def notify(self, toast) -> None:
        self.toasts.append(toast)

    def kinds(self) -> list[str]:
        return [t.kind.value for t in self.toasts]
