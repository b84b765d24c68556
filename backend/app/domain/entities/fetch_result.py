"""Value objects produced by the booking fetch and save operations."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from .booking import Booking


@dataclass(frozen=True)
class FetchResult:
    """One snapshot of the bookings table.

    ``new_rows`` is the positive row-count delta against the previous fetch
    (0 when the count did not grow or when this is the first fetch).
    """

    rows: tuple[Booking, ...]
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    new_rows: int = 0

    @property
    def count(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class SaveSummary:
    """Outcome of a successful batch save."""

    updated_ids: tuple[str, ...]

    @property
    def updated_count(self) -> int:
        return len(self.updated_ids)
