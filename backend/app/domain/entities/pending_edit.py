"""Domain entity for unsaved, optimistic edits to a booking."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class PendingEdit:
    """Local field overrides for one booking that are not yet persisted.

    There is at most one PendingEdit per booking id; later edits to the same
    booking merge into ``fields`` (last write wins per field).
    """

    booking_id: str
    fields: dict[str, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def set(self, field_name: str, value: str) -> None:
        """Merge one field override and refresh the updated_at timestamp."""
        self.fields[field_name] = value
        self.updated_at = datetime.now(timezone.utc)

    def forget(self, sent: dict[str, str]) -> None:
        """Drop the overrides that still hold exactly the values in ``sent``.

        Fields that were changed again after ``sent`` was captured are kept.
        """
        for name, value in sent.items():
            if self.fields.get(name) == value:
                del self.fields[name]
        self.updated_at = datetime.now(timezone.utc)

    @property
    def is_empty(self) -> bool:
        return not self.fields
