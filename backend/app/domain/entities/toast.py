"""Domain entity for transient operator notifications."""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class ToastKind(str, Enum):
    """Machine-readable notification types pushed to the dashboard."""

    NEW_BOOKINGS = "new_bookings"
    SAVE_SUCCESS = "save_success"
    SAVE_FAILED = "save_failed"
    FETCH_FAILED = "fetch_failed"


@dataclass(frozen=True)
class Toast:
    """A toast-style message shown briefly in the operator's browser."""

    kind: ToastKind
    title: str
    description: str
    variant: str = "default"  # "default" | "destructive"
    count: int | None = None
    retryable: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data
