"""Abstract backend interface (port) for the managed bookings database."""

from abc import ABC, abstractmethod
from typing import Any

from app.domain.entities import Booking


class BookingBackend(ABC):
    """Port for the hosted database capability — implemented in the infrastructure layer.

    Implementations raise ``BackendError`` when the backend answers with an
    error and ``FetchTimeoutError`` when it does not answer in time.
    """

    @abstractmethod
    async def list_rows(
        self,
        table: str,
        *,
        order_by: str = "created_at",
        descending: bool = True,
    ) -> list[Booking]:
        """Return every row of ``table`` as one snapshot, in the requested order."""
        ...

    @abstractmethod
    async def update_row(
        self, table: str, row_id: str, fields: dict[str, Any]
    ) -> None:
        """Write only ``fields`` onto the row identified by ``row_id``."""
        ...

    @abstractmethod
    async def count_rows(self, table: str) -> int:
        """Return the exact number of rows in ``table``."""
        ...

    @abstractmethod
    async def sample_row(self, table: str) -> dict[str, Any] | None:
        """Return one raw row (for schema inspection), or None when empty."""
        ...
