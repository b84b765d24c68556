"""Domain entities for booking records as listed on the admin dashboard."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class BookingStatus(str, Enum):
    """Lifecycle states of a booking."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Payment states of a booking."""

    NOT_PAID = "Not Paid"
    PAID = "Paid"
    REFUNDED = "Refunded"
    PARTIAL = "Partial"


# Mutable status field → the enum holding its allowed values
EDITABLE_FIELDS: dict[str, type[Enum]] = {
    "status": BookingStatus,
    "payment_status": PaymentStatus,
}


@dataclass(frozen=True)
class Address:
    """Structured property address."""

    street: str = ""
    city: str = ""
    province: str = ""
    zip_code: str = ""
    street2: str | None = None

    def format(self) -> str:
        """Single-line address, e.g. '12 Main St, Unit 4, Toronto, ON M5V 1A1'."""
        parts = [p for p in (self.street, self.street2, self.city) if p]
        line = ", ".join(parts)
        if line:
            line += ", "
        return f"{line}{self.province} {self.zip_code}".strip()


@dataclass(frozen=True)
class ServiceLine:
    """One booked service with its quantity and pricing."""

    name: str
    count: int = 1
    price: float = 0.0
    total: float = 0.0


@dataclass(frozen=True)
class Booking:
    """Core domain entity: one booking record as returned by the backend.

    Only ``status`` and ``payment_status`` are editable from the dashboard;
    every other field is descriptive and owned by the backend.
    """

    id: str
    created_at: datetime
    status: str = BookingStatus.PENDING.value
    payment_status: str | None = None
    preferred_date: datetime | None = None
    property_size: str = ""
    property_status: str = ""
    services: tuple[ServiceLine, ...] = field(default_factory=tuple)
    total_amount: float = 0.0
    address: Address = field(default_factory=Address)
    notes: str = ""
    user_id: str | None = None
    agent_name: str = ""
    agent_email: str = ""
    agent_phone: str = ""
    agent_company: str = ""

    @property
    def effective_payment_status(self) -> str:
        """Payment status as shown to the operator ('Not Paid' when unset)."""
        return self.payment_status or PaymentStatus.NOT_PAID.value
