from .booking import (
    Address,
    Booking,
    BookingStatus,
    EDITABLE_FIELDS,
    PaymentStatus,
    ServiceLine,
)
from .pending_edit import PendingEdit
from .fetch_result import FetchResult, SaveSummary
from .toast import Toast, ToastKind

__all__ = [
    "Address",
    "Booking",
    "BookingStatus",
    "EDITABLE_FIELDS",
    "PaymentStatus",
    "ServiceLine",
    "PendingEdit",
    "FetchResult",
    "SaveSummary",
    "Toast",
    "ToastKind",
]
