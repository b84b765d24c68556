from .booking_backend import BookingBackend

__all__ = [
    "BookingBackend",
]
