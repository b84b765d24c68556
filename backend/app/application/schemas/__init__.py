from .booking import (
    AddressResponse,
    BookingResponse,
    ConnectionTestResponse,
    DashboardResponse,
    DiagnosticsResponse,
    DiscardResponse,
    PendingEditRequest,
    PendingEditResponse,
    SaveResponse,
    ServiceLineResponse,
    VisibilityRequest,
    VisibilityResponse,
)

__all__ = [
    "AddressResponse",
    "BookingResponse",
    "ConnectionTestResponse",
    "DashboardResponse",
    "DiagnosticsResponse",
    "DiscardResponse",
    "PendingEditRequest",
    "PendingEditResponse",
    "SaveResponse",
    "ServiceLineResponse",
    "VisibilityRequest",
    "VisibilityResponse",
]
