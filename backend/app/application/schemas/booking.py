"""Pydantic DTOs (Data Transfer Objects) for the bookings dashboard."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class AddressResponse(BaseModel):
    street: str
    street2: str | None
    city: str
    province: str
    zip_code: str
    formatted: str


class ServiceLineResponse(BaseModel):
    name: str
    count: int
    price: float
    total: float


class BookingResponse(BaseModel):
    """One booking as displayed, with any pending edits already applied."""

    id: str
    created_at: datetime
    status: str
    payment_status: str
    preferred_date: datetime | None
    property_size: str
    property_status: str
    services: list[ServiceLineResponse]
    total_amount: float
    address: AddressResponse
    notes: str
    user_id: str | None
    agent_name: str
    agent_email: str
    agent_phone: str
    agent_company: str
    has_pending_changes: bool = False


class DashboardResponse(BaseModel):
    """The bookings page: merged rows plus the refresh state."""

    bookings: list[BookingResponse]
    total_count: int
    loading: bool
    refreshing: bool
    error: str | None
    last_updated: datetime | None
    new_bookings_count: int
    pending_count: int
    config_error: str | None


class PendingEditRequest(BaseModel):
    """Schema for staging a local edit of one status field."""

    field: Literal["status", "payment_status"] = Field(..., examples=["status"])
    value: str = Field(..., min_length=1, max_length=50, examples=["confirmed"])


class PendingEditResponse(BaseModel):
    booking_id: str
    fields: dict[str, str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SaveResponse(BaseModel):
    updated_count: int
    updated_ids: list[str]
    message: str


class DiscardResponse(BaseModel):
    discarded: int


class VisibilityRequest(BaseModel):
    """Sent by the page on every visibilitychange event."""

    visible: bool = True


class VisibilityResponse(BaseModel):
    refresh_triggered: bool


class DiagnosticsResponse(BaseModel):
    supabase_url_configured: bool
    supabase_key_configured: bool
    supabase_key_length: int | None
    bookings_table: str
    poll_interval_seconds: float
    scheduler_state: str


class ConnectionTestResponse(BaseModel):
    ok: bool
    row_count: int | None
    columns: list[str]
    sample: dict[str, Any] | None
    error: str | None
