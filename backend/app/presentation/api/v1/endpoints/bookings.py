"""Bookings endpoints — merged view, manual refresh, pending edits and save."""


from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.application.schemas import (
    AddressResponse,
    BookingResponse,
    DashboardResponse,
    DiscardResponse,
    PendingEditRequest,
    PendingEditResponse,
    SaveResponse,
    ServiceLineResponse,
)
from app.application.services import DashboardService, DashboardView
from app.domain.entities import Booking
from app.domain.exceptions import ConfigError, InvalidEditError, SaveError
from app.infrastructure.dependencies import get_dashboard_service


router = APIRouter(prefix="/bookings", tags=["Bookings"])


# ── Helpers ──────────────────────────────────────────────────────────


def _booking_to_response(booking: Booking, pending_ids: set[str]) -> BookingResponse:
    """Map a Booking domain entity to its API response."""
    return BookingResponse(
        id=booking.id,
        created_at=booking.created_at,
        status=booking.status,
        payment_status=booking.effective_payment_status,
        preferred_date=booking.preferred_date,
        property_size=booking.property_size,
        property_status=booking.property_status,
        services=[
            ServiceLineResponse(name=s.name, count=s.count, price=s.price, total=s.total)
            for s in booking.services
        ],
        total_amount=booking.total_amount,
        address=AddressResponse(
            street=booking.address.street,
            street2=booking.address.street2,
            city=booking.address.city,
            province=booking.address.province,
            zip_code=booking.address.zip_code,
            formatted=booking.address.format(),
        ),
        notes=booking.notes,
        user_id=booking.user_id,
        agent_name=booking.agent_name,
        agent_email=booking.agent_email,
        agent_phone=booking.agent_phone,
        agent_company=booking.agent_company,
        has_pending_changes=booking.id in pending_ids,
    )


def _view_to_response(view: DashboardView, pending_ids: set[str]) -> DashboardResponse:
    return DashboardResponse(
        bookings=[_booking_to_response(b, pending_ids) for b in view.bookings],
        total_count=len(view.bookings),
        loading=view.loading,
        refreshing=view.refreshing,
        error=view.error,
        last_updated=view.last_updated,
        new_bookings_count=view.new_bookings_count,
        pending_count=view.pending_count,
        config_error=view.config_error,
    )


def _render(
    service: DashboardService, sort_field: str, direction: str | None
) -> DashboardResponse:
    try:
        view = service.view(sort_field, direction)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    pending_ids = {edit.booking_id for edit in service.pending_edits()}
    return _view_to_response(view, pending_ids)


# ── View & refresh ───────────────────────────────────────────────────


@router.get("", response_model=DashboardResponse)
async def list_bookings(
    sort_field: str = Query("created_at", description="created_at | preferred_date"),
    direction: str | None = Query(None, description="asc | desc (default depends on field)"),
    service: DashboardService = Depends(get_dashboard_service),
) -> DashboardResponse:
    """Return the bookings with pending edits applied, plus refresh state."""
    return _render(service, sort_field, direction)


@router.post("/refresh", response_model=DashboardResponse)
async def refresh_bookings(
    sort_field: str = Query("created_at"),
    direction: str | None = Query(None),
    service: DashboardService = Depends(get_dashboard_service),
) -> DashboardResponse:
    """Manual refresh — fetches now (with retries) and clears the new-bookings badge.

    Fetch failures are reported in the ``error`` field, not as an HTTP error,
    so the page can show its retry affordance.
    """
    await service.refresh(manual=True)
    return _render(service, sort_field, direction)


# ── Pending edits ────────────────────────────────────────────────────


@router.get("/pending", response_model=list[PendingEditResponse])
async def list_pending_edits(
    service: DashboardService = Depends(get_dashboard_service),
) -> list[PendingEditResponse]:
    """List the unsaved edits."""
    return [
        PendingEditResponse.model_validate(e, from_attributes=True)
        for e in service.pending_edits()
    ]


@router.put("/{booking_id}/pending", response_model=PendingEditResponse)
async def set_pending_edit(
    booking_id: str,
    data: PendingEditRequest,
    service: DashboardService = Depends(get_dashboard_service),
) -> PendingEditResponse:
    """Stage a status or payment-status change for one booking."""
    try:
        edit = service.set_field(booking_id, data.field, data.value)
    except InvalidEditError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return PendingEditResponse.model_validate(edit, from_attributes=True)


@router.delete("/pending", response_model=DiscardResponse)
async def discard_all_pending_edits(
    service: DashboardService = Depends(get_dashboard_service),
) -> DiscardResponse:
    """Drop every unsaved edit."""
    return DiscardResponse(discarded=service.discard_all())


@router.delete("/{booking_id}/pending", status_code=status.HTTP_204_NO_CONTENT)
async def discard_pending_edit(
    booking_id: str,
    service: DashboardService = Depends(get_dashboard_service),
) -> None:
    """Drop the unsaved edit of one booking."""
    if not service.discard(booking_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No pending changes for booking '{booking_id}'",
        )


@router.post("/save", response_model=SaveResponse)
async def save_pending_edits(
    service: DashboardService = Depends(get_dashboard_service),
) -> SaveResponse:
    """Persist all staged edits, one backend update per booking."""
    try:
        summary = await service.save()
    except ConfigError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except SaveError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "message": str(e),
                "failed_ids": e.failed_ids,
                "succeeded_ids": e.succeeded,
            },
        )
    return SaveResponse(
        updated_count=summary.updated_count,
        updated_ids=list(summary.updated_ids),
        message=f"{summary.updated_count} booking(s) updated",
    )
