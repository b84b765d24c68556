"""Diagnostics endpoints — configuration report and connection test."""

from fastapi import APIRouter, Depends

from app.application.schemas import ConnectionTestResponse, DiagnosticsResponse
from app.application.services import DiagnosticsService, PollScheduler
from app.infrastructure.dependencies import get_diagnostics_service, get_poll_scheduler

router = APIRouter(prefix="/diagnostics", tags=["Diagnostics"])


@router.get("", response_model=DiagnosticsResponse)
async def describe_configuration(
    service: DiagnosticsService = Depends(get_diagnostics_service),
    scheduler: PollScheduler = Depends(get_poll_scheduler),
) -> DiagnosticsResponse:
    """Report which backend settings are present and the polling state."""
    return DiagnosticsResponse(**service.describe(), scheduler_state=scheduler.state.value)


@router.post("/connection-test", response_model=ConnectionTestResponse)
async def test_connection(
    service: DiagnosticsService = Depends(get_diagnostics_service),
) -> ConnectionTestResponse:
    """Count the bookings and list the columns of one sample row."""
    result = await service.test_connection()
    return ConnectionTestResponse(
        ok=result.ok,
        row_count=result.row_count,
        columns=result.columns,
        sample=result.sample,
        error=result.error,
    )
