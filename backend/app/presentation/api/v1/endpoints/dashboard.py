"""Dashboard endpoints — tab visibility events and the SSE notification stream."""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from app.application.schemas import VisibilityRequest, VisibilityResponse
from app.application.services import PollScheduler, SSEManager
from app.infrastructure.dependencies import get_poll_scheduler, get_sse_manager

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.post("/visibility", response_model=VisibilityResponse)
async def visibility_changed(
    data: VisibilityRequest,
    scheduler: PollScheduler = Depends(get_poll_scheduler),
) -> VisibilityResponse:
    """Called by the page on visibilitychange; a foregrounded tab triggers a refresh.

    The refresh runs in the background; its result arrives on the next
    GET /bookings and any failure as a toast on the event stream.
    """
    if not data.visible:
        return VisibilityResponse(refresh_triggered=False)
    task = scheduler.on_visibility_regained()
    return VisibilityResponse(refresh_triggered=task is not None)


@router.get("/events")
async def stream_events(
    sse: SSEManager = Depends(get_sse_manager),
) -> StreamingResponse:
    """SSE endpoint for toast notifications.

    Clients connect via EventSource and receive 'toast' events for new
    bookings, save outcomes and fetch failures.
    """
    return StreamingResponse(
        sse.subscribe(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
