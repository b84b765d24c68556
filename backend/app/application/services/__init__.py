from .booking_fetcher import BookingFetcher
from .poll_scheduler import PollScheduler, SchedulerState
from .edit_buffer import EditBuffer
from .sse_manager import SSEManager
from .dashboard_service import DashboardService, DashboardView
from .diagnostics_service import ConnectionTestResult, DiagnosticsService

__all__ = [
    "BookingFetcher",
    "PollScheduler",
    "SchedulerState",
    "EditBuffer",
    "SSEManager",
    "DashboardService",
    "DashboardView",
    "ConnectionTestResult",
    "DiagnosticsService",
]
