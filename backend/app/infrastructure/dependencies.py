"""FastAPI dependency injection — wires infrastructure to application layer.

The dashboard services live for the whole application lifetime: they are
built once in the lifespan (``build_dashboard_components``), stored on
``app.state`` and handed to endpoints through the providers below.
"""

import asyncio
import logging
from dataclasses import dataclass
from functools import lru_cache

import httpx
from fastapi import Request

from app.application.interfaces import BookingBackend
from app.application.services import (
    BookingFetcher,
    DashboardService,
    DiagnosticsService,
    EditBuffer,
    PollScheduler,
    SSEManager,
)
from app.application.services.booking_fetcher import Sleeper
from app.config import Settings
from app.domain.exceptions import ConfigError
from app.infrastructure.supabase import SupabaseRestClient

logger = logging.getLogger(__name__)


@dataclass
class DashboardComponents:
    """Everything the bookings dashboard needs, wired together."""

    backend: BookingBackend | None
    fetcher: BookingFetcher
    edit_buffer: EditBuffer
    dashboard: DashboardService
    scheduler: PollScheduler
    diagnostics: DiagnosticsService


def build_dashboard_components(
    settings: Settings,
    *,
    http_client: httpx.AsyncClient | None = None,
    backend: BookingBackend | None = None,
    notifier: SSEManager | None = None,
    sleep: Sleeper = asyncio.sleep,
) -> DashboardComponents:
    """Build the dashboard object graph.

    Without a backend URL/key the graph is still built, but the dashboard
    starts in its configuration-error state and no request is ever sent.
    """
    missing = settings.missing_backend_settings
    config_error = ConfigError(missing) if missing and backend is None else None

    if backend is None and config_error is None:
        backend = SupabaseRestClient(
            url=settings.supabase_url.strip(),
            api_key=settings.supabase_anon_key.strip(),
            timeout_seconds=settings.fetch_timeout_seconds,
            http_client=http_client,
        )
    if config_error is not None:
        logger.warning("%s", config_error)

    fetcher = BookingFetcher(
        backend,
        table=settings.bookings_table,
        timeout_seconds=settings.fetch_timeout_seconds,
        max_retries=settings.fetch_max_retries,
        retry_base_delay=settings.fetch_retry_base_delay_seconds,
        sleep=sleep,
        missing_config=missing,
    )

    dashboard: DashboardService

    async def refresh_after_save() -> None:
        await dashboard.refresh(silent=True)

    edit_buffer = EditBuffer(
        backend, table=settings.bookings_table, on_saved=refresh_after_save
    )
    dashboard = DashboardService(
        fetcher, edit_buffer, notifier, config_error=config_error
    )

    async def poll() -> None:
        await dashboard.refresh(silent=True)

    async def refresh_now() -> None:
        await dashboard.refresh()

    scheduler = PollScheduler(
        poll,
        refresh_now=refresh_now,
        interval_seconds=settings.poll_interval_seconds,
    )
    diagnostics = DiagnosticsService(
        backend,
        table=settings.bookings_table,
        supabase_url=settings.supabase_url,
        supabase_anon_key=settings.supabase_anon_key,
        poll_interval_seconds=settings.poll_interval_seconds,
    )
    return DashboardComponents(
        backend=backend,
        fetcher=fetcher,
        edit_buffer=edit_buffer,
        dashboard=dashboard,
        scheduler=scheduler,
        diagnostics=diagnostics,
    )


@lru_cache
def get_sse_manager() -> SSEManager:
    """Process-wide SSE broadcaster."""
    return SSEManager()


def get_dashboard_components(request: Request) -> DashboardComponents:
    return request.app.state.dashboard_components


def get_dashboard_service(request: Request) -> DashboardService:
    """Provides the application-lifetime DashboardService."""
    return get_dashboard_components(request).dashboard


def get_poll_scheduler(request: Request) -> PollScheduler:
    return get_dashboard_components(request).scheduler


def get_diagnostics_service(request: Request) -> DiagnosticsService:
    return get_dashboard_components(request).diagnostics
