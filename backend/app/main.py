"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.infrastructure.dependencies import build_dashboard_components, get_sse_manager
from app.infrastructure.logging.log_config import setup_logging
from app.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — connect to Supabase, load bookings, start polling."""
    settings = get_settings()
    setup_logging(settings)

    sse = get_sse_manager()
    async with httpx.AsyncClient(timeout=settings.fetch_timeout_seconds) as http_client:
        components = build_dashboard_components(
            settings, http_client=http_client, notifier=sse
        )
        app.state.dashboard_components = components

        if components.dashboard.config_error is not None:
            # Nothing to poll; the API reports the configuration error instead
            yield
        else:
            async with components.scheduler as scheduler:
                # Initial load runs in the background so startup is not held up by retries
                scheduler.trigger()
                yield

        await sse.shutdown()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
