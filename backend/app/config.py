from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Bookings Admin API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Supabase configuration (the NEXT_PUBLIC_* names of the web app are accepted too)
    supabase_url: str = Field(
        "", validation_alias=AliasChoices("supabase_url", "next_public_supabase_url")
    )
    supabase_anon_key: str = Field(
        "", validation_alias=AliasChoices("supabase_anon_key", "next_public_supabase_anon_key")
    )
    bookings_table: str = "bookings"

    # Refresh behaviour
    poll_interval_seconds: float = 30.0
    fetch_timeout_seconds: float = 10.0
    fetch_max_retries: int = 3
    fetch_retry_base_delay_seconds: float = 1.0

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_http: str = "WARNING"          # httpx / httpcore — outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_supabase: str = "INFO"         # Supabase REST client
    log_level_dashboard: str = "INFO"        # fetcher / scheduler / edit buffer

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def missing_backend_settings(self) -> list[str]:
        """Names of the required backend settings that are absent or blank."""
        missing = []
        if not self.supabase_url.strip():
            missing.append("SUPABASE_URL")
        if not self.supabase_anon_key.strip():
            missing.append("SUPABASE_ANON_KEY")
        return missing

    @property
    def backend_configured(self) -> bool:
        return not self.missing_backend_settings


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
