"""Colored dashboard logger — ANSI-colored console logging for the refresh cycle.

Provides a DashboardLogger with color-coded output per stage, making it easy
to follow polls, fetch retries, and saves in the terminal.

Color scheme:
    🔵 Blue    — Fetch
    🟣 Magenta — Poll scheduling
    🟡 Yellow  — Local edits
    🟢 Green   — Save
    🟠 Cyan    — Notifications
    🔴 Red     — Errors
    ⚪ Gray    — Timing / Stats
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"


# ── Stage Definitions ────────────────────────────────────────────────

class DashboardStage:
    """Predefined dashboard stages with colors and icons."""

    FETCH = ("FETCH", _Colors.BLUE, "🔄")
    POLL = ("POLL", _Colors.MAGENTA, "⏱️")
    EDIT = ("EDIT", _Colors.YELLOW, "✏️")
    SAVE = ("SAVE", _Colors.GREEN, "💾")
    NOTIFY = ("NOTIFY", _Colors.CYAN, "🔔")


# ── DashboardLogger ──────────────────────────────────────────────────

class DashboardLogger:
    """Color-coded logger for the fetch / poll / save cycle.

    Usage:
        log = DashboardLogger("BookingFetcher")
        log.step_start(DashboardStage.FETCH, "Fetching bookings", attempt=1)
        log.detail("12 rows")
        log.step_complete(DashboardStage.FETCH, "Fetched bookings")
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(f"Dashboard.{component_name}")
        self._component = component_name

    def step_start(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the start of a step with its stage color."""
        label, color, icon = stage
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        formatted += self._format_details(kwargs)
        self._logger.info(formatted)

    def step_complete(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the successful completion of a step."""
        label, color, icon = stage
        formatted = (
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}"
        )
        formatted += self._format_details(kwargs)
        self._logger.info(formatted)

    def step_warning(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log a recoverable problem (e.g. a fetch attempt that will be retried)."""
        label, _, icon = stage
        formatted = (
            f"{_Colors.YELLOW}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.YELLOW}{message}{_Colors.RESET}"
        )
        formatted += self._format_details(kwargs)
        self._logger.warning(formatted)

    def step_error(self, stage: tuple[str, str, str], message: str, error: Exception | None = None) -> None:
        """Log a step error in red."""
        label, _, _ = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}❌ [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        """Log additional detail (gray/dimmed)."""
        formatted = f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        formatted += self._format_details(kwargs)
        self._logger.info(formatted)

    @contextmanager
    def timed_step(self, stage: tuple[str, str, str], message: str, **kwargs: Any):
        """Context manager that logs start/end with elapsed time.

        Usage:
            with log.timed_step(DashboardStage.SAVE, "Saving 3 booking(s)"):
                await backend.update_row(...)
        """
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message} — failed after {elapsed:.2f}s", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message} — {elapsed:.2f}s", **kwargs)

    @staticmethod
    def _format_details(kwargs: dict[str, Any]) -> str:
        if not kwargs:
            return ""
        details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
        return f" {_Colors.GRAY}({details}){_Colors.RESET}"
