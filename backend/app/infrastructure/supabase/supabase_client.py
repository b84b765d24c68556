"""Supabase REST client — implements the BookingBackend interface.

Talks to the PostgREST endpoint Supabase exposes under ``/rest/v1`` using
httpx. Authenticates every request with the project's anon key, sent both as
the ``apikey`` header and as a bearer token.
"""

import logging
from typing import Any

import httpx

from app.application.interfaces.booking_backend import BookingBackend
from app.domain.entities import Booking
from app.domain.exceptions import BackendError, FetchTimeoutError
from app.infrastructure.supabase.booking_mapper import to_bookings

logger = logging.getLogger(__name__)


class SupabaseRestClient(BookingBackend):
    """Infrastructure adapter — connects to a Supabase project's REST API.

    The httpx client is injected by the application lifespan so its
    connection pool is shared; when none is given, a short-lived client is
    created per call.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        timeout_seconds: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._rest_url = f"{url.rstrip('/')}/rest/v1"
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds
        self._http_client = http_client

    def _get_headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        """Standard headers for PostgREST requests."""
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout_seconds)

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request and translate transport failures into domain errors."""
        url = f"{self._rest_url}/{table}"
        client = await self._get_client()
        should_close = self._http_client is None

        try:
            response = await client.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._get_headers(headers),
                timeout=self._timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise FetchTimeoutError(self._timeout_seconds) from exc
        except httpx.TransportError as exc:
            raise BackendError(
                f"Failed to connect to the database: {exc}",
                code="NETWORK_ERROR",
            ) from exc
        finally:
            if should_close:
                await client.aclose()

        if response.status_code >= 400:
            self._raise_backend_error(response)
        return response

    async def list_rows(
        self,
        table: str,
        *,
        order_by: str = "created_at",
        descending: bool = True,
    ) -> list[Booking]:
        direction = "desc" if descending else "asc"
        response = await self._request(
            "GET", table, params={"select": "*", "order": f"{order_by}.{direction}"}
        )
        data = self._parse_json(response)
        if not isinstance(data, list):
            raise BackendError(
                "Unexpected response format: expected a list of rows",
                status_code=response.status_code,
                code="INVALID_RESPONSE",
            )
        logger.debug("Fetched %d row(s) from '%s'", len(data), table)
        try:
            return to_bookings(data)
        except (AttributeError, TypeError, ValueError, OverflowError) as exc:
            raise BackendError(
                f"Could not read booking rows: {exc}",
                status_code=response.status_code,
                code="INVALID_RESPONSE",
            ) from exc

    async def update_row(
        self, table: str, row_id: str, fields: dict[str, Any]
    ) -> None:
        logger.info("Updating %s %s: %s", table, row_id, fields)
        response = await self._request(
            "PATCH",
            table,
            params={"id": f"eq.{row_id}"},
            json=fields,
            headers={"Prefer": "return=representation"},
        )
        data = self._parse_json(response)
        # PostgREST answers an update that matched nothing with an empty list
        if isinstance(data, list) and not data:
            raise BackendError(
                f"No row with id '{row_id}' was updated",
                status_code=response.status_code,
                code="NOT_FOUND",
                hint="The row may have been deleted or row-level security denied the update.",
            )

    async def count_rows(self, table: str) -> int:
        response = await self._request(
            "HEAD", table, params={"select": "*"}, headers={"Prefer": "count=exact"}
        )
        content_range = response.headers.get("content-range", "")
        _, _, total = content_range.partition("/")
        try:
            return int(total)
        except ValueError as exc:
            raise BackendError(
                f"Missing row count in Content-Range header: {content_range!r}",
                status_code=response.status_code,
                code="INVALID_RESPONSE",
            ) from exc

    async def sample_row(self, table: str) -> dict[str, Any] | None:
        response = await self._request(
            "GET", table, params={"select": "*", "limit": "1"}
        )
        data = self._parse_json(response)
        if isinstance(data, list) and data:
            return data[0]
        return None

    @staticmethod
    def _parse_json(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise BackendError(
                "Invalid JSON response",
                status_code=response.status_code,
                code="INVALID_JSON",
            ) from exc

    @staticmethod
    def _raise_backend_error(response: httpx.Response) -> None:
        """Raise BackendError from a PostgREST error response."""
        message = response.text or f"HTTP {response.status_code}"
        code = hint = details = None
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            message = data.get("message") or message
            code = data.get("code")
            hint = data.get("hint")
            details = data.get("details")

        raise BackendError(
            message,
            status_code=response.status_code,
            code=code,
            hint=hint,
            details=details,
        )
