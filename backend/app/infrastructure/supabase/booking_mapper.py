"""Normalization of raw PostgREST booking rows into domain entities.

The bookings table stores ``address`` and ``services`` as JSON columns, but
older rows carry them as JSON-encoded strings instead. Both shapes are
collapsed here so nothing past the backend boundary ever sees the raw form.
"""

import json
import logging
import math
from datetime import datetime, timezone
from typing import Any

from app.domain.entities import Address, Booking, ServiceLine

logger = logging.getLogger(__name__)

_EPOCH = datetime.fromtimestamp(0, timezone.utc)


def to_bookings(rows: list[dict[str, Any]]) -> list[Booking]:
    """Map a list of raw rows, preserving order and skipping rows without an id."""
    bookings: list[Booking] = []
    for raw in rows:
        if not isinstance(raw, dict):
            logger.warning("Skipping booking row that is not an object: %r", raw)
            continue
        if raw.get("id") in (None, ""):
            logger.warning("Skipping booking row without an id: %s", sorted(raw))
            continue
        bookings.append(to_booking(raw))
    return bookings


def to_booking(raw: dict[str, Any]) -> Booking:
    """Map one raw row into a Booking."""
    return Booking(
        id=str(raw["id"]),
        created_at=parse_timestamp(raw.get("created_at")) or _EPOCH,
        status=_text(raw.get("status")) or "pending",
        payment_status=_text(raw.get("payment_status")) or None,
        preferred_date=parse_timestamp(raw.get("preferred_date")),
        property_size=_text(raw.get("property_size")),
        property_status=_text(raw.get("property_status")),
        services=parse_services(raw.get("services")),
        total_amount=_number(raw.get("total_amount")),
        address=parse_address(raw.get("address")),
        notes=_text(raw.get("notes")),
        user_id=_text(raw.get("user_id")) or None,
        agent_name=_text(raw.get("agent_name")),
        agent_email=_text(raw.get("agent_email")),
        agent_phone=_text(raw.get("agent_phone")),
        agent_company=_text(raw.get("agent_company")),
    )


def parse_address(value: Any) -> Address:
    """Accept an address object, its JSON encoding, or nothing."""
    data = _decode_json(value)
    if not isinstance(data, dict):
        return Address()
    return Address(
        street=_text(data.get("street")),
        street2=_text(data.get("street2")) or None,
        city=_text(data.get("city")),
        province=_text(data.get("province")),
        zip_code=_text(data.get("zipCode", data.get("zip_code"))),
    )


def parse_services(value: Any) -> tuple[ServiceLine, ...]:
    """Accept a list of service objects, its JSON encoding, or nothing."""
    data = _decode_json(value)
    if not isinstance(data, list):
        return ()
    services = []
    for item in data:
        if not isinstance(item, dict):
            continue
        services.append(
            ServiceLine(
                name=_text(item.get("name")),
                count=int(_number(item.get("count", 1))),
                price=_number(item.get("price")),
                total=_number(item.get("total")),
            )
        )
    return tuple(services)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp or date; naive values are taken as UTC."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable timestamp %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _decode_json(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return None
    return value


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _number(value: Any) -> float:
    """Finite float, or 0.0 for anything else (NaN and infinity included)."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0
