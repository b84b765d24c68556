"""Unit tests for raw booking row normalization."""

import json
from datetime import datetime, timezone

import pytest

from app.domain.entities import Address
from app.infrastructure.supabase.booking_mapper import (
    parse_address,
    parse_services,
    parse_timestamp,
    to_booking,
    to_bookings,
)


def _raw_row(**overrides) -> dict:
    row = {
        "id": "b-1",
        "created_at": "2024-03-01T09:00:00+00:00",
        "status": "pending",
        "payment_status": None,
        "preferred_date": "2024-03-05",
        "property_size": "1500-2000 sq ft",
        "property_status": "Vacant",
        "services": [{"name": "Photography", "count": 1, "price": 150, "total": 150}],
        "total_amount": 150,
        "address": {
            "street": "12 Main St",
            "city": "Toronto",
            "province": "ON",
            "zipCode": "M5V 1A1",
        },
        "notes": "Lockbox on the side door",
        "user_id": "u-9",
        "agent_name": "Dana Agent",
        "agent_email": "dana@example.com",
        "agent_phone": "555-0100",
        "agent_company": "Acme Realty",
    }
    row.update(overrides)
    return row


def test_to_booking_maps_structured_columns():
    booking = to_booking(_raw_row())

    assert booking.id == "b-1"
    assert booking.created_at == datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
    assert booking.preferred_date == datetime(2024, 3, 5, tzinfo=timezone.utc)
    assert booking.address.zip_code == "M5V 1A1"
    assert booking.services[0].name == "Photography"
    assert booking.services[0].total == 150.0
    assert booking.total_amount == 150.0
    assert booking.agent_company == "Acme Realty"


def test_to_booking_decodes_json_string_columns():
    """Older rows store address and services as JSON-encoded strings."""
    raw = _raw_row(
        address=json.dumps({"street": "1 Bay St", "city": "Ottawa", "province": "ON", "zipCode": "K1A"}),
        services=json.dumps([{"name": "Video", "count": 2, "price": 100, "total": 200}]),
    )
    booking = to_booking(raw)

    assert booking.address.city == "Ottawa"
    assert booking.services[0].count == 2
    assert booking.services[0].total == 200.0


def test_missing_payment_status_is_shown_as_not_paid():
    booking = to_booking(_raw_row(payment_status=None))
    assert booking.payment_status is None
    assert booking.effective_payment_status == "Not Paid"


def test_malformed_columns_fall_back_to_empty_values():
    booking = to_booking(
        _raw_row(address="{not json", services="oops", total_amount="n/a", preferred_date="soon")
    )

    assert booking.address == Address()
    assert booking.services == ()
    assert booking.total_amount == 0.0
    assert booking.preferred_date is None


@pytest.mark.parametrize("count", ["NaN", "inf", "-Infinity", float("nan")])
def test_non_finite_numbers_fall_back_to_zero(count):
    booking = to_booking(
        _raw_row(services=json.dumps([{"name": "Photos", "count": count, "price": "inf"}]), total_amount="NaN")
    )

    assert booking.services[0].count == 0
    assert booking.services[0].price == 0.0
    assert booking.total_amount == 0.0


def test_to_bookings_skips_rows_without_id_and_keeps_order():
    rows = [_raw_row(id="b-2"), _raw_row(id=None), _raw_row(id="b-1")]
    assert [b.id for b in to_bookings(rows)] == ["b-2", "b-1"]


def test_to_bookings_skips_rows_that_are_not_objects():
    rows = [_raw_row(id="b-1"), "b-2", None, ["b-3"]]
    assert [b.id for b in to_bookings(rows)] == ["b-1"]


def test_parse_timestamp_handles_zulu_and_naive_values():
    assert parse_timestamp("2024-03-01T09:00:00Z") == datetime(2024, 3, 1, 9, tzinfo=timezone.utc)
    assert parse_timestamp("2024-03-01T09:00:00").tzinfo == timezone.utc
    assert parse_timestamp("") is None
    assert parse_timestamp(None) is None


def test_parse_address_accepts_snake_case_zip_and_second_line():
    address = parse_address(
        {"street": "12 Main St", "street2": "Unit 4", "city": "Toronto", "province": "ON", "zip_code": "M5V"}
    )
    assert address.format() == "12 Main St, Unit 4, Toronto, ON M5V"


def test_parse_services_ignores_non_object_items():
    services = parse_services([{"name": "Drone"}, "Floor plan", None])
    assert len(services) == 1
    assert services[0].count == 1
