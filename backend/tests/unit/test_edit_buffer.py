"""Unit tests for the EditBuffer."""

import asyncio
from dataclasses import replace

import pytest

from app.application.services import EditBuffer
from app.domain.exceptions import BackendError, InvalidEditError, SaveError
from tests.fakes import FakeBookingBackend, make_booking


@pytest.fixture
def backend() -> FakeBookingBackend:
    return FakeBookingBackend(
        [make_booking("b-1", 0), make_booking("b-2", 1), make_booking("b-3", 2)]
    )


@pytest.fixture
def buffer(backend: FakeBookingBackend) -> EditBuffer:
    return EditBuffer(backend)


# ── Staging edits ──


def test_merged_row_shows_edit_without_touching_the_fetched_row(buffer: EditBuffer):
    row = make_booking(
        "b-1",
        status="pending",
        payment_status="Partial",
        notes="Call on arrival",
        total_amount=320.0,
    )
    buffer.set_field("b-1", "status", "confirmed")

    merged = buffer.get_merged_row(row)

    assert merged.status == "confirmed"
    assert row.status == "pending"
    assert replace(merged, status=row.status) == row


def test_rows_without_edits_are_returned_unchanged(buffer: EditBuffer):
    row = make_booking("b-2")
    assert buffer.get_merged_row(row) is row


def test_edits_to_the_same_booking_merge_last_write_wins(buffer: EditBuffer):
    buffer.set_field("b-1", "status", "confirmed")
    buffer.set_field("b-1", "payment_status", "Paid")
    buffer.set_field("b-1", "status", "cancelled")

    assert len(buffer) == 1
    assert buffer.get("b-1").fields == {"status": "cancelled", "payment_status": "Paid"}


def test_values_are_canonicalized_case_insensitively(buffer: EditBuffer):
    edit = buffer.set_field("b-1", "payment_status", "not paid")
    assert edit.fields["payment_status"] == "Not Paid"


@pytest.mark.parametrize(
    ("booking_id", "field_name", "value"),
    [
        ("b-1", "total_amount", "0"),
        ("b-1", "status", ""),
        ("b-1", "status", "archived"),
        ("", "status", "confirmed"),
    ],
)
def test_invalid_edits_are_rejected(buffer: EditBuffer, booking_id, field_name, value):
    with pytest.raises(InvalidEditError):
        buffer.set_field(booking_id, field_name, value)
    assert len(buffer) == 0


def test_discard_drops_one_or_all_edits(buffer: EditBuffer):
    buffer.set_field("b-1", "status", "confirmed")
    buffer.set_field("b-2", "status", "completed")

    assert buffer.discard("b-1") is True
    assert buffer.discard("b-1") is False
    assert buffer.discard_all() == 1
    assert buffer.pending == []


# ── Saving ──


@pytest.mark.asyncio
async def test_save_sends_only_overridden_fields_and_clears_buffer(
    buffer: EditBuffer, backend: FakeBookingBackend
):
    buffer.set_field("b-1", "status", "confirmed")

    summary = await buffer.save()

    assert backend.updates == [("bookings", "b-1", {"status": "confirmed"})]
    assert summary.updated_ids == ("b-1",)
    assert len(buffer) == 0
    assert next(b for b in backend.rows if b.id == "b-1").status == "confirmed"


@pytest.mark.asyncio
async def test_save_issues_one_update_per_booking(
    buffer: EditBuffer, backend: FakeBookingBackend
):
    buffer.set_field("b-1", "status", "confirmed")
    buffer.set_field("b-1", "payment_status", "Paid")
    buffer.set_field("b-2", "status", "cancelled")

    summary = await buffer.save()

    assert summary.updated_count == 2
    assert sorted(row_id for _, row_id, _ in backend.updates) == ["b-1", "b-2"]
    sent = {row_id: fields for _, row_id, fields in backend.updates}
    assert sent["b-1"] == {"status": "confirmed", "payment_status": "Paid"}


@pytest.mark.asyncio
async def test_save_with_nothing_pending_is_a_no_op(
    buffer: EditBuffer, backend: FakeBookingBackend
):
    summary = await buffer.save()
    assert summary.updated_count == 0
    assert backend.updates == []


@pytest.mark.asyncio
async def test_partial_failure_keeps_only_the_failed_edit(
    buffer: EditBuffer, backend: FakeBookingBackend
):
    backend.fail_updates["b-2"] = BackendError("permission denied", code="42501")
    buffer.set_field("b-1", "status", "confirmed")
    buffer.set_field("b-2", "status", "cancelled")
    buffer.set_field("b-3", "payment_status", "Refunded")

    with pytest.raises(SaveError) as exc_info:
        await buffer.save()

    error = exc_info.value
    assert error.failed_ids == ["b-2"]
    assert sorted(error.succeeded) == ["b-1", "b-3"]
    assert [e.booking_id for e in buffer.pending] == ["b-2"]
    assert buffer.get("b-2").fields == {"status": "cancelled"}


@pytest.mark.asyncio
async def test_edit_made_during_save_survives(
    buffer: EditBuffer, backend: FakeBookingBackend
):
    backend.update_gate = asyncio.Event()
    buffer.set_field("b-1", "status", "confirmed")

    save_task = asyncio.create_task(buffer.save())
    await asyncio.sleep(0)
    buffer.set_field("b-1", "status", "completed")
    buffer.set_field("b-1", "payment_status", "Paid")
    backend.update_gate.set()
    await save_task

    assert buffer.get("b-1").fields == {"status": "completed", "payment_status": "Paid"}


@pytest.mark.asyncio
async def test_refresh_callback_runs_after_successful_save(backend: FakeBookingBackend):
    refreshed = []

    async def on_saved() -> None:
        refreshed.append(True)

    buffer = EditBuffer(backend, on_saved=on_saved)
    buffer.set_field("b-1", "status", "confirmed")
    await buffer.save()

    assert refreshed == [True]


@pytest.mark.asyncio
async def test_failing_refresh_callback_does_not_fail_the_save(backend: FakeBookingBackend):
    async def on_saved() -> None:
        raise BackendError("refresh broke")

    buffer = EditBuffer(backend, on_saved=on_saved)
    buffer.set_field("b-1", "status", "confirmed")

    summary = await buffer.save()
    assert summary.updated_ids == ("b-1",)


@pytest.mark.asyncio
async def test_save_without_backend_raises():
    buffer = EditBuffer(None)
    buffer.set_field("b-1", "status", "confirmed")

    with pytest.raises(SaveError):
        await buffer.save()
    assert len(buffer) == 1
