"""
Tests for durable booking stores and realtime snapshot updates.
"""

from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path

import pytest

from app.application.exceptions import PersistError
from app.application.ports.booking_store import BookingFilter, PaymentWrite
from app.application.use_cases.bookings_page import (
    BookingsPageUseCase,
    apply_booking_update,
    remove_from_snapshot,
)
from app.domain.entities.booking import BookingStatus, PaymentMethod, PaymentStatus
from app.infrastructure.store.json_store import JsonBookingStore
from app.infrastructure.store.memory_store import MemoryBookingStore
from factories import make_booking


def test_json_store_persists_across_instances():
    """Changes written by one store instance are visible to a fresh one."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store1 = JsonBookingStore(data_dir=tmpdir)
        store1.add(make_booking("b1", customer_id="c1"))
        store1.persist_status_change("b1", BookingStatus.CONFIRMED)
        store1.persist_payment_change(
            "b1",
            PaymentStatus.PAID,
            {"payment_method": "cash", "payment_date": "2030-01-05", "amount_paid": 900.0},
        )

        store2 = JsonBookingStore(data_dir=tmpdir)
        booking = store2.get_booking("b1")

        assert booking.status == BookingStatus.CONFIRMED
        assert booking.payment_status == PaymentStatus.PAID
        assert booking.payment_method == PaymentMethod.CASH
        assert booking.payment_date == date(2030, 1, 5)
        assert booking.amount_paid == 900.0


def test_json_store_archive_and_delete():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir)
        store.add(make_booking("b1"))
        store.add(make_booking("b2"))

        store.archive_booking("b1")
        assert [b.id for b in store.fetch_bookings(BookingFilter())] == ["b2"]
        archived = store.fetch_bookings(BookingFilter(include_archived=True))
        assert {b.id for b in archived} == {"b1", "b2"}

        store.delete_booking("b2")
        assert store.get_booking("b2") is None
        with pytest.raises(PersistError):
            store.delete_booking("b2")


def test_json_store_missing_booking_raises_persist_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir)
        with pytest.raises(PersistError):
            store.persist_status_change("nope", BookingStatus.CONFIRMED)


def test_json_store_recovers_from_corrupted_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        Path(tmpdir, "bookings.json").write_text("{not json", encoding="utf-8")
        store = JsonBookingStore(data_dir=tmpdir)
        assert store.fetch_bookings(BookingFilter()) == []


def test_filter_by_customer_and_dates():
    store = MemoryBookingStore(
        [
            make_booking("b1", booking_date="2030-01-10", customer_id="c1"),
            make_booking("b2", booking_date="2030-02-10", customer_id="c1"),
            make_booking("b3", booking_date="2030-02-10", customer_id="c2"),
        ]
    )
    result = store.fetch_bookings(BookingFilter(customer_id="c1", date_from=date(2030, 2, 1)))
    assert [b.id for b in result] == ["b2"]


def test_memory_store_rejects_unknown_ids():
    store = MemoryBookingStore()
    with pytest.raises(PersistError):
        store.archive_booking("ghost")


def test_booking_cannot_have_staff_and_team():
    with pytest.raises(ValueError):
        make_booking("b1", staff_id="s1", team_id="t1")


def test_booking_record_round_trip_accepts_zulu_timestamps():
    record = make_booking("b1").to_record()
    record["created_at"] = "2029-12-01T10:00:00Z"
    booking = apply_booking_update([], record)[0]
    assert booking.created_at.tzinfo is not None


def test_realtime_update_replaces_appends_and_drops():
    snapshot = [make_booking("b1"), make_booking("b2")]

    changed = make_booking("b1", status=BookingStatus.CONFIRMED).to_record()
    updated = apply_booking_update(snapshot, changed)
    assert [b.id for b in updated] == ["b1", "b2"]
    assert updated[0].status == BookingStatus.CONFIRMED
    assert snapshot[0].status == BookingStatus.PENDING

    appended = apply_booking_update(updated, make_booking("b3").to_record())
    assert [b.id for b in appended] == ["b1", "b2", "b3"]

    archived = make_booking("b2").to_record()
    archived["deleted_at"] = "2030-01-01T00:00:00+00:00"
    assert [b.id for b in apply_booking_update(appended, archived)] == ["b1", "b3"]
    assert [b.id for b in apply_booking_update(appended, archived, include_archived=True)] == ["b1", "b2", "b3"]

    assert [b.id for b in remove_from_snapshot(appended, "b1")] == ["b2", "b3"]


def test_bookings_page_use_case_reads_fresh_snapshot():
    store = MemoryBookingStore([make_booking(f"b{i}", created=f"2029-12-{i:02d}T10:00:00") for i in range(1, 6)])
    use_case = BookingsPageUseCase(store, page_size=2, today=lambda: date(2030, 1, 1))

    page = use_case.execute(page=1)
    assert page.total_pages == 3
    assert [u.booking.id for u in page.units] == ["b5", "b4"]

    store.add(make_booking("b6", created="2029-12-31T10:00:00"))
    assert use_case.execute(page=1).units[0].booking.id == "b6"


def test_json_store_batch_with_missing_row_writes_nothing():
    """A batch naming an unknown booking leaves the known ones untouched on disk."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir)
        store.add(make_booking("b1"))

        with pytest.raises(PersistError):
            store.persist_status_changes(["b1", "missing"], BookingStatus.CONFIRMED)
        with pytest.raises(PersistError):
            store.persist_payment_changes(
                [
                    PaymentWrite("b1", PaymentStatus.PAID, {"payment_method": PaymentMethod.CASH.value}),
                    PaymentWrite("missing", PaymentStatus.PAID, {}),
                ]
            )

        reloaded = JsonBookingStore(data_dir=tmpdir).get_booking("b1")
        assert reloaded.status == BookingStatus.PENDING
        assert reloaded.payment_status == PaymentStatus.UNPAID
        assert reloaded.payment_method is None


def test_memory_store_batch_with_missing_row_writes_nothing():
    store = MemoryBookingStore([make_booking("b1"), make_booking("b2")])

    with pytest.raises(PersistError):
        store.persist_status_changes(["b1", "missing", "b2"], BookingStatus.CONFIRMED)

    assert store.get_booking("b1").status == BookingStatus.PENDING
    assert store.get_booking("b2").status == BookingStatus.PENDING
