from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Sequence

from app.application.exceptions import PersistError
from app.application.ports.booking_store import BookingFilter, BookingStorePort, PaymentWrite
from app.domain.entities.booking import Booking, BookingStatus


class MemoryBookingStore(BookingStorePort):
    def __init__(self, bookings: Iterable[Booking] | None = None) -> None:
        self._bookings: dict[str, Booking] = {}
        for booking in bookings or []:
            self._bookings[booking.id] = booking

    def add(self, booking: Booking) -> None:
        self._bookings[booking.id] = booking

    def fetch_bookings(self, booking_filter: BookingFilter) -> list[Booking]:
        return [b for b in self._bookings.values() if booking_filter.matches(b)]

    def get_booking(self, booking_id: str) -> Booking | None:
        return self._bookings.get(booking_id)

    def persist_status_changes(self, booking_ids: Sequence[str], new_status: BookingStatus) -> None:
        # stage every row first so a failure leaves the store untouched
        staged = {bid: self._require(bid).with_fields(status=new_status) for bid in booking_ids}
        self._bookings.update(staged)

    def persist_payment_changes(self, changes: Sequence[PaymentWrite]) -> None:
        staged: dict[str, Booking] = {}
        for change in changes:
            record = self._require(change.booking_id).to_record()
            record.update(change.fields)
            record["payment_status"] = change.payment_status.value
            staged[change.booking_id] = Booking.from_record(record)
        self._bookings.update(staged)

    def archive_booking(self, booking_id: str) -> None:
        booking = self._require(booking_id)
        self._bookings[booking_id] = booking.with_fields(deleted_at=datetime.now(timezone.utc))

    def delete_booking(self, booking_id: str) -> None:
        self._require(booking_id)
        del self._bookings[booking_id]

    def _require(self, booking_id: str) -> Booking:
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise PersistError(f"Booking {booking_id} does not exist")
        return booking
