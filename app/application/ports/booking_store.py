from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Sequence

from app.domain.entities.booking import Booking, BookingStatus, PaymentStatus


@dataclass(frozen=True)
class BookingFilter:
    customer_id: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    include_archived: bool = False

    def matches(self, booking: Booking) -> bool:
        if booking.is_archived and not self.include_archived:
            return False
        if self.customer_id and booking.customer_id != self.customer_id:
            return False
        if self.date_from and booking.booking_date < self.date_from:
            return False
        if self.date_to and booking.booking_date > self.date_to:
            return False
        return True


@dataclass(frozen=True)
class PaymentWrite:
    booking_id: str
    payment_status: PaymentStatus
    fields: Mapping[str, Any]


class BookingStorePort(ABC):
    """
    Persistence collaborator for bookings.

    Write methods return None on success and raise PersistError on failure.
    Batch writes are all-or-nothing: when any row fails, no row is changed.
    """

    @abstractmethod
    def fetch_bookings(self, booking_filter: BookingFilter) -> list[Booking]:
        raise NotImplementedError

    @abstractmethod
    def get_booking(self, booking_id: str) -> Booking | None:
        raise NotImplementedError

    @abstractmethod
    def persist_status_changes(self, booking_ids: Sequence[str], new_status: BookingStatus) -> None:
        """Set the same status on every listed booking in one write."""
        raise NotImplementedError

    @abstractmethod
    def persist_payment_changes(self, changes: Sequence[PaymentWrite]) -> None:
        """Write each payment status together with the payment fields its transition produced."""
        raise NotImplementedError

    def persist_status_change(self, booking_id: str, new_status: BookingStatus) -> None:
        self.persist_status_changes([booking_id], new_status)

    def persist_payment_change(
        self,
        booking_id: str,
        new_payment_status: PaymentStatus,
        fields: Mapping[str, Any],
    ) -> None:
        self.persist_payment_changes([PaymentWrite(booking_id, new_payment_status, fields)])

    @abstractmethod
    def archive_booking(self, booking_id: str) -> None:
        """Soft delete: keep the row for history, hide it from active views."""
        raise NotImplementedError

    @abstractmethod
    def delete_booking(self, booking_id: str) -> None:
        """Hard delete. Irreversible."""
        raise NotImplementedError
