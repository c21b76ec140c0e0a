from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Sequence

from app.application.ports.booking_store import BookingFilter, BookingStorePort
from app.application.use_cases.pagination import paginate_display_units
from app.application.use_cases.recurring_grouping import build_display_units, group_bookings
from app.domain.entities.booking import Booking
from app.domain.entities.recurring_group import DisplayPage


class BookingsPageUseCase:
    def __init__(
        self,
        store: BookingStorePort,
        page_size: int = 10,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._store = store
        self._page_size = page_size
        self._today = today or date.today
        self._logger = logging.getLogger(__name__)

    def execute(
        self,
        booking_filter: BookingFilter | None = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> DisplayPage:
        """Fetch a fresh snapshot, group recurring series and return one count-based page."""
        snapshot = self._store.fetch_bookings(booking_filter or BookingFilter())
        return build_page(snapshot, page, page_size or self._page_size, self._today())


def build_page(snapshot: Sequence[Booking], page: int, page_size: int, today: date) -> DisplayPage:
    grouping = group_bookings(snapshot, today=today)
    units = build_display_units(grouping)
    return paginate_display_units(units, page, page_size)


def apply_booking_update(
    snapshot: Sequence[Booking],
    record: dict[str, Any],
    include_archived: bool = False,
) -> list[Booking]:
    """
    Apply one updated booking row received from the store's change feed.

    Returns a new snapshot: the booking is replaced in place, appended when unknown,
    or dropped when it was archived and archived rows are not shown.
    """
    updated = Booking.from_record(record)
    hidden = updated.is_archived and not include_archived

    result: list[Booking] = []
    seen = False
    for booking in snapshot:
        if booking.id == updated.id:
            seen = True
            if not hidden:
                result.append(updated)
            continue
        result.append(booking)

    if not seen and not hidden:
        result.append(updated)
    return result


def remove_from_snapshot(snapshot: Sequence[Booking], booking_id: str) -> list[Booking]:
    """Snapshot without a hard-deleted booking."""
    return [booking for booking in snapshot if booking.id != booking_id]
