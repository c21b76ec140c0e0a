from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Iterable

from app.domain.entities.booking import Booking, BookingStatus
from app.domain.entities.recurring_group import (
    DisplayUnit,
    GroupUnit,
    RecurringGroup,
    SingleUnit,
    StatusTally,
)
from app.domain.entities.transition import EditScope

# statuses that can never become "upcoming" again
_SETTLED = {BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW}


@dataclass(frozen=True)
class GroupingResult:
    groups: tuple[RecurringGroup, ...]
    standalone: tuple[Booking, ...]

    @property
    def total_bookings(self) -> int:
        return sum(g.member_count for g in self.groups) + len(self.standalone)


def occurrence_key(booking: Booking) -> tuple[date, time]:
    return (booking.booking_date, booking.start_time)


def count_by_status(bookings: Iterable[Booking], today: date) -> StatusTally:
    counts = {status: 0 for status in BookingStatus}
    upcoming = 0
    total = 0
    for booking in bookings:
        total += 1
        counts[booking.status] += 1
        if booking.booking_date >= today and booking.status not in _SETTLED:
            upcoming += 1
    return StatusTally(
        completed=counts[BookingStatus.COMPLETED],
        confirmed=counts[BookingStatus.CONFIRMED],
        in_progress=counts[BookingStatus.IN_PROGRESS],
        cancelled=counts[BookingStatus.CANCELLED],
        no_show=counts[BookingStatus.NO_SHOW],
        upcoming=upcoming,
        total=total,
    )


def group_bookings(bookings: Iterable[Booking], today: date | None = None) -> GroupingResult:
    """
    Split a booking snapshot into recurring series and standalone bookings.

    A booking flagged recurring but missing its group id is treated as standalone.
    The input is never mutated; groups keep the order in which their first member
    appears in the input.
    """
    today = today or date.today()
    members_by_group: dict[str, list[Booking]] = {}
    standalone: list[Booking] = []

    for booking in bookings:
        if booking.belongs_to_series:
            members_by_group.setdefault(booking.recurring_group_id, []).append(booking)
        else:
            standalone.append(booking)

    groups = []
    for group_id, members in members_by_group.items():
        ordered = tuple(sorted(members, key=occurrence_key))
        groups.append(
            RecurringGroup(
                group_id=group_id,
                members=ordered,
                tally=count_by_status(ordered, today),
                pattern=ordered[0].recurring_pattern,
            )
        )

    return GroupingResult(groups=tuple(groups), standalone=tuple(standalone))


def build_display_units(result: GroupingResult) -> list[DisplayUnit]:
    """Merge groups and standalone bookings, most recently created first."""
    units: list[DisplayUnit] = [GroupUnit(group) for group in result.groups]
    units.extend(SingleUnit(booking) for booking in result.standalone)
    # sorted() is stable with reverse=True, equal timestamps keep input order
    return sorted(units, key=lambda unit: _instant(unit.created_at), reverse=True)


def select_scope(group: RecurringGroup, booking_id: str, scope: EditScope) -> tuple[Booking, ...]:
    """Members of a series touched by an edit on one of its bookings."""
    index = next((i for i, m in enumerate(group.members) if m.id == booking_id), None)
    if index is None:
        raise ValueError(f"Booking {booking_id} is not part of recurring group {group.group_id}")

    if scope == EditScope.THIS_ONLY:
        return (group.members[index],)
    if scope == EditScope.THIS_AND_FUTURE:
        return group.members[index:]
    return group.members


def _instant(value: datetime) -> datetime:
    # naive timestamps from the store are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
