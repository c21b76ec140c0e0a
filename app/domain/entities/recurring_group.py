from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Union

from app.domain.entities.booking import Booking, RecurringPattern


@dataclass(frozen=True)
class StatusTally:
    completed: int = 0
    confirmed: int = 0
    in_progress: int = 0
    cancelled: int = 0
    no_show: int = 0
    upcoming: int = 0
    total: int = 0


@dataclass(frozen=True)
class RecurringGroup:
    group_id: str
    members: tuple[Booking, ...]
    tally: StatusTally
    pattern: RecurringPattern | None = None

    @property
    def member_count(self) -> int:
        return len(self.members)

    @property
    def created_at(self) -> datetime:
        # members are date-ordered; the earliest occurrence stands for the series
        return self.members[0].created_at


@dataclass(frozen=True)
class GroupUnit:
    group: RecurringGroup
    kind: str = "group"

    def size(self) -> int:
        return self.group.member_count

    @property
    def created_at(self) -> datetime:
        return self.group.created_at


@dataclass(frozen=True)
class SingleUnit:
    booking: Booking
    kind: str = "booking"

    def size(self) -> int:
        return 1

    @property
    def created_at(self) -> datetime:
        return self.booking.created_at


DisplayUnit = Union[GroupUnit, SingleUnit]


@dataclass(frozen=True)
class DisplayPage:
    units: tuple[DisplayUnit, ...]
    page: int
    page_size: int
    total_pages: int
    total_bookings: int
    start_index: int  # 1-based position of the page window within all bookings, 0 when empty
    end_index: int

    @property
    def booking_count(self) -> int:
        return sum(unit.size() for unit in self.units)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1
