from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Generic, Sequence, TypeVar

from app.domain.entities.recurring_group import DisplayPage, DisplayUnit

T = TypeVar("T")


@dataclass(frozen=True)
class WeightedPage(Generic[T]):
    items: tuple[T, ...]
    page: int
    page_size: int
    total_pages: int
    total_weight: int
    window_start: int  # weight offset where this page begins
    window_end: int  # exclusive, clamped to total_weight


def paginate_by_weight(
    items: Sequence[T],
    page: int,
    page_size: int,
    weight: Callable[[T], int],
) -> WeightedPage[T]:
    """
    Paginate items whose page cost is their weight rather than 1.

    Page N covers the weight window [(N - 1) * page_size, N * page_size). An item
    is included whole on every page its range [consumed, consumed + w) overlaps, so
    a heavy item repeats on each page it spans. Scanning stops once the consumed
    weight reaches the end of the window.
    """
    if page < 1:
        raise ValueError("page must be >= 1")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")

    total_weight = sum(weight(item) for item in items)
    total_pages = math.ceil(total_weight / page_size) if total_weight else 0

    start = (page - 1) * page_size
    end = start + page_size

    selected: list[T] = []
    consumed = 0
    for item in items:
        w = weight(item)
        if consumed + w > start and consumed < end:
            selected.append(item)
        consumed += w
        if consumed >= end:
            break

    return WeightedPage(
        items=tuple(selected),
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        total_weight=total_weight,
        window_start=min(start, total_weight),
        window_end=min(end, total_weight),
    )


def paginate_display_units(units: Sequence[DisplayUnit], page: int, page_size: int) -> DisplayPage:
    result = paginate_by_weight(units, page, page_size, weight=lambda unit: unit.size())
    if result.items:
        start_index, end_index = result.window_start + 1, result.window_end
    else:
        start_index, end_index = 0, 0
    return DisplayPage(
        units=result.items,
        page=page,
        page_size=page_size,
        total_pages=result.total_pages,
        total_bookings=result.total_weight,
        start_index=start_index,
        end_index=end_index,
    )
