from __future__ import annotations

from datetime import date

import pytest

from app.application.use_cases.bookings_page import build_page
from app.application.use_cases.pagination import paginate_by_weight, paginate_display_units
from app.application.use_cases.recurring_grouping import build_display_units, group_bookings
from app.domain.entities.recurring_group import GroupUnit, SingleUnit
from factories import make_booking

TODAY = date(2030, 1, 1)


def _twelve_plus_three():
    series = [
        make_booking(f"g{i}", booking_date=f"2030-{i:02d}-05", group="G12", created="2029-12-10T09:00:00")
        for i in range(1, 13)
    ]
    singles = [
        make_booking(f"s{i}", booking_date="2030-02-01", created=f"2029-11-0{i}T09:00:00")
        for i in range(1, 4)
    ]
    return series + singles


def test_group_of_twelve_spills_onto_second_page():
    """A 12-booking series is never split; it repeats on page 2 next to the singles."""
    units = build_display_units(group_bookings(_twelve_plus_three(), today=TODAY))

    first = paginate_display_units(units, page=1, page_size=10)
    second = paginate_display_units(units, page=2, page_size=10)

    assert first.total_bookings == 15
    assert first.total_pages == 2
    assert len(first.units) == 1 and isinstance(first.units[0], GroupUnit)
    assert first.booking_count == 12
    assert (first.start_index, first.end_index) == (1, 10)

    assert isinstance(second.units[0], GroupUnit)
    assert second.units[0].group.group_id == "G12"
    singles = [u for u in second.units if isinstance(u, SingleUnit)]
    assert [u.booking.id for u in singles] == ["s3", "s2", "s1"]
    assert (second.start_index, second.end_index) == (11, 15)
    assert not second.has_next and second.has_previous


def test_spanning_series_repeats_on_every_page_it_overlaps():
    units = build_display_units(group_bookings(_twelve_plus_three(), today=TODAY))
    total_pages = paginate_display_units(units, 1, 4).total_pages
    assert total_pages == 4

    seen = set()
    pages_with_group = []
    for page in range(1, total_pages + 1):
        result = paginate_display_units(units, page=page, page_size=4)
        assert result.units, f"page {page} is empty"
        for unit in result.units:
            if isinstance(unit, GroupUnit):
                pages_with_group.append(page)
                seen.update(m.id for m in unit.group.members)
            else:
                seen.add(unit.booking.id)

    assert pages_with_group == [1, 2, 3]
    assert seen == {b.id for b in _twelve_plus_three()}


def test_large_series_alone_fills_every_advertised_page():
    """A 25-booking series at page size 10 shows on all three pages."""
    series = [
        make_booking(f"g{i}", booking_date=f"2030-01-{i:02d}", group="G25")
        for i in range(1, 26)
    ]
    units = build_display_units(group_bookings(series, today=TODAY))

    pages = [paginate_display_units(units, page=p, page_size=10) for p in (1, 2, 3)]

    assert [p.total_pages for p in pages] == [3, 3, 3]
    assert [len(p.units) for p in pages] == [1, 1, 1]
    assert [(p.start_index, p.end_index) for p in pages] == [(1, 10), (11, 20), (21, 25)]
    assert paginate_display_units(units, page=4, page_size=10).units == ()


def test_weighted_pagination_generic_items():
    items = ["a", "bbb", "c", "dd", "e"]
    weight = len

    page1 = paginate_by_weight(items, 1, 3, weight)
    page2 = paginate_by_weight(items, 2, 3, weight)
    page3 = paginate_by_weight(items, 3, 3, weight)

    assert page1.total_weight == 8
    assert page1.total_pages == 3
    assert page1.items == ("a", "bbb")
    assert page2.items == ("bbb", "c", "dd")
    assert page3.items == ("dd", "e")


def test_heavy_item_repeats_on_pages_it_spans():
    assert paginate_by_weight(["big", "x"], 2, 1, len).items == ("big",)
    assert paginate_by_weight(["big", "x"], 3, 1, len).items == ("big",)
    assert paginate_by_weight(["big", "x"], 4, 1, len).items == ("x",)


def test_empty_input():
    page = paginate_display_units([], page=1, page_size=10)
    assert page.units == ()
    assert page.total_pages == 0
    assert (page.start_index, page.end_index) == (0, 0)
    assert not page.has_next


def test_invalid_page_arguments():
    with pytest.raises(ValueError):
        paginate_by_weight(["a"], 0, 10, len)
    with pytest.raises(ValueError):
        paginate_by_weight(["a"], 1, 0, len)


def test_build_page_from_snapshot():
    page = build_page(_twelve_plus_three(), page=1, page_size=20, today=TODAY)
    assert page.total_pages == 1
    assert page.booking_count == 15
