from __future__ import annotations

import calendar
import uuid
from datetime import date

from app.domain.entities.booking import Booking, RecurringPattern


def new_recurring_group_id() -> str:
    return str(uuid.uuid4())


def add_months(start: date, months: int) -> date:
    """Same day N months later, clamped to the last day of a shorter month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def generate_auto_schedule_dates(start: date, frequency: int, pattern: RecurringPattern) -> list[date]:
    """One occurrence per month starting at start. Custom schedules are picked by hand."""
    if frequency <= 0:
        raise ValueError("Frequency must be a positive number")
    if pattern == RecurringPattern.CUSTOM:
        raise ValueError("Custom pattern does not support auto-generation")
    return [add_months(start, i) for i in range(frequency)]


def validate_recurring_dates(dates: list[date], frequency: int, today: date) -> list[str]:
    """Return every problem with a proposed series; an empty list means valid."""
    errors: list[str] = []

    if len(dates) != frequency:
        errors.append(f"Expected {frequency} dates, got {len(dates)}")

    if dates != sorted(dates):
        errors.append("Dates must be in chronological order")

    if len(set(dates)) != len(dates):
        errors.append("Duplicate dates found")

    for d in dates:
        if d < today:
            errors.append(f"Date in the past: {d.isoformat()}")

    return errors


def build_recurring_series(
    template: Booking,
    dates: list[date],
    pattern: RecurringPattern,
    group_id: str | None = None,
) -> list[Booking]:
    """Expand a template booking into one linked booking per date, sequence numbered from 1."""
    if not dates:
        raise ValueError("A recurring series needs at least one date")
    group_id = group_id or new_recurring_group_id()
    total = len(dates)
    return [
        template.with_fields(
            id=f"{group_id}-{index}",
            booking_date=d,
            is_recurring=True,
            recurring_group_id=group_id,
            recurring_sequence=index,
            recurring_total=total,
            recurring_pattern=pattern,
        )
        for index, d in enumerate(dates, start=1)
    ]
