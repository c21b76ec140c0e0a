from dataclasses import asdict
from datetime import date
from typing import Any

from pydantic import BaseModel, Field

from app.domain.entities.booking import Booking, BookingStatus, PaymentMethod, RecurringPattern
from app.domain.entities.pricing import PriceOutcome, PriceResolution
from app.domain.entities.recurring_group import DisplayPage, GroupUnit, StatusTally
from app.domain.entities.transition import EditScope, PaymentEvent, TransitionResult


class PriceQuerySchema(BaseModel):
    package_id: str
    area: float
    frequency: int


class PriceResolutionSchema(BaseModel):
    outcome: PriceOutcome
    found: bool
    package_id: str
    area: float
    frequency: int
    pricing_model: str | None = None
    price: float | None = None
    required_staff: int | None = None
    estimated_hours: float | None = None
    tier_id: str | None = None
    reason: str | None = None
    integrity_issues: list[str] = Field(default_factory=list)

    @staticmethod
    def from_result(result: PriceResolution) -> "PriceResolutionSchema":
        return PriceResolutionSchema(
            outcome=result.outcome,
            found=result.found,
            package_id=result.package_id,
            area=result.area,
            frequency=result.frequency,
            pricing_model=result.pricing_model.value if result.pricing_model else None,
            price=result.price,
            required_staff=result.required_staff,
            estimated_hours=result.estimated_hours,
            tier_id=result.tier.id if result.tier else None,
            reason=result.reason,
            integrity_issues=list(result.integrity_issues),
        )


class StatusChangeRequestSchema(BaseModel):
    status: BookingStatus
    scope: EditScope = EditScope.THIS_ONLY


class PaymentChangeRequestSchema(BaseModel):
    event: PaymentEvent
    scope: EditScope = EditScope.THIS_ONLY
    method: PaymentMethod | None = None
    amount: float | None = Field(default=None, ge=0)
    slip_url: str | None = None
    reason: str | None = None


class TransitionResultSchema(BaseModel):
    applied: bool
    booking_ids: list[str]
    description: str
    new_values: dict[str, Any] = Field(default_factory=dict)
    skipped_ids: list[str] = Field(default_factory=list)

    @staticmethod
    def from_result(result: TransitionResult) -> "TransitionResultSchema":
        return TransitionResultSchema(
            applied=result.applied,
            booking_ids=list(result.booking_ids),
            description=result.description,
            new_values=dict(result.new_values),
            skipped_ids=list(result.skipped_ids),
        )


class StatusTallySchema(BaseModel):
    completed: int
    confirmed: int
    in_progress: int
    cancelled: int
    no_show: int
    upcoming: int
    total: int

    @staticmethod
    def from_tally(tally: StatusTally) -> "StatusTallySchema":
        return StatusTallySchema(**asdict(tally))


class DisplayUnitSchema(BaseModel):
    kind: str
    size: int
    group_id: str | None = None
    pattern: str | None = None
    tally: StatusTallySchema | None = None
    bookings: list[dict[str, Any]]


class DisplayPageSchema(BaseModel):
    page: int
    page_size: int
    total_pages: int
    total_bookings: int
    start_index: int
    end_index: int
    units: list[DisplayUnitSchema]

    @staticmethod
    def from_page(page: DisplayPage) -> "DisplayPageSchema":
        units: list[DisplayUnitSchema] = []
        for unit in page.units:
            if isinstance(unit, GroupUnit):
                group = unit.group
                units.append(
                    DisplayUnitSchema(
                        kind=unit.kind,
                        size=unit.size(),
                        group_id=group.group_id,
                        pattern=group.pattern.value if group.pattern else None,
                        tally=StatusTallySchema.from_tally(group.tally),
                        bookings=[_booking_payload(b) for b in group.members],
                    )
                )
            else:
                units.append(DisplayUnitSchema(kind=unit.kind, size=1, bookings=[_booking_payload(unit.booking)]))
        return DisplayPageSchema(
            page=page.page,
            page_size=page.page_size,
            total_pages=page.total_pages,
            total_bookings=page.total_bookings,
            start_index=page.start_index,
            end_index=page.end_index,
            units=units,
        )


class ScheduleRequestSchema(BaseModel):
    start_date: date
    frequency: int = Field(gt=0)
    pattern: RecurringPattern = RecurringPattern.AUTO_MONTHLY
    dates: list[date] | None = None


class ScheduleResponseSchema(BaseModel):
    dates: list[date]
    errors: list[str] = Field(default_factory=list)


def _booking_payload(booking: Booking) -> dict[str, Any]:
    return booking.to_record()
