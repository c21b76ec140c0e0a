from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time
from enum import Enum
from typing import Any


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PENDING_VERIFICATION = "pending_verification"
    PAID = "paid"
    PARTIAL = "partial"
    REFUND_PENDING = "refund_pending"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    CASH = "cash"
    TRANSFER = "transfer"
    CREDIT_CARD = "credit_card"
    PROMPTPAY = "promptpay"


class RecurringPattern(str, Enum):
    AUTO_MONTHLY = "auto-monthly"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Booking:
    id: str
    booking_date: date
    start_time: time
    created_at: datetime
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    total_price: float = 0.0
    end_time: time | None = None
    customer_id: str | None = None
    # assignment: staff XOR team XOR nobody
    staff_id: str | None = None
    team_id: str | None = None
    package_id: str | None = None
    area_sqm: float | None = None
    frequency: int | None = None
    payment_method: PaymentMethod | None = None
    payment_date: date | None = None
    amount_paid: float | None = None
    payment_slip_url: str | None = None
    refund_reason: str | None = None
    is_recurring: bool = False
    recurring_group_id: str | None = None
    recurring_sequence: int | None = None
    recurring_total: int | None = None
    recurring_pattern: RecurringPattern | None = None
    deleted_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.staff_id and self.team_id:
            raise ValueError(f"Booking {self.id} cannot be assigned to both a staff member and a team")

    @property
    def is_archived(self) -> bool:
        return self.deleted_at is not None

    @property
    def belongs_to_series(self) -> bool:
        return self.is_recurring and bool(self.recurring_group_id)

    def with_fields(self, **fields: Any) -> "Booking":
        return replace(self, **fields)

    @staticmethod
    def from_record(record: dict[str, Any]) -> "Booking":
        """Build a booking from a store row (ISO strings, enum wire values)."""
        return Booking(
            id=str(record["id"]),
            booking_date=_parse_date(record["booking_date"]),
            start_time=_parse_time(record["start_time"]),
            end_time=_parse_time(record.get("end_time")),
            created_at=_parse_datetime(record["created_at"]),
            status=BookingStatus(record.get("status") or BookingStatus.PENDING.value),
            payment_status=PaymentStatus(record.get("payment_status") or PaymentStatus.UNPAID.value),
            total_price=float(record.get("total_price") or 0),
            customer_id=record.get("customer_id"),
            staff_id=record.get("staff_id"),
            team_id=record.get("team_id"),
            package_id=record.get("package_id"),
            area_sqm=record.get("area_sqm"),
            frequency=record.get("frequency"),
            payment_method=PaymentMethod(record["payment_method"]) if record.get("payment_method") else None,
            payment_date=_parse_date(record.get("payment_date")),
            amount_paid=record.get("amount_paid"),
            payment_slip_url=record.get("payment_slip_url"),
            refund_reason=record.get("refund_reason"),
            is_recurring=bool(record.get("is_recurring", False)),
            recurring_group_id=record.get("recurring_group_id"),
            recurring_sequence=record.get("recurring_sequence"),
            recurring_total=record.get("recurring_total"),
            recurring_pattern=(
                RecurringPattern(record["recurring_pattern"]) if record.get("recurring_pattern") else None
            ),
            deleted_at=_parse_datetime(record.get("deleted_at")),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "booking_date": self.booking_date.isoformat(),
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "created_at": self.created_at.isoformat(),
            "status": self.status.value,
            "payment_status": self.payment_status.value,
            "total_price": self.total_price,
            "customer_id": self.customer_id,
            "staff_id": self.staff_id,
            "team_id": self.team_id,
            "package_id": self.package_id,
            "area_sqm": self.area_sqm,
            "frequency": self.frequency,
            "payment_method": self.payment_method.value if self.payment_method else None,
            "payment_date": self.payment_date.isoformat() if self.payment_date else None,
            "amount_paid": self.amount_paid,
            "payment_slip_url": self.payment_slip_url,
            "refund_reason": self.refund_reason,
            "is_recurring": self.is_recurring,
            "recurring_group_id": self.recurring_group_id,
            "recurring_sequence": self.recurring_sequence,
            "recurring_total": self.recurring_total,
            "recurring_pattern": self.recurring_pattern.value if self.recurring_pattern else None,
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
        }


def _parse_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _parse_time(value: Any) -> time | None:
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    return time.fromisoformat(str(value))


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)
