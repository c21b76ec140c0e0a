from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from app.domain.entities.booking import BookingStatus, PaymentStatus


class PaymentEvent(str, Enum):
    MARK_PAID = "mark_paid"
    SUBMIT_SLIP = "submit_slip"
    VERIFY_PAYMENT = "verify_payment"
    REQUEST_REFUND = "request_refund"
    COMPLETE_REFUND = "complete_refund"
    CANCEL_REFUND = "cancel_refund"


class RemovalMode(str, Enum):
    ARCHIVE = "archive"
    DELETE = "delete"


class EditScope(str, Enum):
    THIS_ONLY = "this_only"
    THIS_AND_FUTURE = "this_and_future"
    ALL = "all"


@dataclass(frozen=True)
class StatusChangePlan:
    booking_id: str
    current: BookingStatus
    requested: BookingStatus
    description: str

    @property
    def is_noop(self) -> bool:
        return self.current == self.requested

    @property
    def new_values(self) -> dict[str, Any]:
        return {} if self.is_noop else {"status": self.requested.value}


@dataclass(frozen=True)
class PaymentChangePlan:
    booking_id: str
    event: PaymentEvent
    current: PaymentStatus
    new_payment_status: PaymentStatus
    fields: Mapping[str, Any] = field(default_factory=dict)
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @property
    def is_noop(self) -> bool:
        return self.current == self.new_payment_status

    @property
    def new_values(self) -> dict[str, Any]:
        return {"payment_status": self.new_payment_status.value, **self.fields}


@dataclass(frozen=True)
class TransitionResult:
    applied: bool
    booking_ids: tuple[str, ...]
    description: str
    new_values: Mapping[str, Any] = field(default_factory=dict)
    skipped_ids: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # read-only view so a frozen result cannot be changed through its mapping
        object.__setattr__(self, "new_values", MappingProxyType(dict(self.new_values)))
