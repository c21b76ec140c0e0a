from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Mapping

from app.application.exceptions import (
    BookingNotFoundError,
    IllegalRemovalError,
    IllegalTransitionError,
)
from app.application.ports.booking_store import BookingFilter, BookingStorePort, PaymentWrite
from app.application.use_cases.recurring_grouping import group_bookings, select_scope
from app.application.utils.transition_messages import describe_payment_change, describe_status_change
from app.domain.entities.booking import Booking, BookingStatus, PaymentMethod, PaymentStatus
from app.domain.entities.transition import (
    EditScope,
    PaymentChangePlan,
    PaymentEvent,
    RemovalMode,
    StatusChangePlan,
    TransitionResult,
)

S = BookingStatus
P = PaymentStatus

# current -> allowed next statuses, self included
STATUS_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    S.PENDING: frozenset({S.PENDING, S.CONFIRMED, S.CANCELLED, S.NO_SHOW}),
    S.CONFIRMED: frozenset({S.CONFIRMED, S.IN_PROGRESS, S.CANCELLED, S.NO_SHOW}),
    S.IN_PROGRESS: frozenset({S.IN_PROGRESS, S.COMPLETED, S.CANCELLED}),
    S.COMPLETED: frozenset({S.COMPLETED}),
    S.CANCELLED: frozenset({S.CANCELLED}),
    S.NO_SHOW: frozenset({S.NO_SHOW}),
}

# extra edges granted when reopening terminal bookings is enabled
REOPEN_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    S.CANCELLED: frozenset({S.PENDING}),
    S.NO_SHOW: frozenset({S.PENDING}),
}

# event -> (valid source statuses, target status)
PAYMENT_TRANSITIONS: dict[PaymentEvent, tuple[frozenset[PaymentStatus], PaymentStatus]] = {
    PaymentEvent.MARK_PAID: (frozenset({P.UNPAID}), P.PAID),
    PaymentEvent.SUBMIT_SLIP: (frozenset({P.UNPAID}), P.PENDING_VERIFICATION),
    PaymentEvent.VERIFY_PAYMENT: (frozenset({P.PENDING_VERIFICATION}), P.PAID),
    PaymentEvent.REQUEST_REFUND: (frozenset({P.PAID}), P.REFUND_PENDING),
    PaymentEvent.COMPLETE_REFUND: (frozenset({P.REFUND_PENDING}), P.REFUNDED),
    PaymentEvent.CANCEL_REFUND: (frozenset({P.REFUND_PENDING}), P.PAID),
}


@dataclass(frozen=True)
class TransitionPolicy:
    status_transitions: Mapping[BookingStatus, frozenset[BookingStatus]]

    @staticmethod
    def default(allow_reopen_terminal: bool = False) -> "TransitionPolicy":
        table = dict(STATUS_TRANSITIONS)
        if allow_reopen_terminal:
            for status, extra in REOPEN_TRANSITIONS.items():
                table[status] = table[status] | extra
        return TransitionPolicy(status_transitions=table)

    def available_statuses(self, current: BookingStatus) -> list[BookingStatus]:
        """Statuses selectable from current, current included, in workflow order."""
        allowed = self.status_transitions.get(current, frozenset({current}))
        return [status for status in BookingStatus if status in allowed]

    def valid_transitions(self, current: BookingStatus) -> list[BookingStatus]:
        return [status for status in self.available_statuses(current) if status != current]

    def is_allowed(self, current: BookingStatus, requested: BookingStatus) -> bool:
        return requested in self.status_transitions.get(current, frozenset({current}))

    def plan_status_change(self, booking: Booking, requested: BookingStatus) -> StatusChangePlan:
        current = booking.status
        if not self.is_allowed(current, requested):
            raise IllegalTransitionError(
                "status",
                current.value,
                requested.value,
                [s.value for s in self.valid_transitions(current)],
            )
        return StatusChangePlan(
            booking_id=booking.id,
            current=current,
            requested=requested,
            description=describe_status_change(current, requested),
        )


def plan_payment_change(
    booking: Booking,
    event: PaymentEvent,
    *,
    today: date,
    method: PaymentMethod | None = None,
    amount: float | None = None,
    slip_url: str | None = None,
    reason: str | None = None,
) -> PaymentChangePlan:
    """Validate a payment event against the booking and compute the fields it writes."""
    sources, target = PAYMENT_TRANSITIONS[event]
    current = booking.payment_status
    if current not in sources:
        raise IllegalTransitionError(
            "payment",
            current.value,
            target.value,
            [e.value for e, (src, _) in PAYMENT_TRANSITIONS.items() if current in src],
        )

    fields: dict[str, Any] = {}
    if event == PaymentEvent.MARK_PAID:
        fields["payment_method"] = (method or PaymentMethod.CASH).value
        fields["payment_date"] = today.isoformat()
        if amount is not None:
            if amount < 0:
                raise ValueError("Payment amount cannot be negative")
            fields["amount_paid"] = amount
    elif event == PaymentEvent.SUBMIT_SLIP:
        if not slip_url or not slip_url.strip():
            raise ValueError("A payment slip is required")
        fields["payment_slip_url"] = slip_url.strip()
        if method is not None:
            fields["payment_method"] = method.value
    elif event == PaymentEvent.VERIFY_PAYMENT:
        if not booking.payment_slip_url:
            raise IllegalTransitionError("payment", current.value, target.value, ())
        fields["payment_date"] = today.isoformat()
    elif event == PaymentEvent.REQUEST_REFUND:
        fields["refund_reason"] = reason.strip() if reason and reason.strip() else None
    elif event == PaymentEvent.CANCEL_REFUND:
        fields["refund_reason"] = None

    return PaymentChangePlan(
        booking_id=booking.id,
        event=event,
        current=current,
        new_payment_status=target,
        fields=fields,
        description=describe_payment_change(current, target),
    )


class BookingLifecycleUseCase:
    """
    Validates status, payment and removal requests and hands accepted ones to the store.

    Holds no booking state between calls: every request reads a fresh booking from the
    store. Rejected or no-op requests never reach the store.
    """

    def __init__(
        self,
        store: BookingStorePort,
        policy: TransitionPolicy | None = None,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._store = store
        self._policy = policy or TransitionPolicy.default()
        self._today = today or date.today
        self._logger = logging.getLogger(__name__)

    @property
    def policy(self) -> TransitionPolicy:
        return self._policy

    def change_status(
        self,
        booking_id: str,
        new_status: BookingStatus,
        scope: EditScope = EditScope.THIS_ONLY,
    ) -> TransitionResult:
        targets = self._targets(booking_id, scope)
        plans = [self._policy.plan_status_change(booking, new_status) for booking in targets]
        changes = [plan for plan in plans if not plan.is_noop]
        skipped = tuple(plan.booking_id for plan in plans if plan.is_noop)

        if not changes:
            self._logger.info("Status change is a no-op", extra={"booking_id": booking_id, "status": new_status.value})
            return TransitionResult(applied=False, booking_ids=(), description="", skipped_ids=skipped)

        # all-or-nothing across the series
        self._store.persist_status_changes([plan.booking_id for plan in changes], new_status)

        description = (
            changes[0].description
            if len(changes) == 1
            else describe_status_change(changes[0].current, new_status, count=len(changes))
        )
        self._logger.info(
            "Booking status changed",
            extra={"booking_id": booking_id, "status": new_status.value, "reason": f"{len(changes)} booking(s)"},
        )
        return TransitionResult(
            applied=True,
            booking_ids=tuple(plan.booking_id for plan in changes),
            description=description,
            new_values=changes[0].new_values,
            skipped_ids=skipped,
        )

    def preview_status_change(self, booking_id: str, new_status: BookingStatus) -> StatusChangePlan:
        """Validate without writing, for confirmation prompts."""
        return self._policy.plan_status_change(self._load(booking_id), new_status)

    def apply_payment_event(
        self,
        booking_id: str,
        event: PaymentEvent,
        scope: EditScope = EditScope.THIS_ONLY,
        *,
        method: PaymentMethod | None = None,
        amount: float | None = None,
        slip_url: str | None = None,
        reason: str | None = None,
    ) -> TransitionResult:
        _, target = PAYMENT_TRANSITIONS[event]
        targets = self._targets(booking_id, scope)
        # series members already at the target are left alone
        pending = [b for b in targets if b.payment_status != target or b.id == booking_id]
        skipped = tuple(b.id for b in targets if b not in pending)

        today = self._today()
        plans = [
            plan_payment_change(
                booking,
                event,
                today=today,
                method=method,
                amount=amount,
                slip_url=slip_url,
                reason=reason,
            )
            for booking in pending
        ]

        self._store.persist_payment_changes(
            [PaymentWrite(plan.booking_id, plan.new_payment_status, plan.fields) for plan in plans]
        )

        description = (
            plans[0].description
            if len(plans) == 1
            else describe_payment_change(plans[0].current, target, count=len(plans))
        )
        self._logger.info(
            "Booking payment changed",
            extra={"booking_id": booking_id, "payment_status": target.value, "reason": event.value},
        )
        return TransitionResult(
            applied=True,
            booking_ids=tuple(plan.booking_id for plan in plans),
            description=description,
            new_values=plans[0].new_values,
            skipped_ids=skipped,
        )

    def mark_paid(self, booking_id: str, method: PaymentMethod, amount: float | None = None, **kw) -> TransitionResult:
        return self.apply_payment_event(booking_id, PaymentEvent.MARK_PAID, method=method, amount=amount, **kw)

    def submit_payment_slip(self, booking_id: str, slip_url: str, **kw) -> TransitionResult:
        return self.apply_payment_event(booking_id, PaymentEvent.SUBMIT_SLIP, slip_url=slip_url, **kw)

    def verify_payment(self, booking_id: str, **kw) -> TransitionResult:
        return self.apply_payment_event(booking_id, PaymentEvent.VERIFY_PAYMENT, **kw)

    def request_refund(self, booking_id: str, reason: str | None = None, **kw) -> TransitionResult:
        return self.apply_payment_event(booking_id, PaymentEvent.REQUEST_REFUND, reason=reason, **kw)

    def complete_refund(self, booking_id: str, **kw) -> TransitionResult:
        return self.apply_payment_event(booking_id, PaymentEvent.COMPLETE_REFUND, **kw)

    def cancel_refund(self, booking_id: str, **kw) -> TransitionResult:
        return self.apply_payment_event(booking_id, PaymentEvent.CANCEL_REFUND, **kw)

    def remove(
        self,
        booking_id: str,
        mode: RemovalMode = RemovalMode.ARCHIVE,
        *,
        privileged: bool = False,
    ) -> TransitionResult:
        booking = self._load(booking_id)

        if mode == RemovalMode.ARCHIVE:
            if booking.is_archived:
                raise IllegalRemovalError(f"Booking {booking_id} is already archived")
            self._store.archive_booking(booking_id)
            self._logger.info("Booking archived", extra={"booking_id": booking_id})
            return TransitionResult(
                applied=True,
                booking_ids=(booking_id,),
                description="Archive this booking? It stays available in history and reports.",
            )

        if not privileged:
            raise IllegalRemovalError("Permanent deletion requires a privileged caller")
        self._store.delete_booking(booking_id)
        self._logger.warning("Booking permanently deleted", extra={"booking_id": booking_id})
        return TransitionResult(
            applied=True,
            booking_ids=(booking_id,),
            description="Permanently delete this booking? This action cannot be undone.",
        )

    def _load(self, booking_id: str) -> Booking:
        booking = self._store.get_booking(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    def _targets(self, booking_id: str, scope: EditScope) -> list[Booking]:
        booking = self._load(booking_id)
        if scope == EditScope.THIS_ONLY or not booking.belongs_to_series:
            return [booking]

        series = [
            b
            for b in self._store.fetch_bookings(BookingFilter())
            if b.belongs_to_series and b.recurring_group_id == booking.recurring_group_id
        ]
        if all(b.id != booking.id for b in series):
            series.append(booking)
        grouping = group_bookings(series, today=self._today())
        return list(select_scope(grouping.groups[0], booking_id, scope))
