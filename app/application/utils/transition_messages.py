from __future__ import annotations

from app.domain.entities.booking import BookingStatus, PaymentStatus

STATUS_LABELS: dict[BookingStatus, str] = {
    BookingStatus.PENDING: "Pending",
    BookingStatus.CONFIRMED: "Confirmed",
    BookingStatus.IN_PROGRESS: "In Progress",
    BookingStatus.COMPLETED: "Completed",
    BookingStatus.CANCELLED: "Cancelled",
    BookingStatus.NO_SHOW: "No Show",
}

PAYMENT_LABELS: dict[PaymentStatus, str] = {
    PaymentStatus.UNPAID: "Unpaid",
    PaymentStatus.PENDING_VERIFICATION: "Pending Verification",
    PaymentStatus.PAID: "Paid",
    PaymentStatus.PARTIAL: "Partial",
    PaymentStatus.REFUND_PENDING: "Refund Pending",
    PaymentStatus.REFUNDED: "Refunded",
}

_CANCEL = "Cancel this booking? This action cannot be undone."
_NO_SHOW = "Mark this booking as no-show? This action cannot be undone."

_STATUS_PROMPTS: dict[tuple[BookingStatus, BookingStatus], str] = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED): "Confirm this booking?",
    (BookingStatus.PENDING, BookingStatus.CANCELLED): _CANCEL,
    (BookingStatus.PENDING, BookingStatus.NO_SHOW): _NO_SHOW,
    (BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS): "Mark this booking as in progress?",
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED): _CANCEL,
    (BookingStatus.CONFIRMED, BookingStatus.NO_SHOW): _NO_SHOW,
    (BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED): "Mark this booking as completed?",
    (BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED): _CANCEL,
    (BookingStatus.CANCELLED, BookingStatus.PENDING): "Reopen this cancelled booking as pending?",
    (BookingStatus.NO_SHOW, BookingStatus.PENDING): "Reopen this no-show booking as pending?",
}


def status_label(status: BookingStatus | str) -> str:
    try:
        return STATUS_LABELS[BookingStatus(status)]
    except ValueError:
        return str(status)


def payment_label(status: PaymentStatus | str) -> str:
    try:
        return PAYMENT_LABELS[PaymentStatus(status)]
    except ValueError:
        return str(status)


def describe_status_change(current: BookingStatus, requested: BookingStatus, count: int = 1) -> str:
    """Confirmation prompt for a status change, falling back to a generic from/to sentence."""
    if count > 1:
        return f"Change status of {count} bookings from {status_label(current)} to {status_label(requested)}?"
    message = _STATUS_PROMPTS.get((current, requested))
    if message:
        return message
    return f"Change status from {status_label(current)} to {status_label(requested)}?"


def describe_payment_change(current: PaymentStatus, new: PaymentStatus, count: int = 1) -> str:
    subject = "booking" if count == 1 else f"{count} bookings"
    if new == PaymentStatus.PAID and current == PaymentStatus.PENDING_VERIFICATION:
        return f"Verify payment for {subject}?"
    if new == PaymentStatus.PAID and current == PaymentStatus.REFUND_PENDING:
        return f"Cancel the refund request for {subject}?"
    if new == PaymentStatus.PAID:
        return f"Mark {subject} as paid?"
    if new == PaymentStatus.PENDING_VERIFICATION:
        return f"Submit payment slip for {subject} for verification?"
    if new == PaymentStatus.REFUND_PENDING:
        return f"Request a refund for {subject}?"
    if new == PaymentStatus.REFUNDED:
        return f"Confirm the refund for {subject} has been completed?"
    return f"Change payment status from {payment_label(current)} to {payment_label(new)}?"
