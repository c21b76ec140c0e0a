from __future__ import annotations

from typing import Iterable


class BookingDomainError(RuntimeError):
    """Base class for errors raised by the booking core."""
    pass


class IllegalTransitionError(BookingDomainError):
    """Raised when a status or payment change is not allowed from the current state."""

    def __init__(self, kind: str, current: str, requested: str, allowed: Iterable[str] = ()) -> None:
        self.kind = kind
        self.current = current
        self.requested = requested
        self.allowed = tuple(allowed)
        if self.allowed:
            hint = f" Allowed: {', '.join(self.allowed)}."
        else:
            hint = ""
        super().__init__(f'Cannot change {kind} from "{current}" to "{requested}".{hint}')


class IllegalRemovalError(BookingDomainError):
    """Raised when an archive or hard delete request is refused."""
    pass


class BookingNotFoundError(BookingDomainError):
    def __init__(self, booking_id: str) -> None:
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} not found")


class CollaboratorError(RuntimeError):
    """Raised when an external fetch or persist call fails. Never retried by the core."""
    pass


class PersistError(CollaboratorError):
    """Raised by booking stores when a write cannot be completed."""
    pass


class CatalogUnavailableError(CollaboratorError):
    """Raised when the package catalog cannot be read."""
    pass
