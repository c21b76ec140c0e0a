from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from app.domain.entities.pricing import PriceOutcome, PriceQuery, PriceResolution

Resolver = Callable[[PriceQuery], Awaitable[PriceResolution]]
Listener = Callable[[PriceResolution], None]

_UNSET = object()


class ResolutionSession:
    """
    Debounced, deduplicating wrapper around a price resolver for rapidly changing input.

    Rules:
    - every update restarts the debounce timer; only settled input is resolved
    - an attempt whose signature equals the last issued one is suppressed
    - at most one attempt is in flight; a new attempt while one is pending is suppressed,
      and reconsidered once the pending attempt finishes
    - a result reaches the listener only if it belongs to the most recently issued attempt
      and the input has not moved on since (last-issued-wins)
    - results equal to the last notified value are not notified again
    - resolver failures are notified as an ERROR outcome and clear the issued signature,
      so the same input can be retried
    """

    def __init__(
        self,
        resolver: Resolver,
        listener: Listener,
        debounce_seconds: float = 0.5,
    ) -> None:
        self._resolver = resolver
        self._listener = listener
        self._debounce_seconds = debounce_seconds
        self._logger = logging.getLogger(__name__)

        self._package_id: str | None = None
        self._area: float | None = None
        self._frequency: int | None = None

        self._debounce_task: asyncio.Task | None = None
        self._attempt_task: asyncio.Task | None = None
        self._attempt_seq = 0
        self._last_issued_signature: str | None = None
        self._last_notified: PriceResolution | None = None
        self._in_flight = False
        self._closed = False
        self.attempts = 0

    @property
    def last_issued_signature(self) -> str | None:
        return self._last_issued_signature

    @property
    def last_notified(self) -> PriceResolution | None:
        return self._last_notified

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def closed(self) -> bool:
        return self._closed

    def current_query(self) -> PriceQuery | None:
        if self._package_id is None or self._area is None or self._frequency is None:
            return None
        return PriceQuery(package_id=self._package_id, area=self._area, frequency=self._frequency)

    def update(self, *, package_id=_UNSET, area=_UNSET, frequency=_UNSET) -> None:
        """Record new input and restart the debounce window. Must run inside an event loop."""
        if self._closed:
            raise RuntimeError("Resolution session is closed")
        if package_id is not _UNSET:
            self._package_id = package_id
        if area is not _UNSET:
            self._area = area
        if frequency is not _UNSET:
            self._frequency = frequency
        self._schedule()

    def flush(self) -> None:
        """Skip the remaining debounce delay and consider the current input now."""
        if self._closed:
            return
        self._cancel_debounce()
        self._try_issue()

    async def drain(self) -> None:
        """Wait until no timer is pending and no attempt is in flight."""
        while True:
            pending = [t for t in (self._debounce_task, self._attempt_task) if t is not None and not t.done()]
            if not pending:
                return
            await asyncio.wait(pending)

    def close(self) -> None:
        """Tear the session down. An in-flight result is discarded when it completes."""
        if self._closed:
            return
        self._closed = True
        self._cancel_debounce()
        self._logger.debug("Resolution session closed", extra={"signature": self._last_issued_signature})

    async def __aenter__(self) -> "ResolutionSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    def _schedule(self) -> None:
        self._cancel_debounce()
        self._debounce_task = asyncio.get_running_loop().create_task(self._debounce())

    def _cancel_debounce(self) -> None:
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = None

    async def _debounce(self) -> None:
        await asyncio.sleep(self._debounce_seconds)
        self._debounce_task = None
        self._try_issue()

    def _try_issue(self) -> None:
        query = self.current_query()
        if query is None:
            return

        signature = query.signature()
        if signature == self._last_issued_signature:
            self._logger.debug("Duplicate price query suppressed", extra={"signature": signature})
            return
        if self._in_flight:
            self._logger.debug("Price query suppressed, resolution in flight", extra={"signature": signature})
            return

        self._attempt_seq += 1
        self._last_issued_signature = signature
        self._in_flight = True
        self.attempts += 1
        self._attempt_task = asyncio.get_running_loop().create_task(
            self._run_attempt(self._attempt_seq, query, signature)
        )

    async def _run_attempt(self, attempt: int, query: PriceQuery, signature: str) -> None:
        try:
            result = await self._resolver(query)
        except asyncio.CancelledError:
            self._in_flight = False
            self._attempt_task = None
            if self._last_issued_signature == signature:
                self._last_issued_signature = None
            raise
        except Exception as e:
            self._logger.warning(
                "Price resolution failed",
                extra={"signature": signature, "package_id": query.package_id, "error": str(e)},
            )
            if self._finish_attempt(attempt, signature, succeeded=False):
                self._last_notified = None
                self._listener(
                    PriceResolution(
                        outcome=PriceOutcome.ERROR,
                        package_id=query.package_id,
                        area=query.area,
                        frequency=query.frequency,
                        reason=str(e) or e.__class__.__name__,
                    )
                )
            return

        if not self._finish_attempt(attempt, signature, succeeded=True):
            self._logger.debug("Stale price resolution discarded", extra={"signature": signature})
            return
        self._notify(result)

    def _finish_attempt(self, attempt: int, signature: str, succeeded: bool) -> bool:
        """Clear in-flight state; return True when the result may reach the listener."""
        self._in_flight = False
        self._attempt_task = None
        if not succeeded and self._last_issued_signature == signature:
            self._last_issued_signature = None

        if self._closed:
            return False

        current = self.current_query()
        is_current = (
            attempt == self._attempt_seq
            and current is not None
            and current.signature() == signature
        )
        if not is_current and self._debounce_task is None:
            # input moved on while this attempt ran; reconsider it now that the slot is free
            self._schedule()
        return is_current

    def _notify(self, result: PriceResolution) -> None:
        if self._last_notified is not None and self._last_notified.notification_key() == result.notification_key():
            self._logger.debug("Unchanged price resolution not re-notified", extra={"package_id": result.package_id})
            return
        self._last_notified = result
        self._listener(result)
