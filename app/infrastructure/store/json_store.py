from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

from app.application.exceptions import PersistError
from app.application.ports.booking_store import BookingFilter, BookingStorePort, PaymentWrite
from app.domain.entities.booking import Booking, BookingStatus


class JsonBookingStore(BookingStorePort):
    """Bookings kept in one JSON document, rewritten atomically on every change."""

    def __init__(self, data_dir: str = "./data", filename: str = "bookings.json") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._file_path = self._data_dir / filename
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def _load_data(self) -> dict[str, Any]:
        """Load the document, return an empty one if missing or corrupted."""
        if not self._file_path.exists():
            return {"bookings": {}, "version": 1}

        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
                if "version" not in data:
                    data["version"] = 1
                data.setdefault("bookings", {})
                return data
        except (json.JSONDecodeError, IOError) as e:
            self._logger.error("Booking file unreadable, starting empty", extra={"error": str(e)})
            return {"bookings": {}, "version": 1}

    def _save_data(self, data: dict[str, Any]) -> None:
        """Save the document atomically."""
        temp_path = self._file_path.with_suffix(".json.tmp")

        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            # Atomic rename
            temp_path.replace(self._file_path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise PersistError(f"Failed to write bookings: {e}") from e

    def _update_records(self, changes: dict[str, dict[str, Any]]) -> None:
        """Apply changes to several rows with a single save. Unknown ids abort the whole batch."""
        with self._lock:
            data = self._load_data()
            missing = [booking_id for booking_id in changes if booking_id not in data["bookings"]]
            if missing:
                raise PersistError(f"Booking {', '.join(missing)} does not exist")
            now = datetime.now(timezone.utc).isoformat()
            for booking_id, row_changes in changes.items():
                record = data["bookings"][booking_id]
                record.update(row_changes)
                record["updated_at"] = now
            self._save_data(data)

    def add(self, booking: Booking) -> None:
        with self._lock:
            data = self._load_data()
            data["bookings"][booking.id] = booking.to_record()
            self._save_data(data)

    def fetch_bookings(self, booking_filter: BookingFilter) -> list[Booking]:
        with self._lock:
            data = self._load_data()
        bookings = [Booking.from_record(record) for record in data["bookings"].values()]
        return [b for b in bookings if booking_filter.matches(b)]

    def get_booking(self, booking_id: str) -> Booking | None:
        with self._lock:
            record = self._load_data()["bookings"].get(booking_id)
        return Booking.from_record(record) if record else None

    def persist_status_changes(self, booking_ids: Sequence[str], new_status: BookingStatus) -> None:
        self._update_records({booking_id: {"status": new_status.value} for booking_id in booking_ids})

    def persist_payment_changes(self, changes: Sequence[PaymentWrite]) -> None:
        self._update_records(
            {
                change.booking_id: {**change.fields, "payment_status": change.payment_status.value}
                for change in changes
            }
        )

    def archive_booking(self, booking_id: str) -> None:
        self._update_records({booking_id: {"deleted_at": datetime.now(timezone.utc).isoformat()}})

    def delete_booking(self, booking_id: str) -> None:
        with self._lock:
            data = self._load_data()
            if data["bookings"].pop(booking_id, None) is None:
                raise PersistError(f"Booking {booking_id} does not exist")
            self._save_data(data)
