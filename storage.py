from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List

from errors import PersistenceError
from logging_config import get_logger
from models import Booking, parse_iso8601, to_stored_precision, utc_iso_z, utc_now

logger = get_logger("storage")


def booking_to_record(b: Booking) -> Dict[str, Any]:
    return {
        "id": b.id,
        "user": b.user,
        "email": b.email,
        "phone": b.phone,
        "room": b.room,
        "startTime": utc_iso_z(b.start_time),
        "endTime": utc_iso_z(b.end_time),
        "createdAt": utc_iso_z(b.created_at),
    }


def record_to_booking(record: Dict[str, Any], clock: Callable[[], datetime] = utc_now) -> Booking:
    created_raw = record.get("createdAt")
    return Booking(
        id=record["id"],
        room=record["room"],
        start_time=to_stored_precision(parse_iso8601(record["startTime"])),
        end_time=to_stored_precision(parse_iso8601(record["endTime"])),
        user=record["user"],
        email=record["email"],
        phone=record["phone"],
        # Older files may lack createdAt
        created_at=to_stored_precision(parse_iso8601(created_raw)) if created_raw else to_stored_precision(clock()),
    )


class JsonFileMirror:
    """
    Durable copy of the booking collection: one JSON array, rewritten whole.
    Writes go to a temp file in the same directory and are swapped in with
    os.replace, so a reader never sees a half-written file.
    """

    def __init__(self, path: str, clock: Callable[[], datetime] = utc_now) -> None:
        self.path = path
        # Stamps records that predate createdAt
        self._clock = clock

    def _ensure_file(self) -> None:
        if not os.path.exists(self.path):
            self._write_text("[]")

    def read_all(self) -> List[Booking]:
        try:
            self._ensure_file()
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"could not read {self.path}: {e}") from e

        if not isinstance(data, list):
            raise PersistenceError(f"{self.path} must contain a JSON array")

        try:
            return [record_to_booking(r, self._clock) for r in data]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f"malformed booking record in {self.path}: {e}") from e

    def write_all(self, bookings: Iterable[Booking]) -> None:
        records = [booking_to_record(b) for b in bookings]
        try:
            self._write_text(json.dumps(records, indent=2))
        except OSError as e:
            raise PersistenceError(f"could not write {self.path}: {e}") from e

    def _write_text(self, text: str) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".bookings-", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except OSError:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise
        logger.debug("mirror written", extra={"extra_fields": {"path": self.path}})
