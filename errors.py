from __future__ import annotations

from typing import Optional


class BookingError(Exception):
    """Base class for domain/service errors."""


class StartNotBeforeEndError(BookingError):
    pass


class OverlapConflictError(BookingError):
    def __init__(self, room: str, conflicting_id: Optional[str] = None) -> None:
        super().__init__(f"room {room!r} is already booked for the selected time period")
        self.room = room
        self.conflicting_id = conflicting_id


class BookingNotFoundError(BookingError):
    def __init__(self, booking_id: str) -> None:
        super().__init__(f"booking {booking_id!r} not found")
        self.booking_id = booking_id


class PersistenceError(BookingError):
    """The booking mirror could not be read or written."""


# -----------------------------
# Request validation (service layer)
# -----------------------------
class BookingValidationError(BookingError):
    pass


class StartBeforeTodayError(BookingValidationError):
    pass


class StartInPastError(BookingValidationError):
    pass


class UnknownRoomError(BookingValidationError):
    def __init__(self, room: str) -> None:
        super().__init__(f"unknown room {room!r}")
        self.room = room
