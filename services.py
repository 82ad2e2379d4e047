from __future__ import annotations

from datetime import datetime
from typing import AbstractSet, Callable, List, Optional

from errors import (
    BookingNotFoundError,
    StartBeforeTodayError,
    StartInPastError,
    UnknownRoomError,
)
from models import (
    BookingChanges,
    BookingOut,
    CreateBookingIn,
    UpdateBookingIn,
    parse_iso8601,
    to_utc,
    utc_now,
)
from repository import BookingRepository


class BookingService:
    def __init__(
        self,
        repo: BookingRepository,
        rooms: Optional[AbstractSet[str]] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo = repo
        self._rooms = frozenset(rooms or ())
        self._clock = clock

    def create_booking(self, payload: CreateBookingIn) -> BookingOut:
        start = to_utc(parse_iso8601(payload.start_time))
        end = to_utc(parse_iso8601(payload.end_time))

        self._check_room(payload.room)
        self._check_not_in_past(start)

        # start < end and the overlap check are enforced atomically by the repository
        booking = self._repo.create(
            room=payload.room,
            start_time=start,
            end_time=end,
            user=payload.user,
            email=str(payload.email),
            phone=payload.phone,
        )
        return BookingOut.from_booking(booking)

    def get_booking(self, booking_id: str) -> BookingOut:
        booking = self._repo.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return BookingOut.from_booking(booking)

    def list_bookings(self) -> List[BookingOut]:
        items = self._repo.list()
        items.sort(key=lambda b: b.start_time)
        return [BookingOut.from_booking(b) for b in items]

    def list_bookings_for_room(self, room: str) -> List[BookingOut]:
        items = self._repo.list_by_room(room)
        items.sort(key=lambda b: b.start_time)
        return [BookingOut.from_booking(b) for b in items]

    def update_booking(self, booking_id: str, payload: UpdateBookingIn) -> BookingOut:
        start = to_utc(parse_iso8601(payload.start_time)) if payload.start_time is not None else None
        end = to_utc(parse_iso8601(payload.end_time)) if payload.end_time is not None else None

        if payload.room is not None:
            self._check_room(payload.room)
        if start is not None:
            self._check_not_in_past(start)

        booking = self._repo.update(
            booking_id,
            BookingChanges(
                room=payload.room,
                start_time=start,
                end_time=end,
                user=payload.user,
                email=str(payload.email) if payload.email is not None else None,
                phone=payload.phone,
            ),
        )
        return BookingOut.from_booking(booking)

    def delete_booking(self, booking_id: str) -> None:
        # Cancellation is a hard delete.
        deleted = self._repo.delete(booking_id)
        if not deleted:
            raise BookingNotFoundError(booking_id)

    # -----------------------------
    # Rules
    # -----------------------------
    def _check_room(self, room: str) -> None:
        if self._rooms and room not in self._rooms:
            raise UnknownRoomError(room)

    def _check_not_in_past(self, start: datetime) -> None:
        # Both cutoffs are evaluated in UTC
        now = to_utc(self._clock())
        if start.date() < now.date():
            raise StartBeforeTodayError("You cannot book rooms before current date")
        if start < now:
            raise StartInPastError("You cannot book rooms before the current time")
