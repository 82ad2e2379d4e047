from __future__ import annotations

import dataclasses
import enum
from datetime import datetime
from threading import Lock
from typing import Callable, Dict, Iterable, List, Optional, Protocol
from uuid import uuid4

from errors import (
    BookingNotFoundError,
    OverlapConflictError,
    PersistenceError,
    StartNotBeforeEndError,
)
from logging_config import get_logger
from models import Booking, BookingChanges, intervals_overlap, to_stored_precision, utc_now

logger = get_logger("repository")


class Mirror(Protocol):
    def read_all(self) -> List[Booking]: ...

    def write_all(self, bookings: Iterable[Booking]) -> None: ...


class StoreState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


def _new_id() -> str:
    return str(uuid4())


class BookingRepository:
    """
    Authoritative in-memory bookings with a full-snapshot disk mirror.

    Every mutation runs check + mutate + persist under one lock, so two
    writers can never both pass the overlap check for the same slot. If the
    mirror write fails the in-memory change is undone before the error is
    raised. Records handed out are frozen dataclasses.
    """

    def __init__(
        self,
        mirror: Mirror,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._mirror = mirror
        self._clock = clock
        self._id_factory = id_factory
        self._items: Dict[str, Booking] = {}
        self._lock = Lock()
        self._init_lock = Lock()
        self._state = StoreState.UNINITIALIZED

    @property
    def state(self) -> StoreState:
        return self._state

    # -----------------------------
    # Lifecycle
    # -----------------------------
    def load(self) -> None:
        """Load the mirror once; concurrent first callers share the same load."""
        if self._state is StoreState.READY:
            return
        with self._init_lock:
            if self._state is StoreState.READY:
                return
            self._state = StoreState.LOADING
            try:
                bookings = self._mirror.read_all()
            except PersistenceError:
                self._state = StoreState.UNINITIALIZED
                logger.exception("failed to load bookings")
                raise
            with self._lock:
                self._items = {b.id: b for b in bookings}
            self._state = StoreState.READY
            logger.info(
                "bookings loaded",
                extra={"extra_fields": {"count": len(bookings)}},
            )

    # -----------------------------
    # Reads
    # -----------------------------
    def get(self, booking_id: str) -> Optional[Booking]:
        self.load()
        with self._lock:
            return self._items.get(booking_id)

    def list(self) -> List[Booking]:
        self.load()
        with self._lock:
            return list(self._items.values())

    def list_by_room(self, room: str) -> List[Booking]:
        self.load()
        with self._lock:
            return [b for b in self._items.values() if b.room == room]

    # -----------------------------
    # Mutations
    # -----------------------------
    def create(
        self,
        room: str,
        start_time: datetime,
        end_time: datetime,
        user: str,
        email: str,
        phone: str,
    ) -> Booking:
        self.load()
        start = to_stored_precision(start_time)
        end = to_stored_precision(end_time)
        if not (start < end):
            raise StartNotBeforeEndError("end time must be after start time")

        with self._lock:
            self._check_conflict(room, start, end)

            booking = Booking(
                id=self._id_factory(),
                room=room,
                start_time=start,
                end_time=end,
                user=user,
                email=email,
                phone=phone,
                created_at=to_stored_precision(self._clock()),
            )
            previous = dict(self._items)
            self._items[booking.id] = booking
            self._persist(previous)

        logger.info(
            "booking created",
            extra={"extra_fields": {"booking_id": booking.id, "room": room}},
        )
        return booking

    def update(self, booking_id: str, changes: BookingChanges) -> Booking:
        self.load()
        with self._lock:
            current = self._items.get(booking_id)
            if current is None:
                raise BookingNotFoundError(booking_id)

            updated = dataclasses.replace(
                current,
                room=changes.room if changes.room is not None else current.room,
                start_time=to_stored_precision(changes.start_time) if changes.start_time is not None else current.start_time,
                end_time=to_stored_precision(changes.end_time) if changes.end_time is not None else current.end_time,
                user=changes.user if changes.user is not None else current.user,
                email=changes.email if changes.email is not None else current.email,
                phone=changes.phone if changes.phone is not None else current.phone,
            )

            if changes.touches_schedule:
                if not (updated.start_time < updated.end_time):
                    raise StartNotBeforeEndError("end time must be after start time")
                self._check_conflict(
                    updated.room, updated.start_time, updated.end_time, exclude_id=booking_id
                )

            previous = dict(self._items)
            self._items[booking_id] = updated
            self._persist(previous)

        logger.info(
            "booking updated",
            extra={"extra_fields": {"booking_id": booking_id, "room": updated.room}},
        )
        return updated

    def delete(self, booking_id: str) -> bool:
        self.load()
        with self._lock:
            if booking_id not in self._items:
                return False
            previous = dict(self._items)
            del self._items[booking_id]
            self._persist(previous)

        logger.info("booking deleted", extra={"extra_fields": {"booking_id": booking_id}})
        return True

    def clear(self) -> None:
        """Remove every booking. For administration and tests."""
        self.load()
        with self._lock:
            previous = dict(self._items)
            self._items.clear()
            self._persist(previous)

    # -----------------------------
    # Internals (caller holds self._lock)
    # -----------------------------
    def _check_conflict(
        self,
        room: str,
        start: datetime,
        end: datetime,
        exclude_id: Optional[str] = None,
    ) -> None:
        for existing in self._items.values():
            if existing.id == exclude_id or existing.room != room:
                continue
            if intervals_overlap(start, end, existing.start_time, existing.end_time):
                logger.info(
                    "booking rejected: overlap",
                    extra={"extra_fields": {"room": room, "conflicting_id": existing.id}},
                )
                raise OverlapConflictError(room, conflicting_id=existing.id)

    def _persist(self, previous: Dict[str, Booking]) -> None:
        try:
            self._mirror.write_all(list(self._items.values()))
        except Exception as e:
            self._items = previous
            logger.exception("failed to persist bookings; change rolled back")
            if isinstance(e, PersistenceError):
                raise
            raise PersistenceError(str(e)) from e
