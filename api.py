from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException, Path, status

from errors import (
    BookingNotFoundError,
    BookingValidationError,
    OverlapConflictError,
    PersistenceError,
    StartNotBeforeEndError,
)
from models import BookingOut, CreateBookingIn, UpdateBookingIn
from services import BookingService

CONFLICT_DETAIL = "This room is already booked for the selected time period"
NOT_FOUND_DETAIL = "Booking not found"
INTERVAL_DETAIL = "End time must be after start time"
PERSISTENCE_DETAIL = "Failed to save bookings"


def _to_http(exc: Exception) -> HTTPException:
    if isinstance(exc, OverlapConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=CONFLICT_DETAIL)
    if isinstance(exc, BookingNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)
    if isinstance(exc, StartNotBeforeEndError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INTERVAL_DETAIL)
    if isinstance(exc, BookingValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=PERSISTENCE_DETAIL,
    )


def create_router(service: BookingService) -> APIRouter:
    router = APIRouter(prefix="/api")
    handled = (
        OverlapConflictError,
        BookingNotFoundError,
        StartNotBeforeEndError,
        BookingValidationError,
        PersistenceError,
    )

    @router.get("/bookings", response_model=List[BookingOut])
    def list_bookings() -> List[BookingOut]:
        try:
            return service.list_bookings()
        except PersistenceError as e:
            raise _to_http(e)

    @router.post("/bookings", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
    def create_booking(payload: CreateBookingIn) -> BookingOut:
        try:
            return service.create_booking(payload)
        except handled as e:
            raise _to_http(e)

    @router.get("/bookings/{booking_id}", response_model=BookingOut)
    def get_booking(booking_id: str = Path(..., min_length=1)) -> BookingOut:
        try:
            return service.get_booking(booking_id)
        except handled as e:
            raise _to_http(e)

    @router.put("/bookings/{booking_id}", response_model=BookingOut)
    def update_booking(payload: UpdateBookingIn, booking_id: str = Path(..., min_length=1)) -> BookingOut:
        try:
            return service.update_booking(booking_id, payload)
        except handled as e:
            raise _to_http(e)

    @router.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_booking(booking_id: str = Path(..., min_length=1)) -> None:
        try:
            service.delete_booking(booking_id)
            return None
        except handled as e:
            raise _to_http(e)

    @router.get("/rooms/{room}/bookings", response_model=List[BookingOut])
    def list_bookings_for_room(room: str = Path(..., min_length=1)) -> List[BookingOut]:
        try:
            return service.list_bookings_for_room(room)
        except PersistenceError as e:
            raise _to_http(e)

    return router
