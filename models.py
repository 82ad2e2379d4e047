from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


# -----------------------------
# Shared time helpers
# -----------------------------
def parse_iso8601(ts: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware datetime.
    Accepts 'Z' suffix by converting it to '+00:00'.
    A timestamp without an offset is taken to be UTC.
    """
    if not isinstance(ts, str) or not ts.strip():
        raise ValueError("timestamp must be a non-empty string")

    s = ts.strip()
    if s.endswith("Z") or s.endswith("z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None or dt.utcoffset() is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_stored_precision(dt: datetime) -> datetime:
    # UTC, truncated to the millisecond precision of the mirror file
    dt = to_utc(dt)
    return dt.replace(microsecond=dt.microsecond // 1000 * 1000)


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """
    Half-open interval overlap: [start, end)
    Overlap iff a_start < b_end AND b_start < a_end.
    Back-to-back is allowed (end == other.start is NOT overlap).
    """
    return a_start < b_end and b_start < a_end


def utc_iso_z(dt: datetime) -> str:
    # Millisecond precision, the shape the mirror file has always used
    return to_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# -----------------------------
# API models (transport layer)
# -----------------------------
class CreateBookingIn(BaseModel):
    user: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    room: str = Field(..., min_length=1)
    start_time: str = Field(..., alias="startTime")
    end_time: str = Field(..., alias="endTime")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    @field_validator("start_time", "end_time")
    @classmethod
    def must_be_iso8601(cls, v: str) -> str:
        # Validate format early; actual comparison happens in the repository.
        parse_iso8601(v)
        return v


class UpdateBookingIn(BaseModel):
    user: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=1)
    room: Optional[str] = Field(None, min_length=1)
    start_time: Optional[str] = Field(None, alias="startTime")
    end_time: Optional[str] = Field(None, alias="endTime")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    @field_validator("start_time", "end_time")
    @classmethod
    def must_be_iso8601(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            parse_iso8601(v)
        return v


class BookingOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    user: str
    email: str
    phone: str
    room: str
    start_time: str = Field(..., alias="startTime")  # ISO-8601 UTC with Z
    end_time: str = Field(..., alias="endTime")
    created_at: str = Field(..., alias="createdAt")

    @classmethod
    def from_booking(cls, b: Booking) -> BookingOut:
        return cls(
            id=b.id,
            user=b.user,
            email=b.email,
            phone=b.phone,
            room=b.room,
            start_time=utc_iso_z(b.start_time),
            end_time=utc_iso_z(b.end_time),
            created_at=utc_iso_z(b.created_at),
        )


# -----------------------------
# Domain model
# -----------------------------
@dataclass(frozen=True)
class Booking:
    id: str
    room: str
    start_time: datetime  # aware, UTC
    end_time: datetime    # aware, UTC
    user: str
    email: str
    phone: str
    created_at: datetime


@dataclass(frozen=True)
class BookingChanges:
    """Partial update; None means keep the stored value."""

    room: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    user: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @property
    def touches_schedule(self) -> bool:
        return self.room is not None or self.start_time is not None or self.end_time is not None
