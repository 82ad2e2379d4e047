from __future__ import annotations

import os
from dataclasses import dataclass
from typing import FrozenSet, Mapping, Optional

DEFAULT_DATA_FILE = os.path.join("data", "bookings.json")
DEFAULT_ROOMS = "room-1,room-2,room-3"


@dataclass(frozen=True)
class Settings:
    data_file: str = DEFAULT_DATA_FILE
    # Empty means any non-empty room key is accepted
    rooms: FrozenSet[str] = frozenset(DEFAULT_ROOMS.split(","))
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        env = os.environ if environ is None else environ
        rooms_raw = env.get("BOOKING_ROOMS", DEFAULT_ROOMS)
        return cls(
            data_file=env.get("BOOKING_DATA_FILE", DEFAULT_DATA_FILE),
            rooms=frozenset(r.strip() for r in rooms_raw.split(",") if r.strip()),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            host=env.get("BOOKING_HOST", "127.0.0.1"),
            port=int(env.get("BOOKING_PORT", "8000")),
        )
