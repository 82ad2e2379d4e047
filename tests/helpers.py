"""Plain helpers shared by conftest.py and the test modules."""

from datetime import datetime, timezone

FIXED_NOW = datetime(2030, 1, 1, 8, 0, tzinfo=timezone.utc)

OWNER = {"user": "Ada Lovelace", "email": "ada@example.com", "phone": "+44 20 7946 0000"}


def at(hour: int, minute: int = 0, day: int = 1) -> datetime:
    return datetime(2030, 1, day, hour, minute, tzinfo=timezone.utc)
