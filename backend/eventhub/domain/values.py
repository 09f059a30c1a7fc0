"""Domain primitives that enforce validity at creation time."""

import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Self
from uuid import UUID, uuid4

from eventhub.domain.errors import InvalidIdError

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

# Largest value the INTEGER capacity column holds
MAX_CAPACITY = 2**31 - 1


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event."""

    value: UUID

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    @classmethod
    def from_string(cls, value: Any) -> Self:
        if not isinstance(value, str):
            raise InvalidIdError("event")
        try:
            return cls(value=UUID(value.strip()))
        except ValueError:
            raise InvalidIdError("event") from None

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class UserId:
    """Unique identifier for a User."""

    value: UUID

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    @classmethod
    def from_string(cls, value: Any) -> Self:
        if not isinstance(value, str):
            raise InvalidIdError("user")
        try:
            return cls(value=UUID(value.strip()))
        except ValueError:
            raise InvalidIdError("user") from None

    def __str__(self) -> str:
        return str(self.value)


def normalize_email(email: str) -> str:
    """Identity key for membership: lowercase with surrounding whitespace removed."""
    return email.strip().lower()


def parse_capacity(raw: Any) -> int:
    """Lenient integer parse for ``maxAttendees``.

    Absent, boolean or non-numeric input yields 0 (unlimited). Strings use
    their leading integer ("12 seats" -> 12) and floats truncate toward zero.
    The sign is preserved so callers can reject negatives.
    """
    if raw is None or isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else 0
    if isinstance(raw, str):
        match = _LEADING_INT.match(raw)
        return int(match.group(1)) if match else 0
    return 0


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes; some dialects drop the offset on read."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
