"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
SQLAlchemy ORM models live in eventhub/models (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime

from eventhub.domain.values import EventId, UserId, normalize_email

# Descriptive fields a patch may change besides max_attendees
EVENT_METADATA_FIELDS = ("title", "description", "location", "category", "date", "image_url")


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event and its attendee roster."""

    id: EventId
    title: str
    description: str | None
    location: str | None
    category: str | None
    date: datetime | None
    image_url: str | None
    creator_email: str | None
    max_attendees: int
    current_attendees: int
    attendees: tuple[str, ...]
    created_at: datetime
    updated_at: datetime | None = None

    @property
    def is_full(self) -> bool:
        return self.max_attendees > 0 and self.current_attendees >= self.max_attendees

    @property
    def attendance_state(self) -> str:
        return "full" if self.is_full else "open"

    def has_attendee(self, email: str) -> bool:
        wanted = normalize_email(email)
        return any(normalize_email(existing) == wanted for existing in self.attendees)


@dataclass(frozen=True)
class User:
    """Domain representation of a registered User."""

    id: UserId
    email: str
    name: str | None
    photo_url: str | None
    created_at: datetime


@dataclass(frozen=True)
class JoinResult:
    event_id: EventId
    email: str
    current_attendees: int
    max_attendees: int


@dataclass(frozen=True)
class MembershipStatus:
    event_id: EventId
    email: str
    has_joined: bool
    current_attendees: int
    max_attendees: int
    attendees: tuple[str, ...]


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of a metadata edit. ``changed`` is False for a no-op patch."""

    event: Event
    changed: bool

    @property
    def status(self) -> str:
        return "updated" if self.changed else "unchanged"
