"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. A store handle is passed
into each service explicitly; nothing reaches for a process-wide client.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from eventhub.domain import Event, EventId, User, UserId


class EventStore(ABC):
    """Interface for event persistence operations."""

    @abstractmethod
    async def insert_event(self, event: Event) -> None:
        """Persist a freshly created event."""
        ...

    @abstractmethod
    async def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    async def list_events(self) -> list[Event]:
        """Return all events, newest first."""
        ...

    @abstractmethod
    async def list_events_by_creator(self, creator_email: str) -> list[Event]:
        """Return events whose creator_email equals the given value exactly."""
        ...

    @abstractmethod
    async def update_event(
        self,
        event_id: EventId,
        changes: dict[str, Any],
        updated_at: datetime,
    ) -> Event | None:
        """Apply metadata changes and return the post-image.

        When ``changes`` carries a positive ``max_attendees`` the write is
        conditional on ``current_attendees <= max_attendees`` at write time,
        so a concurrent join can never leave the event over capacity.
        Returns None if no event matched (missing, or the guard failed).
        """
        ...

    @abstractmethod
    async def delete_event(self, event_id: EventId) -> bool:
        """Delete an event and its roster. Returns False if nothing was deleted."""
        ...

    @abstractmethod
    async def add_attendee(self, event_id: EventId, email: str) -> Event | None:
        """Atomically admit ``email`` to the event.

        Matches the event by id AND "no roster entry equals the normalized
        email" AND "max_attendees == 0 or current_attendees < max_attendees",
        then increments the counter and appends the email, as one indivisible
        step. Returns the post-image, or None when nothing matched.
        """
        ...


class UserStore(ABC):
    """Interface for user persistence operations."""

    @abstractmethod
    async def insert_user(self, user: User) -> bool:
        """Persist a user. Returns False if the email is already registered."""
        ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> User | None:
        ...

    @abstractmethod
    async def list_users(self) -> list[User]:
        ...

    @abstractmethod
    async def delete_user(self, user_id: UserId) -> bool:
        ...
