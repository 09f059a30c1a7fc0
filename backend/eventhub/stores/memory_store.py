"""In-process implementation of the stores.

Used by the test suite and by ``STORAGE_BACKEND=memory`` for local runs.
Every conditional write checks and mutates under one asyncio.Lock with no
await in between, which gives the same indivisibility a database provides
with a row lock. Not durable and not shared between processes.
"""

import asyncio
from dataclasses import replace
from datetime import datetime
from typing import Any

from eventhub.domain import Event, EventId, User, UserId, normalize_email
from eventhub.stores.interfaces import EventStore, UserStore


class InMemoryEventStore(EventStore):
    """Dict-backed event store.

    ``latency`` adds an artificial round trip before every call so that
    concurrent callers interleave the way they would against a remote store.
    """

    def __init__(self, latency: float = 0.0) -> None:
        self._events: dict[str, Event] = {}
        self._lock = asyncio.Lock()
        self._latency = latency

    async def _round_trip(self) -> None:
        await asyncio.sleep(self._latency)

    async def insert_event(self, event: Event) -> None:
        await self._round_trip()
        async with self._lock:
            self._events[str(event.id)] = event

    async def get_event(self, event_id: EventId) -> Event | None:
        await self._round_trip()
        return self._events.get(str(event_id))

    async def list_events(self) -> list[Event]:
        await self._round_trip()
        return sorted(self._events.values(), key=lambda e: e.created_at, reverse=True)

    async def list_events_by_creator(self, creator_email: str) -> list[Event]:
        events = await self.list_events()
        return [e for e in events if e.creator_email == creator_email]

    async def update_event(
        self,
        event_id: EventId,
        changes: dict[str, Any],
        updated_at: datetime,
    ) -> Event | None:
        await self._round_trip()
        async with self._lock:
            current = self._events.get(str(event_id))
            if current is None:
                return None
            new_max = changes.get("max_attendees", 0)
            if new_max > 0 and current.current_attendees > new_max:
                return None
            updated = replace(current, **changes, updated_at=updated_at)
            self._events[str(event_id)] = updated
            return updated

    async def delete_event(self, event_id: EventId) -> bool:
        await self._round_trip()
        async with self._lock:
            return self._events.pop(str(event_id), None) is not None

    async def add_attendee(self, event_id: EventId, email: str) -> Event | None:
        await self._round_trip()
        normalized = normalize_email(email)
        async with self._lock:
            current = self._events.get(str(event_id))
            if current is None:
                return None
            if any(normalize_email(a) == normalized for a in current.attendees):
                return None
            if current.max_attendees > 0 and current.current_attendees >= current.max_attendees:
                return None
            updated = replace(
                current,
                current_attendees=current.current_attendees + 1,
                attendees=current.attendees + (email,),
            )
            self._events[str(event_id)] = updated
            return updated


class InMemoryUserStore(UserStore):
    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._lock = asyncio.Lock()

    async def insert_user(self, user: User) -> bool:
        async with self._lock:
            if any(u.email == user.email for u in self._users.values()):
                return False
            self._users[str(user.id)] = user
            return True

    async def get_user_by_email(self, email: str) -> User | None:
        return next((u for u in self._users.values() if u.email == email), None)

    async def list_users(self) -> list[User]:
        return sorted(self._users.values(), key=lambda u: u.created_at)

    async def delete_user(self, user_id: UserId) -> bool:
        async with self._lock:
            return self._users.pop(str(user_id), None) is not None
