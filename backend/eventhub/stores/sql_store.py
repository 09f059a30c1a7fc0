"""SQLAlchemy implementation of the stores.

CONCURRENCY STRATEGY: Conditional UPDATE, no read-then-write
==============================================================

Problem:
  Two users join the last open spot simultaneously. Both read
  current_attendees=9 of 10, both pass the capacity check in memory, both
  write. Result: 11 attendees. The same happens with one user double
  submitting: both requests see "not joined yet".

Solution:
  The decision is taken by the database, inside one statement:

  UPDATE events SET current_attendees = current_attendees + 1
   WHERE id = :event_id
     AND (max_attendees = 0 OR current_attendees < max_attendees)
     AND NOT EXISTS (SELECT 1 FROM event_attendees
                      WHERE event_id = :event_id
                        AND email_normalized = :email)

  followed by the roster INSERT in the same transaction.

  - The UPDATE takes the row lock, so joins on one event are serialized by
    the engine and the capacity predicate is re-checked against the latest
    row version
  - rowcount == 0 means the condition did not hold at write time -> conflict
  - The unique constraint on (event_id, email_normalized) rejects a duplicate
    that slipped past NOT EXISTS; the IntegrityError rolls the counter back too
  - No retry: the caller sees the conflict
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.logging import get_logger
from eventhub.core.metrics import record_store_error
from eventhub.domain import Event, EventId, User, UserId, as_utc, normalize_email
from eventhub.domain.errors import StorageUnavailableError
from eventhub.models.event import Event as EventRow, EventAttendee
from eventhub.models.user import User as UserRow
from eventhub.stores.interfaces import EventStore, UserStore

logger = get_logger(__name__)

# Connection-level failures; anything else is a bug and propagates as-is
_UNAVAILABLE = (OperationalError, InterfaceError, OSError, TimeoutError)


@asynccontextmanager
async def _store_call(operation: str):
    try:
        yield
    except _UNAVAILABLE as e:
        logger.error("store_unavailable", operation=operation, error=str(e))
        record_store_error(operation)
        raise StorageUnavailableError(operation) from e


def _event_to_domain(row: EventRow) -> Event:
    return Event(
        id=EventId.from_string(row.id),
        title=row.title,
        description=row.description,
        location=row.location,
        category=row.category,
        date=as_utc(row.date),
        image_url=row.image_url,
        creator_email=row.creator_email,
        max_attendees=row.max_attendees,
        current_attendees=row.current_attendees,
        attendees=tuple(entry.email for entry in row.attendee_entries),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def _user_to_domain(row: UserRow) -> User:
    return User(
        id=UserId.from_string(row.id),
        email=row.email,
        name=row.name,
        photo_url=row.photo_url,
        created_at=as_utc(row.created_at),
    )


class SqlEventStore(EventStore):
    """Relational event store on an AsyncSession (one session per request)."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def _rows(self, stmt) -> list[EventRow]:
        # Rows cached in the session may predate a roster change
        self._db.expire_all()
        result = await self._db.execute(stmt.execution_options(populate_existing=True))
        return list(result.scalars().all())

    async def _load(self, key: str) -> Event | None:
        rows = await self._rows(select(EventRow).where(EventRow.id == key))
        return _event_to_domain(rows[0]) if rows else None

    async def insert_event(self, event: Event) -> None:
        async with _store_call("insert_event"):
            self._db.add(
                EventRow(
                    id=str(event.id),
                    title=event.title,
                    description=event.description,
                    location=event.location,
                    category=event.category,
                    date=event.date,
                    image_url=event.image_url,
                    creator_email=event.creator_email,
                    max_attendees=event.max_attendees,
                    current_attendees=0,
                    created_at=event.created_at,
                )
            )
            await self._db.commit()

    async def get_event(self, event_id: EventId) -> Event | None:
        async with _store_call("get_event"):
            return await self._load(str(event_id))

    async def list_events(self) -> list[Event]:
        async with _store_call("list_events"):
            rows = await self._rows(select(EventRow).order_by(EventRow.created_at.desc()))
            return [_event_to_domain(row) for row in rows]

    async def list_events_by_creator(self, creator_email: str) -> list[Event]:
        async with _store_call("list_events_by_creator"):
            rows = await self._rows(
                select(EventRow)
                .where(EventRow.creator_email == creator_email)
                .order_by(EventRow.created_at.desc())
            )
            return [_event_to_domain(row) for row in rows]

    async def update_event(
        self,
        event_id: EventId,
        changes: dict[str, Any],
        updated_at: datetime,
    ) -> Event | None:
        key = str(event_id)
        stmt = update(EventRow).where(EventRow.id == key)
        new_max = changes.get("max_attendees", 0)
        if new_max > 0:
            # Capacity edits are guarded at write time, like joins
            stmt = stmt.where(EventRow.current_attendees <= new_max)

        async with _store_call("update_event"):
            result = await self._db.execute(
                stmt.values(**changes, updated_at=updated_at)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self._db.rollback()
                return None
            await self._db.commit()
            return await self._load(key)

    async def delete_event(self, event_id: EventId) -> bool:
        key = str(event_id)
        async with _store_call("delete_event"):
            await self._db.execute(delete(EventAttendee).where(EventAttendee.event_id == key))
            result = await self._db.execute(
                delete(EventRow)
                .where(EventRow.id == key)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self._db.rollback()
                return False
            await self._db.commit()
            return True

    async def add_attendee(self, event_id: EventId, email: str) -> Event | None:
        key = str(event_id)
        normalized = normalize_email(email)

        already_joined = (
            select(EventAttendee.id)
            .where(
                EventAttendee.event_id == key,
                EventAttendee.email_normalized == normalized,
            )
            .exists()
        )

        async with _store_call("add_attendee"):
            result = await self._db.execute(
                update(EventRow)
                .where(
                    EventRow.id == key,
                    ~already_joined,
                    or_(
                        EventRow.max_attendees == 0,
                        EventRow.current_attendees < EventRow.max_attendees,
                    ),
                )
                .values(current_attendees=EventRow.current_attendees + 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self._db.rollback()
                return None

            self._db.add(
                EventAttendee(
                    event_id=key,
                    email=email,
                    email_normalized=normalized,
                    joined_at=datetime.now(timezone.utc),
                )
            )
            try:
                await self._db.commit()
            except IntegrityError:
                await self._db.rollback()
                logger.info("join_unique_violation", event_id=key)
                return None

            return await self._load(key)


class SqlUserStore(UserStore):
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def insert_user(self, user: User) -> bool:
        async with _store_call("insert_user"):
            self._db.add(
                UserRow(
                    id=str(user.id),
                    email=user.email,
                    name=user.name,
                    photo_url=user.photo_url,
                    created_at=user.created_at,
                )
            )
            try:
                await self._db.commit()
            except IntegrityError:
                await self._db.rollback()
                return False
            return True

    async def get_user_by_email(self, email: str) -> User | None:
        async with _store_call("get_user"):
            result = await self._db.execute(select(UserRow).where(UserRow.email == email))
            row = result.scalar_one_or_none()
            return _user_to_domain(row) if row else None

    async def list_users(self) -> list[User]:
        async with _store_call("list_users"):
            result = await self._db.execute(select(UserRow).order_by(UserRow.created_at))
            return [_user_to_domain(row) for row in result.scalars().all()]

    async def delete_user(self, user_id: UserId) -> bool:
        async with _store_call("delete_user"):
            result = await self._db.execute(
                delete(UserRow)
                .where(UserRow.id == str(user_id))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self._db.rollback()
                return False
            await self._db.commit()
            return True
