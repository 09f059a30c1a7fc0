"""
Event registry: create, read, edit and delete event metadata.

The registry never touches the attendee roster or counter; those belong to
the attendance service. Capacity edits are checked here against the current
occupancy and re-checked by the store at write time.
"""

from datetime import datetime, timezone
from typing import Any, Mapping

from eventhub.core.logging import get_logger
from eventhub.core.metrics import record_registry_operation
from eventhub.domain import MAX_CAPACITY, Event, EventId, UpdateResult, as_utc, parse_capacity
from eventhub.domain.errors import (
    EventNotFoundError,
    ForbiddenError,
    InvalidCapacityError,
    InvalidInputError,
)
from eventhub.domain.models import EVENT_METADATA_FIELDS
from eventhub.schemas.event import EventCreate
from eventhub.stores.interfaces import EventStore

logger = get_logger(__name__)

EDITABLE_FIELDS = frozenset(EVENT_METADATA_FIELDS) | {"max_attendees"}


def _check_capacity_range(max_attendees: int) -> None:
    if max_attendees < 0:
        raise InvalidCapacityError("Maximum attendees cannot be negative")
    if max_attendees > MAX_CAPACITY:
        raise InvalidCapacityError(f"Maximum attendees cannot exceed {MAX_CAPACITY}")


class EventRegistry:
    """Service for event catalog operations."""

    def __init__(self, store: EventStore) -> None:
        self._store = store

    async def create(self, event_data: EventCreate) -> Event:
        """Create an event with an empty roster.

        Raises:
            InvalidCapacityError: If max_attendees parses to a negative number
                or exceeds MAX_CAPACITY.
        """
        max_attendees = parse_capacity(event_data.max_attendees)
        try:
            _check_capacity_range(max_attendees)
        except InvalidCapacityError:
            record_registry_operation("create", ok=False)
            raise

        event = Event(
            id=EventId.new(),
            title=event_data.title,
            description=event_data.description,
            location=event_data.location,
            category=event_data.category,
            date=as_utc(event_data.date),
            image_url=event_data.image_url,
            creator_email=event_data.creator_email,
            max_attendees=max_attendees,
            current_attendees=0,
            attendees=(),
            created_at=datetime.now(timezone.utc),
        )
        await self._store.insert_event(event)

        record_registry_operation("create", ok=True)
        logger.info(
            "event_created",
            event_id=str(event.id),
            title=event.title,
            max_attendees=max_attendees,
            creator=event.creator_email,
        )
        return event

    async def get(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        return await self._require(EventId.from_string(event_id))

    async def _require(self, event_id: EventId) -> Event:
        event = await self._store.get_event(event_id)
        if event is None:
            raise EventNotFoundError(str(event_id))
        return event

    async def list_events(self) -> list[Event]:
        events = await self._store.list_events()
        logger.debug("events_listed", count=len(events))
        return events

    async def list_events_by_creator(self, creator_email: str) -> list[Event]:
        return await self._store.list_events_by_creator(creator_email)

    async def update(
        self,
        event_id: str,
        patch: Mapping[str, Any],
        requester_email: str | None,
    ) -> UpdateResult:
        """Apply a metadata patch on behalf of ``requester_email``.

        Ownership is only enforced when both the stored creator and the
        requester are known. Roster, counter, id and created_at are never
        taken from the patch.

        Raises:
            InvalidIdError, EventNotFoundError, ForbiddenError,
            InvalidCapacityError, InvalidInputError
        """
        eid = EventId.from_string(event_id)
        event = await self._require(eid)

        if event.creator_email and requester_email and event.creator_email != requester_email:
            record_registry_operation("update", ok=False)
            logger.warning(
                "event_update_forbidden",
                event_id=event_id,
                creator=event.creator_email,
                requester=requester_email,
            )
            raise ForbiddenError()

        ignored = sorted(set(patch) - EDITABLE_FIELDS)
        if ignored:
            logger.info("event_update_fields_ignored", event_id=event_id, fields=ignored)
        changes = {key: value for key, value in patch.items() if key in EDITABLE_FIELDS}

        if "title" in changes and not changes["title"]:
            raise InvalidInputError("Event title is required")

        if "max_attendees" in changes:
            new_max = parse_capacity(changes["max_attendees"])
            try:
                _check_capacity_range(new_max)
            except InvalidCapacityError:
                record_registry_operation("update", ok=False)
                raise
            if 0 < new_max < event.current_attendees:
                record_registry_operation("update", ok=False)
                raise InvalidCapacityError(
                    "Maximum attendees cannot be less than current attendees "
                    f"({event.current_attendees})"
                )
            changes["max_attendees"] = new_max

        if isinstance(changes.get("date"), datetime):
            changes["date"] = as_utc(changes["date"])

        changes = {key: value for key, value in changes.items() if getattr(event, key) != value}
        if not changes:
            logger.info("event_update_noop", event_id=event_id)
            return UpdateResult(event=event, changed=False)

        updated = await self._store.update_event(eid, changes, datetime.now(timezone.utc))
        if updated is None:
            # Deleted, or joins filled past the new cap since the read above
            current = await self._require(eid)
            record_registry_operation("update", ok=False)
            raise InvalidCapacityError(
                "Maximum attendees cannot be less than current attendees "
                f"({current.current_attendees})"
            )

        record_registry_operation("update", ok=True)
        logger.info("event_updated", event_id=event_id, fields=sorted(changes))
        return UpdateResult(event=updated, changed=True)

    async def delete(self, event_id: str) -> None:
        """Delete an event together with its roster.

        Raises:
            InvalidIdError, EventNotFoundError
        """
        eid = EventId.from_string(event_id)
        if not await self._store.delete_event(eid):
            record_registry_operation("delete", ok=False)
            raise EventNotFoundError(event_id)
        record_registry_operation("delete", ok=True)
        logger.info("event_deleted", event_id=event_id)
