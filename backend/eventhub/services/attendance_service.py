"""
Attendance service: the only writer of an event's roster and counter.

JOIN PROTOCOL
=============

  1. Validate input (email present, event id well formed)
  2. Read the event snapshot through the registry
  3. Pre-check the snapshot: already on the roster -> AlreadyJoined,
     at capacity -> EventFull. Fast, specific errors for the common case
  4. One conditional write at the store (EventStore.add_attendee): match
     the event only if the email is absent and a spot is open, then bump
     the counter and append the email in the same step
  5. Nothing matched -> JoinConflict. Another request won the race between
     steps 2 and 4

Step 3 is advisory. Step 4 is the only step allowed to decide, because it
is the only one that is atomic with respect to other joins on the event.
There is no retry loop: a conflict is reported, and callers retry if they
want to.
"""

import time

from eventhub.core.logging import get_logger
from eventhub.core.metrics import join_latency, record_join_attempt, record_membership_check
from eventhub.domain import JoinResult, MembershipStatus, normalize_email
from eventhub.domain.errors import (
    AlreadyJoinedError,
    DomainError,
    ErrorCode,
    EventFullError,
    InvalidInputError,
    JoinConflictError,
)
from eventhub.services.event_service import EventRegistry
from eventhub.stores.interfaces import EventStore

logger = get_logger(__name__)

_OUTCOME_LABELS = {
    ErrorCode.ALREADY_JOINED: "already_joined",
    ErrorCode.EVENT_FULL: "event_full",
    ErrorCode.JOIN_CONFLICT: "conflict",
    ErrorCode.NOT_FOUND: "not_found",
    ErrorCode.INVALID_INPUT: "invalid",
    ErrorCode.INVALID_ID: "invalid",
}


def _require_email(email: str | None) -> str:
    if not email or not email.strip():
        raise InvalidInputError("User email is required")
    return email.strip()


class AttendanceManager:
    """Join and membership checks against an event's roster."""

    def __init__(self, store: EventStore, registry: EventRegistry) -> None:
        self._store = store
        self._registry = registry

    async def join(self, event_id: str, email: str | None) -> JoinResult:
        """Admit ``email`` to the event.

        Raises:
            InvalidInputError, InvalidIdError, EventNotFoundError,
            AlreadyJoinedError, EventFullError, JoinConflictError,
            StorageUnavailableError
        """
        start = time.perf_counter()
        try:
            result = await self._join(event_id, email)
        except DomainError as e:
            record_join_attempt(_OUTCOME_LABELS.get(e.code, "error"))
            raise
        finally:
            join_latency.observe(time.perf_counter() - start)

        record_join_attempt("joined")
        return result

    async def _join(self, event_id: str, email: str | None) -> JoinResult:
        submitted = _require_email(email)
        normalized = normalize_email(submitted)

        event = await self._registry.get(event_id)

        if event.has_attendee(normalized):
            logger.info("join_rejected", event_id=event_id, email=submitted, reason="already_joined")
            raise AlreadyJoinedError()

        if event.is_full:
            logger.info(
                "join_rejected",
                event_id=event_id,
                email=submitted,
                reason="event_full",
                current=event.current_attendees,
                max=event.max_attendees,
            )
            raise EventFullError()

        updated = await self._store.add_attendee(event.id, submitted)
        if updated is None:
            logger.warning(
                "join_conflict",
                event_id=event_id,
                email=submitted,
                snapshot_current=event.current_attendees,
                max=event.max_attendees,
            )
            raise JoinConflictError()

        logger.info(
            "event_joined",
            event_id=event_id,
            email=submitted,
            current=updated.current_attendees,
            max=updated.max_attendees,
            state=updated.attendance_state,
        )
        return JoinResult(
            event_id=updated.id,
            email=submitted,
            current_attendees=updated.current_attendees,
            max_attendees=updated.max_attendees,
        )

    async def check_joined(self, event_id: str, email: str | None) -> MembershipStatus:
        """Read-only membership lookup, case and whitespace insensitive."""
        submitted = _require_email(email)
        event = await self._registry.get(event_id)
        has_joined = event.has_attendee(submitted)
        record_membership_check(has_joined)
        return MembershipStatus(
            event_id=event.id,
            email=submitted,
            has_joined=has_joined,
            current_attendees=event.current_attendees,
            max_attendees=event.max_attendees,
            attendees=event.attendees,
        )
