"""
Event endpoints: catalog CRUD plus join and membership check.

Listings are cached in Redis; every mutation invalidates them.
"""

from fastapi import APIRouter, Depends, status

from eventhub.api.deps import get_attendance_manager, get_event_registry
from eventhub.schemas.event import (
    EventCreate,
    EventCreatedResponse,
    EventDeletedResponse,
    EventResponse,
    EventUpdate,
    EventUpdatedResponse,
    JoinRequest,
    JoinResponse,
    MembershipResponse,
)
from eventhub.services.attendance_service import AttendanceManager
from eventhub.services.cache_service import get_cached_events, set_cached_events, invalidate_event_cache
from eventhub.services.event_service import EventRegistry
from eventhub.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


async def _listing(registry: EventRegistry, creator_email: str | None = None) -> list[EventResponse]:
    cached = await get_cached_events(creator_email)
    if cached is not None:
        logger.info("events_list_cache_hit", creator=creator_email)
        return [EventResponse.model_validate(item) for item in cached]

    if creator_email is None:
        events = await registry.list_events()
    else:
        events = await registry.list_events_by_creator(creator_email)

    response = [EventResponse.model_validate(e) for e in events]
    await set_cached_events(
        [item.model_dump(mode="json", by_alias=True) for item in response],
        creator_email,
    )
    return response


@router.post("/", response_model=EventCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    registry: EventRegistry = Depends(get_event_registry),
):
    """Create a new event with an empty roster."""
    event = await registry.create(event_data)
    await invalidate_event_cache()
    return EventCreatedResponse(message="Event created successfully!", event_id=str(event.id))


@router.get("/", response_model=list[EventResponse])
async def list_events_endpoint(registry: EventRegistry = Depends(get_event_registry)):
    """List all events. Cached in Redis for 5 minutes."""
    return await _listing(registry)


@router.get("/by-creator/{email}", response_model=list[EventResponse])
async def list_events_by_creator_endpoint(
    email: str,
    registry: EventRegistry = Depends(get_event_registry),
):
    """Events created by the given email."""
    return await _listing(registry, email)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(
    event_id: str,
    registry: EventRegistry = Depends(get_event_registry),
):
    """Get a single event by ID. Not cached (needs real-time roster)."""
    event = await registry.get(event_id)
    return EventResponse.model_validate(event)


@router.put("/{event_id}", response_model=EventUpdatedResponse)
async def update_event_endpoint(
    event_id: str,
    update_data: EventUpdate,
    registry: EventRegistry = Depends(get_event_registry),
):
    """
    Edit event metadata. `creatorEmail` in the body identifies the requester;
    roster and counter fields in the body are ignored.
    """
    requester, patch = update_data.split_requester()
    result = await registry.update(event_id, patch, requester)
    if not result.changed:
        return EventUpdatedResponse(
            message="No changes were made to the event",
            event_id=event_id,
            status=result.status,
        )

    await invalidate_event_cache()
    return EventUpdatedResponse(
        message="Event updated successfully!",
        event_id=event_id,
        status=result.status,
    )


@router.delete("/{event_id}", response_model=EventDeletedResponse)
async def delete_event_endpoint(
    event_id: str,
    registry: EventRegistry = Depends(get_event_registry),
):
    """Delete an event; its roster goes with it."""
    await registry.delete(event_id)
    await invalidate_event_cache()
    return EventDeletedResponse(message="Event deleted successfully")


@router.post("/{event_id}/join", response_model=JoinResponse)
async def join_event_endpoint(
    event_id: str,
    join_data: JoinRequest,
    attendance: AttendanceManager = Depends(get_attendance_manager),
):
    """
    Join an event.

    Admission is decided by a single conditional write at the store, so
    concurrent joins can neither overfill the event nor add the same email
    twice. A lost race is reported as 409 and is not retried.
    """
    result = await attendance.join(event_id, join_data.email)
    await invalidate_event_cache()
    return JoinResponse(
        message="Successfully joined the event!",
        current_attendees=result.current_attendees,
        max_attendees=result.max_attendees,
        event_id=str(result.event_id),
        user_email=result.email,
    )


@router.get("/{event_id}/check-join/{email}", response_model=MembershipResponse)
async def check_join_endpoint(
    event_id: str,
    email: str,
    attendance: AttendanceManager = Depends(get_attendance_manager),
):
    """Whether `email` is on the roster (case and whitespace insensitive)."""
    membership = await attendance.check_joined(event_id, email)
    return MembershipResponse(
        has_joined=membership.has_joined,
        current_attendees=membership.current_attendees,
        max_attendees=membership.max_attendees,
        user_email=membership.email,
        attendees=list(membership.attendees),
    )
