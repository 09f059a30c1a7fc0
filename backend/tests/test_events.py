"""
Tests for the event registry: creation, ownership, capacity edits and
patch sanitizing.
"""

from datetime import datetime, timezone

import pytest

from eventhub.domain import MAX_CAPACITY, EventId
from eventhub.domain.errors import (
    EventNotFoundError,
    ForbiddenError,
    InvalidCapacityError,
    InvalidIdError,
    InvalidInputError,
)
from eventhub.schemas.event import EventCreate

from conftest import CREATOR


@pytest.mark.asyncio
async def test_create_event_starts_empty(registry):
    event = await registry.create(EventCreate(title="Python Meetup", max_attendees=50, creator_email=CREATOR))

    assert event.current_attendees == 0
    assert event.attendees == ()
    assert event.max_attendees == 50
    assert event.updated_at is None
    assert (await registry.get(str(event.id))).title == "Python Meetup"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw, expected",
    [(None, 0), ("abc", 0), ("", 0), ("12", 12), ("12 seats", 12), (7.9, 7), (True, 0), (0, 0)],
)
async def test_create_parses_capacity_leniently(registry, raw, expected):
    event = await registry.create(EventCreate(title="Lenient", max_attendees=raw))
    assert event.max_attendees == expected


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", [-1, "-3", -0.5 - 1])
async def test_create_rejects_negative_capacity(registry, raw):
    with pytest.raises(InvalidCapacityError):
        await registry.create(EventCreate(title="Negative", max_attendees=raw))


@pytest.mark.asyncio
async def test_get_invalid_id(registry):
    with pytest.raises(InvalidIdError):
        await registry.get("12345")


@pytest.mark.asyncio
async def test_get_not_found(registry):
    with pytest.raises(EventNotFoundError):
        await registry.get(str(EventId.new()))


@pytest.mark.asyncio
async def test_update_by_non_creator_is_forbidden(registry, test_event):
    with pytest.raises(ForbiddenError):
        await registry.update(str(test_event.id), {"title": "Hijacked"}, "intruder@example.com")


@pytest.mark.asyncio
async def test_update_by_creator_succeeds(registry, test_event):
    result = await registry.update(str(test_event.id), {"title": "Renamed"}, CREATOR)

    assert result.changed is True
    assert result.status == "updated"
    assert result.event.title == "Renamed"
    assert result.event.updated_at is not None


@pytest.mark.asyncio
async def test_update_without_requester_skips_ownership(registry, test_event):
    result = await registry.update(str(test_event.id), {"title": "Anonymous edit"}, None)
    assert result.changed is True


@pytest.mark.asyncio
async def test_event_without_creator_is_editable_by_anyone(registry, make_event):
    event = await make_event(registry, creator_email=None)
    result = await registry.update(str(event.id), {"location": "Room 2"}, "anyone@example.com")
    assert result.event.location == "Room 2"


@pytest.mark.asyncio
async def test_capacity_edit_guard(registry, attendance, make_event):
    """With 5 attendees, max 3 is rejected while 5 and 0 (unlimited) are accepted."""
    event = await make_event(registry, max_attendees=10)
    for i in range(5):
        await attendance.join(str(event.id), f"p{i}@x.com")

    with pytest.raises(InvalidCapacityError):
        await registry.update(str(event.id), {"max_attendees": 3}, CREATOR)

    assert (await registry.update(str(event.id), {"max_attendees": 5}, CREATOR)).event.max_attendees == 5
    assert (await registry.update(str(event.id), {"max_attendees": 0}, CREATOR)).event.max_attendees == 0


@pytest.mark.asyncio
async def test_capacity_edit_rejects_negative(registry, test_event):
    with pytest.raises(InvalidCapacityError):
        await registry.update(str(test_event.id), {"max_attendees": -4}, CREATOR)


@pytest.mark.asyncio
async def test_update_ignores_roster_and_identity_fields(registry, attendance, test_event):
    await attendance.join(str(test_event.id), "real@x.com")

    result = await registry.update(
        str(test_event.id),
        {
            "title": "Still mine",
            "attendees": ["fake@x.com"],
            "current_attendees": 99,
            "currentAttendees": 99,
            "id": str(EventId.new()),
            "created_at": "2000-01-01T00:00:00Z",
        },
        CREATOR,
    )

    assert result.event.title == "Still mine"
    assert result.event.id == test_event.id
    assert result.event.attendees == ("real@x.com",)
    assert result.event.current_attendees == 1
    assert result.event.created_at == test_event.created_at


@pytest.mark.asyncio
async def test_noop_update_reports_unchanged(registry, test_event):
    result = await registry.update(str(test_event.id), {"title": test_event.title}, CREATOR)

    assert result.changed is False
    assert result.status == "unchanged"
    assert (await registry.get(str(test_event.id))).updated_at is None


@pytest.mark.asyncio
async def test_update_rejects_blank_title(registry, test_event):
    with pytest.raises(InvalidInputError):
        await registry.update(str(test_event.id), {"title": ""}, CREATOR)


@pytest.mark.asyncio
async def test_update_missing_event(registry):
    with pytest.raises(EventNotFoundError):
        await registry.update(str(EventId.new()), {"title": "x"}, CREATOR)


@pytest.mark.asyncio
async def test_delete_event(registry, test_event):
    await registry.delete(str(test_event.id))

    with pytest.raises(EventNotFoundError):
        await registry.get(str(test_event.id))
    with pytest.raises(EventNotFoundError):
        await registry.delete(str(test_event.id))


@pytest.mark.asyncio
async def test_list_and_list_by_creator(registry, make_event):
    await make_event(registry, title="Mine 1")
    await make_event(registry, title="Mine 2")
    await make_event(registry, title="Theirs", creator_email="other@example.com")

    assert len(await registry.list_events()) == 3
    mine = await registry.list_events_by_creator(CREATOR)
    assert sorted(e.title for e in mine) == ["Mine 1", "Mine 2"]


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["99999999999999999999", MAX_CAPACITY + 1, 1e12])
async def test_create_rejects_capacity_beyond_column_range(registry, raw):
    with pytest.raises(InvalidCapacityError):
        await registry.create(EventCreate(title="Stadium", max_attendees=raw))
    assert await registry.list_events() == []


@pytest.mark.asyncio
async def test_create_accepts_largest_capacity(registry):
    event = await registry.create(EventCreate(title="Stadium", max_attendees=MAX_CAPACITY))
    assert event.max_attendees == MAX_CAPACITY


@pytest.mark.asyncio
async def test_update_rejects_capacity_beyond_column_range(registry, test_event):
    with pytest.raises(InvalidCapacityError):
        await registry.update(str(test_event.id), {"max_attendees": "99999999999999999999"}, CREATOR)

    assert (await registry.get(str(test_event.id))).max_attendees == 10


@pytest.mark.asyncio
async def test_resending_same_date_without_offset_is_unchanged(registry, make_event):
    event = await make_event(registry, date=datetime(2030, 1, 1, tzinfo=timezone.utc))

    result = await registry.update(str(event.id), {"date": datetime(2030, 1, 1)}, CREATOR)

    assert result.status == "unchanged"
    assert result.event.updated_at is None
