"""
HTTP tests: wire format, error mapping and the join flow through FastAPI.
"""

import asyncio
import uuid

import pytest
from httpx import AsyncClient

from eventhub.api.deps import get_event_store
from eventhub.domain.errors import StorageUnavailableError
from eventhub.main import app
from eventhub.stores import InMemoryEventStore

API = "/api/v1"


class UnreachableEventStore(InMemoryEventStore):
    async def _round_trip(self) -> None:
        raise StorageUnavailableError("test")


async def _create(client: AsyncClient, **overrides) -> str:
    payload = {"title": "Workshop", "maxAttendees": 10, "creatorEmail": "host@example.com"}
    payload.update(overrides)
    response = await client.post(f"{API}/events/", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["eventId"]


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["cache"] == {"status": "disabled"}


@pytest.mark.asyncio
async def test_root(client: AsyncClient):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"


@pytest.mark.asyncio
async def test_create_and_get_event_uses_camel_case(client: AsyncClient):
    event_id = await _create(client, description="Hands-on", imageUrl="https://img/x.png")

    response = await client.get(f"{API}/events/{event_id}")

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == event_id
    assert body["maxAttendees"] == 10
    assert body["currentAttendees"] == 0
    assert body["attendees"] == []
    assert body["imageUrl"] == "https://img/x.png"
    assert body["creatorEmail"] == "host@example.com"
    assert body["attendanceState"] == "open"
    assert body["isFull"] is False


@pytest.mark.asyncio
async def test_create_response_message(client: AsyncClient):
    response = await client.post(f"{API}/events/", json={"title": "Talk"})
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Event created successfully!"


@pytest.mark.asyncio
async def test_create_without_title_is_rejected(client: AsyncClient):
    response = await client.post(f"{API}/events/", json={"maxAttendees": 5})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_negative_capacity(client: AsyncClient):
    response = await client.post(f"{API}/events/", json={"title": "Bad", "maxAttendees": "-3"})
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_CAPACITY"


@pytest.mark.asyncio
async def test_get_event_errors(client: AsyncClient):
    bad = await client.get(f"{API}/events/not-an-id")
    assert bad.status_code == 400
    assert bad.json() == {"success": False, "code": "INVALID_ID", "message": "Invalid event ID"}

    missing = await client.get(f"{API}/events/{uuid.uuid4()}")
    assert missing.status_code == 404
    assert missing.json()["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_list_and_by_creator(client: AsyncClient):
    await _create(client, title="Mine")
    await _create(client, title="Theirs", creatorEmail="other@example.com")

    everything = await client.get(f"{API}/events/")
    assert {e["title"] for e in everything.json()} == {"Mine", "Theirs"}

    mine = await client.get(f"{API}/events/by-creator/host@example.com")
    assert [e["title"] for e in mine.json()] == ["Mine"]


@pytest.mark.asyncio
async def test_join_flow(client: AsyncClient):
    event_id = await _create(client, maxAttendees=2)

    joined = await client.post(f"{API}/events/{event_id}/join", json={"email": " Alice@X.com "})
    assert joined.status_code == 200
    body = joined.json()
    assert body["message"] == "Successfully joined the event!"
    assert body["currentAttendees"] == 1
    assert body["maxAttendees"] == 2
    assert body["eventId"] == event_id

    again = await client.post(f"{API}/events/{event_id}/join", json={"email": "alice@x.com"})
    assert again.status_code == 400
    assert again.json()["code"] == "ALREADY_JOINED"
    assert again.json()["message"] == "You have already joined this event"

    check = await client.get(f"{API}/events/{event_id}/check-join/ALICE@x.com")
    assert check.status_code == 200
    assert check.json()["hasJoined"] is True
    assert check.json()["attendees"] == ["Alice@X.com"]

    await client.post(f"{API}/events/{event_id}/join", json={"email": "bob@x.com"})
    full = await client.post(f"{API}/events/{event_id}/join", json={"email": "carol@x.com"})
    assert full.status_code == 400
    assert full.json()["code"] == "EVENT_FULL"


@pytest.mark.asyncio
async def test_join_without_email(client: AsyncClient):
    event_id = await _create(client)
    response = await client.post(f"{API}/events/{event_id}/join", json={})
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_concurrent_http_joins_respect_capacity(client: AsyncClient):
    event_id = await _create(client, maxAttendees=3)

    responses = await asyncio.gather(
        *(
            client.post(f"{API}/events/{event_id}/join", json={"email": f"user{i}@x.com"})
            for i in range(20)
        )
    )

    statuses = [r.status_code for r in responses]
    assert statuses.count(200) == 3
    assert all(s in (200, 400, 409) for s in statuses)
    final = (await client.get(f"{API}/events/{event_id}")).json()
    assert final["currentAttendees"] == 3
    assert len(final["attendees"]) == 3


@pytest.mark.asyncio
async def test_update_ownership_and_noop(client: AsyncClient):
    event_id = await _create(client)

    forbidden = await client.put(
        f"{API}/events/{event_id}",
        json={"title": "Mine now", "creatorEmail": "intruder@example.com"},
    )
    assert forbidden.status_code == 403
    assert forbidden.json()["code"] == "FORBIDDEN"

    updated = await client.put(
        f"{API}/events/{event_id}",
        json={"title": "Renamed", "creatorEmail": "host@example.com"},
    )
    assert updated.status_code == 200
    assert updated.json()["status"] == "updated"
    assert updated.json()["message"] == "Event updated successfully!"

    unchanged = await client.put(
        f"{API}/events/{event_id}",
        json={"title": "Renamed", "creatorEmail": "host@example.com"},
    )
    assert unchanged.status_code == 200
    assert unchanged.json()["status"] == "unchanged"
    assert unchanged.json()["message"] == "No changes were made to the event"


@pytest.mark.asyncio
async def test_update_cannot_touch_roster(client: AsyncClient):
    event_id = await _create(client)
    await client.post(f"{API}/events/{event_id}/join", json={"email": "real@x.com"})

    await client.put(
        f"{API}/events/{event_id}",
        json={"attendees": ["fake@x.com"], "currentAttendees": 50, "location": "Hall B"},
    )

    body = (await client.get(f"{API}/events/{event_id}")).json()
    assert body["attendees"] == ["real@x.com"]
    assert body["currentAttendees"] == 1
    assert body["location"] == "Hall B"


@pytest.mark.asyncio
async def test_update_capacity_below_occupancy(client: AsyncClient):
    event_id = await _create(client, maxAttendees=5)
    for i in range(3):
        await client.post(f"{API}/events/{event_id}/join", json={"email": f"p{i}@x.com"})

    response = await client.put(f"{API}/events/{event_id}", json={"maxAttendees": 2})
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_CAPACITY"


@pytest.mark.asyncio
async def test_delete_event(client: AsyncClient):
    event_id = await _create(client)

    deleted = await client.delete(f"{API}/events/{event_id}")
    assert deleted.status_code == 200
    assert deleted.json()["success"] is True

    assert (await client.get(f"{API}/events/{event_id}")).status_code == 404
    assert (await client.delete(f"{API}/events/{event_id}")).status_code == 404


@pytest.mark.asyncio
async def test_storage_unavailable_maps_to_503(client: AsyncClient):
    async def override():
        return UnreachableEventStore()

    app.dependency_overrides[get_event_store] = override

    response = await client.get(f"{API}/events/")

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "1"
    assert response.json()["code"] == "STORAGE_UNAVAILABLE"


@pytest.mark.asyncio
async def test_user_registration_flow(client: AsyncClient):
    payload = {"email": "dana@example.com", "name": "Dana", "photoUrl": "https://img/d.png"}

    created = await client.post(f"{API}/users/", json=payload)
    assert created.status_code == 201
    user = created.json()
    assert user["email"] == "dana@example.com"
    assert user["photoUrl"] == "https://img/d.png"

    duplicate = await client.post(f"{API}/users/", json=payload)
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "ALREADY_EXISTS"

    fetched = await client.get(f"{API}/users/dana@example.com")
    assert fetched.status_code == 200
    assert fetched.json()["id"] == user["id"]

    listed = await client.get(f"{API}/users/")
    assert [u["email"] for u in listed.json()] == ["dana@example.com"]

    deleted = await client.delete(f"{API}/users/{user['id']}")
    assert deleted.status_code == 200
    assert (await client.get(f"{API}/users/dana@example.com")).status_code == 404


@pytest.mark.asyncio
async def test_user_errors(client: AsyncClient):
    invalid_email = await client.post(f"{API}/users/", json={"email": "not-an-email"})
    assert invalid_email.status_code == 422

    bad_id = await client.delete(f"{API}/users/123")
    assert bad_id.status_code == 400
    assert bad_id.json()["code"] == "INVALID_ID"

    missing = await client.delete(f"{API}/users/{uuid.uuid4()}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"


@pytest.mark.asyncio
async def test_metrics_exposes_join_counter(client: AsyncClient):
    event_id = await _create(client)
    await client.post(f"{API}/events/{event_id}/join", json={"email": "m@x.com"})

    response = await client.get("/metrics")

    assert response.status_code == 200
    assert "event_join_attempts_total" in response.text
