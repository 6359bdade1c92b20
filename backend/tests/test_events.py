"""
Tests for event endpoints, health and metrics.
"""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from careerhub.services import event_service


def _future(days: int = 30) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


@pytest.mark.asyncio
async def test_create_event(client: AsyncClient):
    response = await client.post(
        "/api/v1/events/",
        json={
            "title": "Internship Fair 2026",
            "slug": "internship-fair-2026",
            "description": "Meet companies offering internships",
            "date": _future(),
            "location": "Main Hall",
            "capacity": 100,
        },
    )
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Internship Fair 2026"
    assert data["capacity"] == 100
    assert data["spots_taken"] == 0
    assert data["spots_left"] == 100


@pytest.mark.asyncio
async def test_create_event_past_date(client: AsyncClient):
    past_date = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
    response = await client.post(
        "/api/v1/events/",
        json={"title": "Past Event", "date": past_date, "capacity": 10},
    )
    assert response.status_code == 400
    assert response.json()["error"]["details"]["field"] == "date"


@pytest.mark.asyncio
async def test_create_event_negative_capacity(client: AsyncClient):
    response = await client.post(
        "/api/v1/events/",
        json={"title": "Broken", "date": _future(), "capacity": -1},
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_create_event_duplicate_slug(client: AsyncClient, open_event):
    response = await client.post(
        "/api/v1/events/",
        json={"title": "Another Fair", "slug": "internship-fair", "date": _future(), "capacity": 5},
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_get_event_by_id_and_slug(client: AsyncClient, open_event):
    by_id = await client.get(f"/api/v1/events/{open_event}")
    assert by_id.status_code == 200
    assert by_id.json()["slug"] == "internship-fair"

    by_slug = await client.get("/api/v1/events/internship-fair")
    assert by_slug.status_code == 200
    assert by_slug.json()["id"] == open_event


@pytest.mark.asyncio
async def test_get_event_not_found(client: AsyncClient):
    assert (await client.get("/api/v1/events/99999")).status_code == 404
    assert (await client.get("/api/v1/events/no-such-event")).status_code == 404


@pytest.mark.asyncio
async def test_list_events(client: AsyncClient, open_event, full_event):
    response = await client.get("/api/v1/events/")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["page"] == 1
    assert data["cached"] is False
    assert {e["id"] for e in data["events"]} == {open_event, full_event}


@pytest.mark.asyncio
async def test_list_events_pagination(client: AsyncClient, open_event, full_event):
    response = await client.get("/api/v1/events/?page=2&page_size=1")
    assert response.status_code == 200
    data = response.json()
    assert data["page_size"] == 1
    assert data["total"] == 2
    assert len(data["events"]) == 1


@pytest.mark.asyncio
async def test_update_capacity(client: AsyncClient, single_seat_event):
    """Raising capacity opens seats for the next RSVP."""
    await client.post(f"/api/v1/events/{single_seat_event}/rsvp", json={"name": "A", "email": "a@x.com"})

    response = await client.patch(f"/api/v1/events/{single_seat_event}", json={"capacity": 2})
    assert response.status_code == 200
    assert response.json()["capacity"] == 2
    assert response.json()["spots_taken"] == 1

    rsvp = await client.post(
        f"/api/v1/events/{single_seat_event}/rsvp", json={"name": "B", "email": "b@x.com"}
    )
    assert rsvp.json()["outcome"] == "seated"


@pytest.mark.asyncio
async def test_lowered_capacity_waitlists(client: AsyncClient, make_event):
    event_id = await make_event(capacity=5, spots_taken=3)

    response = await client.patch(f"/api/v1/events/{event_id}", json={"capacity": 2})
    assert response.json()["spots_left"] == 0

    rsvp = await client.post(f"/api/v1/events/{event_id}/rsvp", json={"name": "A", "email": "a@x.com"})
    assert rsvp.json()["outcome"] == "waitlisted"


@pytest.mark.asyncio
async def test_update_unknown_event(client: AsyncClient):
    response = await client.patch("/api/v1/events/99999", json={"title": "Nope"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["cache"] == {"status": "disabled"}


@pytest.mark.asyncio
async def test_metrics_exposes_admission_counter(client: AsyncClient, open_event):
    await client.post(f"/api/v1/events/{open_event}/rsvp", json={"name": "A", "email": "a@x.com"})

    response = await client.get("/metrics")
    assert response.status_code == 200
    assert 'admission_requests_total{outcome="seated"}' in response.text


@pytest.mark.asyncio
async def test_create_event_listing_fields(client: AsyncClient):
    response = await client.post(
        "/api/v1/events/",
        json={
            "title": "Resume Clinic",
            "date": _future(),
            "capacity": 20,
            "event_type": "seminar",
            "event_format": "online",
            "featured": True,
        },
    )
    assert response.status_code == 201
    data = response.json()
    assert data["event_type"] == "seminar"
    assert data["event_format"] == "online"
    assert data["featured"] is True
    assert data["status"] == "upcoming"


@pytest.mark.asyncio
async def test_create_event_defaults(client: AsyncClient):
    response = await client.post(
        "/api/v1/events/",
        json={"title": "Mock Interviews", "date": _future(), "capacity": 10},
    )
    data = response.json()
    assert data["event_type"] == "workshop"
    assert data["event_format"] == "on-campus"
    assert data["featured"] is False


@pytest.mark.asyncio
async def test_create_event_unknown_format(client: AsyncClient):
    response = await client.post(
        "/api/v1/events/",
        json={"title": "Broken", "date": _future(), "capacity": 10, "event_format": "telepathy"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_events_filters(client: AsyncClient, make_event):
    workshop = await make_event(capacity=10, event_type="workshop", event_format="on-campus")
    fair = await make_event(capacity=10, event_type="fair", event_format="hybrid", featured=True)
    webinar = await make_event(capacity=10, event_type="seminar", event_format="online")
    done = await make_event(capacity=10, event_type="fair", status="completed")

    async def ids(query: str) -> set[int]:
        response = await client.get(f"/api/v1/events/{query}")
        assert response.status_code == 200
        return {e["id"] for e in response.json()["events"]}

    assert await ids("") == {workshop, fair, webinar, done}
    assert await ids("?type=fair") == {fair, done}
    assert await ids("?format=online") == {webinar}
    assert await ids("?featured=true") == {fair}
    assert await ids("?featured=false") == {workshop, webinar, done}
    assert await ids("?status=upcoming") == {workshop, fair, webinar}
    assert await ids("?type=fair&status=completed") == {done}


@pytest.mark.asyncio
async def test_list_events_rejects_unknown_status(client: AsyncClient):
    response = await client.get("/api/v1/events/?status=postponed")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_event_status(client: AsyncClient, open_event):
    response = await client.patch(f"/api/v1/events/{open_event}", json={"status": "cancelled", "featured": True})
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert response.json()["featured"] is True

    listed = await client.get("/api/v1/events/?status=upcoming")
    assert open_event not in {e["id"] for e in listed.json()["events"]}


@pytest.mark.asyncio
@pytest.mark.parametrize("slug", ["2026", "12-34"])
async def test_create_event_rejects_numeric_slug(client: AsyncClient, slug):
    """All-digit references are event ids, so such a slug could never be fetched."""
    response = await client.post(
        "/api/v1/events/",
        json={"title": "Fair", "slug": slug, "date": _future(), "capacity": 5},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_slug_with_digits_is_fetchable(client: AsyncClient):
    created = await client.post(
        "/api/v1/events/",
        json={"title": "Fair", "slug": "2026-career-fair", "date": _future(), "capacity": 5},
    )
    assert created.status_code == 201

    response = await client.get("/api/v1/events/2026-career-fair")
    assert response.status_code == 200
    assert response.json()["id"] == created.json()["id"]


@pytest.mark.asyncio
async def test_concurrent_duplicate_slug_is_conflict(client: AsyncClient, open_event, monkeypatch):
    """A create that passes the slug check but loses the race still answers 409."""

    async def slug_not_seen_yet(db, slug):
        return None

    monkeypatch.setattr(event_service, "_find_by_slug", slug_not_seen_yet)

    response = await client.post(
        "/api/v1/events/",
        json={"title": "Another Fair", "slug": "internship-fair", "date": _future(), "capacity": 5},
    )
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"
