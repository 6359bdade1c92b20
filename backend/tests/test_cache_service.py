"""
Tests for the event listing cache, backed by fakeredis.
"""

import fakeredis
import pytest
import pytest_asyncio
import redis.asyncio as redis
from httpx import AsyncClient

from careerhub.schemas.event import EventFilters
from careerhub.services import cache_service

UPCOMING = EventFilters()


@pytest_asyncio.fixture
async def fake_redis(monkeypatch):
    """Isolated fakeredis server wired in as the cache client."""
    client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)

    async def _get_redis():
        return client

    monkeypatch.setattr(cache_service, "get_redis", _get_redis)
    yield client
    await client.aclose()


def _broken(*args, **kwargs):
    raise redis.ConnectionError("connection refused")


@pytest.mark.asyncio
async def test_set_then_get(fake_redis):
    page = {"events": [], "total": 0, "page": 1, "page_size": 20, "cached": False}
    await cache_service.set_cached_events(1, 20, UPCOMING, page)

    assert await cache_service.get_cached_events(1, 20, UPCOMING) == page
    assert await cache_service.get_cached_events(2, 20, UPCOMING) is None

    key = cache_service.event_list_key(1, 20, UPCOMING)
    ttl = await fake_redis.ttl(key)
    assert 0 < ttl <= cache_service.settings.REDIS_CACHE_TTL


@pytest.mark.asyncio
async def test_filters_are_part_of_the_key(fake_redis):
    online = EventFilters(event_format="online")
    await cache_service.set_cached_events(1, 20, online, {"events": ["online"]})

    assert await cache_service.get_cached_events(1, 20, UPCOMING) is None
    assert await cache_service.get_cached_events(1, 20, online) == {"events": ["online"]}


@pytest.mark.asyncio
async def test_invalidate_removes_only_listing_keys(fake_redis):
    await cache_service.set_cached_events(1, 20, UPCOMING, {"events": []})
    await cache_service.set_cached_events(2, 20, EventFilters(upcoming_only=False), {"events": []})
    await fake_redis.set("session:abc", "keep")

    await cache_service.invalidate_event_cache()

    assert await fake_redis.keys("*") == ["session:abc"]


@pytest.mark.asyncio
async def test_cache_fails_open(fake_redis, monkeypatch):
    """A broken Redis reads as a miss and never raises."""
    await cache_service.set_cached_events(1, 20, UPCOMING, {"events": []})
    for command in ("get", "setex", "scan_iter", "info"):
        monkeypatch.setattr(fake_redis, command, _broken)

    assert await cache_service.get_cached_events(1, 20, UPCOMING) is None
    await cache_service.set_cached_events(1, 20, UPCOMING, {"events": []})
    await cache_service.invalidate_event_cache()
    assert (await cache_service.get_cache_stats())["status"] == "error"


@pytest.mark.asyncio
async def test_cache_stats(fake_redis, monkeypatch):
    async def stats(section=None):
        return {"keyspace_hits": 3, "keyspace_misses": 1}

    monkeypatch.setattr(fake_redis, "info", stats)

    assert await cache_service.get_cache_stats() == {
        "status": "connected",
        "hits": 3,
        "misses": 1,
        "hit_rate": 75.0,
    }


@pytest.mark.asyncio
async def test_disabled_cache_is_a_miss():
    assert await cache_service.get_redis() is None
    assert await cache_service.get_cached_events(1, 20, UPCOMING) is None
    assert await cache_service.get_cache_stats() == {"status": "disabled"}


@pytest.mark.asyncio
async def test_listing_served_from_cache_until_invalidated(client: AsyncClient, fake_redis, single_seat_event):
    first = await client.get("/api/v1/events/")
    assert first.json()["cached"] is False
    assert first.json()["events"][0]["spots_left"] == 1

    second = await client.get("/api/v1/events/")
    assert second.json()["cached"] is True

    filtered = await client.get("/api/v1/events/?format=online")
    assert filtered.json()["cached"] is False

    # A seated RSVP changes spots_left and drops every cached page
    await client.post(f"/api/v1/events/{single_seat_event}/rsvp", json={"name": "A", "email": "a@x.com"})
    third = await client.get("/api/v1/events/")
    assert third.json()["cached"] is False
    assert third.json()["events"][0]["spots_left"] == 0


def test_event_list_key_has_prefix():
    key = cache_service.event_list_key(3, 10, EventFilters(upcoming_only=False, featured=True))
    assert key.startswith(cache_service.EVENT_LIST_PREFIX)
    assert "page=3" in key
    assert "featured=True" in key
