"""
Redis cache for event listing pages.

Listings show spots_left, so every occupancy change (admission, cancellation)
and every event create/edit invalidates all cached pages. Keys share the
"events:list:" prefix and are removed with SCAN; TTL is the backstop.

Individual events and RSVP decisions never read from the cache: admission
compares against the database row, never against a cached count.

Redis is optional. When disabled or unreachable every call degrades to a
cache miss / no-op and the error is logged and counted.
"""

import json
from typing import Optional

import redis.asyncio as redis

from careerhub.core.config import get_settings
from careerhub.core.logging import get_logger
from careerhub.core.metrics import record_cache_operation, redis_connection_errors
from careerhub.schemas.event import EventFilters

logger = get_logger(__name__)
settings = get_settings()

EVENT_LIST_PREFIX = "events:list:"

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create the Redis connection. Returns None if Redis is disabled or down."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )
        try:
            await client.ping()
        except redis.RedisError as e:
            redis_connection_errors.inc()
            logger.error("redis_connection_failed", error=str(e))
            await client.aclose()
            return None
        _redis_client = client
        logger.info("redis_connected", url=settings.REDIS_URL)

    return _redis_client


async def close_redis() -> None:
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def event_list_key(page: int, page_size: int, filters: EventFilters) -> str:
    parts = [f"page={page}", f"size={page_size}"]
    parts += [f"{name}={value}" for name, value in filters.model_dump().items()]
    return EVENT_LIST_PREFIX + "&".join(parts)


async def get_cached_events(page: int, page_size: int, filters: EventFilters) -> Optional[dict]:
    client = await get_redis()
    if not client:
        return None

    key = event_list_key(page, page_size, filters)
    try:
        data = await client.get(key)
    except redis.RedisError as e:
        redis_connection_errors.inc()
        logger.error("cache_get_error", key=key, error=str(e))
        return None

    record_cache_operation("get", hit=data is not None)
    if data is None:
        return None
    return json.loads(data)


async def set_cached_events(page: int, page_size: int, filters: EventFilters, data: dict) -> None:
    client = await get_redis()
    if not client:
        return

    key = event_list_key(page, page_size, filters)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        record_cache_operation("set", hit=False)
    except redis.RedisError as e:
        redis_connection_errors.inc()
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_event_cache() -> None:
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{EVENT_LIST_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        logger.debug("cache_invalidated", keys_deleted=deleted)
    except redis.RedisError as e:
        redis_connection_errors.inc()
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
    except redis.RedisError as e:
        return {"status": "error", "error": str(e)}

    hits = info.get("keyspace_hits", 0)
    misses = info.get("keyspace_misses", 0)
    return {
        "status": "connected",
        "hits": hits,
        "misses": misses,
        "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
    }
