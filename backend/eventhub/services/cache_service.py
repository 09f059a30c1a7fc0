"""
Redis caching service for event listings.

CACHING STRATEGY
================

What we cache:
  - The full event listing and the per-creator listings (JSON-serialized)
  - Key pattern: "events:list:all" and "events:list:creator={email}"

Invalidation strategy:
  - Any event mutation (create, update, delete, successful join) deletes
    every "events:list:*" key; listings embed roster and counter
  - TTL-based expiry as safety net (5 minutes)

Why NOT cache individual events or membership checks:
  - The join pre-check and check-join need real-time roster state
  - Serving a stale roster would report "not joined" right after a join

Redis is advisory. Every failure is logged and treated as a miss; the
store stays authoritative.
"""

import json
import time
from typing import Optional

import redis.asyncio as redis
from eventhub.core.config import get_settings
from eventhub.core.logging import get_logger
from eventhub.core.metrics import record_cache_operation

logger = get_logger(__name__)

LIST_KEY_PREFIX = "events:list:"

_redis_client: Optional[redis.Redis] = None
# Monotonic deadline before which no reconnect is attempted
_reconnect_after: float = 0.0


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled or down.

    After a failed ping the cache stays off for REDIS_RETRY_INTERVAL seconds,
    so an outage costs one connect timeout per interval instead of one per call.
    """
    global _redis_client, _reconnect_after
    settings = get_settings()

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        if time.monotonic() < _reconnect_after:
            return None
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
        except (redis.RedisError, OSError) as e:
            logger.error(
                "redis_connection_failed",
                error=str(e),
                retry_in_seconds=settings.REDIS_RETRY_INTERVAL,
            )
            await client.aclose()
            _reconnect_after = time.monotonic() + settings.REDIS_RETRY_INTERVAL
            return None
        logger.info("redis_connected", url=settings.REDIS_URL)
        _redis_client = client

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def event_list_key(creator_email: Optional[str] = None) -> str:
    if creator_email is None:
        return f"{LIST_KEY_PREFIX}all"
    return f"{LIST_KEY_PREFIX}creator={creator_email}"


async def get_cached_events(creator_email: Optional[str] = None) -> Optional[list]:
    """Retrieve a cached event listing."""
    client = await get_redis()
    if not client:
        return None

    key = event_list_key(creator_email)
    try:
        data = await client.get(key)
    except redis.RedisError as e:
        logger.error("cache_get_error", key=key, error=str(e))
        return None

    record_cache_operation("get", hit=data is not None)
    if data:
        logger.debug("cache_hit", key=key)
        return json.loads(data)
    logger.debug("cache_miss", key=key)
    return None


async def set_cached_events(data: list, creator_email: Optional[str] = None) -> None:
    """Cache an event listing with TTL."""
    client = await get_redis()
    if not client:
        return

    settings = get_settings()
    key = event_list_key(creator_email)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except redis.RedisError as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_event_cache() -> None:
    """
    Invalidate all cached event listings.
    Uses SCAN to find and delete all keys matching the prefix.
    """
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{LIST_KEY_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except redis.RedisError as e:
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except redis.RedisError as e:
        return {"status": "error", "error": str(e)}
