"""Redis cache for lookup lists.

Genres, moods and active streaming services change only when the catalog is
reseeded, so their JSON payloads are kept in Redis for a few minutes. Every
operation degrades to a miss when Redis is unreachable; the database stays
the source of truth.
"""

import json
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any

import redis.asyncio as redis

from cinecrib.config import get_settings
from cinecrib.constants import CACHE_TTL_LOOKUPS
from cinecrib.utils.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

LOOKUP_NAMESPACE = "lookup"


class RedisCache:
    """Async Redis cache client with JSON serialization."""

    def __init__(self) -> None:
        self._client: redis.Redis | None = None
        self._connected = False

    async def _get_client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(
                str(settings.redis_url),
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self) -> bool:
        """Test Redis connection."""
        try:
            client = await self._get_client()
            await client.ping()
            self._connected = True
            return True
        except Exception as e:
            logger.warning(f"Redis cache unavailable: {e}")
            self._connected = False
            return False

    async def ping(self) -> bool:
        """Ping Redis to check connection health."""
        client = await self._get_client()
        return await client.ping()

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None
            self._connected = False

    async def get(self, key: str) -> Any | None:
        """Get value from cache, or None if missing, expired or unreachable."""
        if not self._connected:
            return None

        try:
            client = await self._get_client()
            data = await client.get(key)
            if data:
                return json.loads(data)
            return None
        except Exception as e:
            logger.debug(f"Cache get error for {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: timedelta) -> bool:
        """Set a JSON-serializable value with a TTL."""
        if not self._connected:
            return False

        try:
            client = await self._get_client()
            serialized = json.dumps(value, default=str)
            await client.setex(key, int(ttl.total_seconds()), serialized)
            return True
        except Exception as e:
            logger.debug(f"Cache set error for {key}: {e}")
            return False

    async def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching a glob pattern; returns the number deleted."""
        if not self._connected:
            return 0

        try:
            client = await self._get_client()
            keys = [key async for key in client.scan_iter(match=pattern)]
            if keys:
                return await client.delete(*keys)
            return 0
        except Exception as e:
            logger.debug(f"Cache delete pattern error for {pattern}: {e}")
            return 0


# Global cache instance
cache = RedisCache()


def lookup_key(name: str) -> str:
    return f"{LOOKUP_NAMESPACE}:{name}"


async def get_or_load_lookup(
    name: str,
    loader: Callable[[], Awaitable[list[dict[str, Any]]]],
) -> list[dict[str, Any]]:
    """Return a cached lookup list, loading and storing it on a miss."""
    key = lookup_key(name)
    cached_value = await cache.get(key)
    if cached_value is not None:
        logger.debug(f"Cache HIT: {key}")
        return cached_value

    logger.debug(f"Cache MISS: {key}")
    value = await loader()
    await cache.set(key, value, timedelta(seconds=CACHE_TTL_LOOKUPS))
    return value


async def invalidate_lookups() -> None:
    """Drop every cached lookup list (after reseeding the catalog)."""
    deleted = await cache.delete_pattern(f"{LOOKUP_NAMESPACE}:*")
    if deleted:
        logger.info(f"Invalidated {deleted} lookup cache entries")
