"""Redis service for short-lived shared state (idempotency keys)."""

import json
import logging
import os
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class RedisService:
    """
    Thin async Redis wrapper.

    Every operation degrades to a "not available" result (None/False) when
    Redis cannot be reached, so callers can fall back to in-memory state.
    An empty ``redis_url`` disables Redis entirely.
    """

    def __init__(self, redis_url: str | None = None) -> None:
        """Initialize (the connection is opened lazily)."""
        if redis_url is None:
            redis_url = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
        self._redis_url = redis_url
        self._client: redis.Redis | None = None
        self._unavailable = not redis_url

    async def _ensure_async_client(self) -> redis.Redis | None:
        """Get or create the async Redis client, None if unreachable."""
        if self._unavailable:
            return None
        if self._client is None:
            client = redis.from_url(  # type: ignore[no-untyped-call]
                self._redis_url,
                decode_responses=True,
                socket_connect_timeout=2,
            )
            try:
                await client.ping()
            except (RedisError, OSError) as e:
                await client.aclose()
                logger.warning(
                    "Redis unavailable, using in-memory fallback",
                    extra={"error": type(e).__name__},
                )
                self._unavailable = True
                return None
            self._client = client
        return self._client

    async def set_if_absent(self, key: str, value: Any, ttl: int) -> bool | None:
        """
        Atomically set a key only if it does not exist (SET NX EX).

        Returns:
            True if the key was set, False if it already existed,
            None if Redis is unavailable
        """
        client = await self._ensure_async_client()
        if client is None:
            return None
        result = await client.set(key, json.dumps(value, default=str), ex=ttl, nx=True)
        return bool(result)

    async def delete(self, key: str) -> bool:
        """Delete key."""
        client = await self._ensure_async_client()
        if client is None:
            return False
        return bool(await client.delete(key))

    async def close(self) -> None:
        """Close the connection pool, if one was opened."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


# Singleton instance
_redis_service: RedisService | None = None


def get_redis_service() -> RedisService:
    """Get Redis service singleton."""
    global _redis_service
    if _redis_service is None:
        _redis_service = RedisService()
    return _redis_service
