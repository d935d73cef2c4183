"""
Idempotency cache for wizard callbacks.

Slack may redeliver the same interaction (network retries). The terminal
"Done" transition must not post the update twice, so its callback is
identified by a key derived from the state token and the submitted field
values and claimed here before delivery.

- Redis SET NX EX when Redis is reachable (shared across workers)
- Bounded in-memory LRU with TTL otherwise
"""

import asyncio
import hashlib
import json
import logging
import time
from collections import OrderedDict
from typing import Any

from src.services.redis_service import RedisService, get_redis_service

logger = logging.getLogger(__name__)

_KEY_PREFIX = "maker:idempotency:"


def idempotency_key(*parts: Any) -> str:
    """
    Derive a stable key from callback parts.

    Parts are serialized as canonical JSON (sorted keys) so dict ordering
    does not change the key.
    """
    canonical = json.dumps(parts, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class IdempotencyCache:
    """
    Short-lived "seen this callback" cache.

    Args:
        ttl: Seconds a claim is remembered
        max_size: Maximum in-memory entries before LRU eviction
        redis_service: Redis service instance (uses singleton if None)
    """

    DEFAULT_TTL = 600  # 10 minutes
    MAX_SIZE = 10000

    def __init__(
        self,
        ttl: int = DEFAULT_TTL,
        max_size: int = MAX_SIZE,
        redis_service: RedisService | None = None,
    ) -> None:
        self._ttl = ttl
        self._max_size = max_size
        self._redis = redis_service or get_redis_service()
        # key -> expiry (monotonic seconds); insertion order is LRU order
        self._seen: OrderedDict[str, float] = OrderedDict()
        self._lock = asyncio.Lock()

    async def claim(self, key: str) -> bool:
        """
        Claim a key.

        Returns:
            True on first claim, False if the key was claimed within the TTL
        """
        try:
            claimed = await self._redis.set_if_absent(f"{_KEY_PREFIX}{key}", 1, ttl=self._ttl)
        except Exception as e:  # Intentional catch-all: Redis outage must not block the wizard
            logger.warning(
                "Redis claim failed, using memory fallback",
                extra={"error": type(e).__name__},
            )
            claimed = None
        if claimed is not None:
            return claimed

        async with self._lock:
            now = time.monotonic()
            self._cleanup_expired(now)
            if key in self._seen:
                return False
            if len(self._seen) >= self._max_size:
                self._seen.popitem(last=False)
            self._seen[key] = now + self._ttl
            return True

    async def release(self, key: str) -> None:
        """Forget a claim (after a failed delivery, so the user can retry)."""
        async with self._lock:
            self._seen.pop(key, None)
        try:
            await self._redis.delete(f"{_KEY_PREFIX}{key}")
        except Exception as e:  # Intentional catch-all: release is best-effort
            logger.warning(
                "Redis release failed",
                extra={"error": type(e).__name__},
            )

    def _cleanup_expired(self, now: float) -> None:
        expired = [key for key, expires_at in self._seen.items() if expires_at <= now]
        for key in expired:
            del self._seen[key]

    async def size(self) -> int:
        """Number of live in-memory claims."""
        async with self._lock:
            self._cleanup_expired(time.monotonic())
            return len(self._seen)

    async def close(self) -> None:
        """Release the Redis connection."""
        await self._redis.close()


__all__ = ["idempotency_key", "IdempotencyCache"]
