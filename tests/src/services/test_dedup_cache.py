"""
Tests for IdempotencyCache.

Covers:
- First claim wins, repeats are rejected
- Release after failure
- TTL expiry and LRU bound of the memory fallback
- Redis path (mocked) and Redis errors falling back to memory
- Stable idempotency keys
"""

from unittest.mock import AsyncMock, Mock

import pytest

from src.services.dedup_cache import IdempotencyCache, idempotency_key
from src.services.redis_service import RedisService


@pytest.fixture
def mock_redis():
    """Create a mock Redis service."""
    redis = Mock()
    redis.set_if_absent = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=True)
    return redis


@pytest.fixture
def memory_cache():
    return IdempotencyCache(ttl=600, max_size=3, redis_service=RedisService(""))


# =============================================================================
# Memory fallback
# =============================================================================


async def test_first_claim_wins(memory_cache):
    assert await memory_cache.claim("a") is True
    assert await memory_cache.claim("a") is False
    assert await memory_cache.claim("b") is True


async def test_release_allows_reclaim(memory_cache):
    await memory_cache.claim("a")
    await memory_cache.release("a")
    assert await memory_cache.claim("a") is True


async def test_claims_expire():
    cache = IdempotencyCache(ttl=0, redis_service=RedisService(""))
    assert await cache.claim("a") is True
    assert await cache.claim("a") is True


async def test_lru_bound(memory_cache):
    for key in ("a", "b", "c", "d"):
        assert await memory_cache.claim(key) is True
    assert await memory_cache.size() == 3
    # "a" was evicted, so it can be claimed again
    assert await memory_cache.claim("a") is True


# =============================================================================
# Redis path
# =============================================================================


async def test_redis_claim(mock_redis):
    cache = IdempotencyCache(ttl=600, redis_service=mock_redis)
    assert await cache.claim("a") is True
    mock_redis.set_if_absent.assert_awaited_once_with("maker:idempotency:a", 1, ttl=600)

    mock_redis.set_if_absent.return_value = False
    assert await cache.claim("a") is False
    assert await cache.size() == 0


async def test_redis_release(mock_redis):
    cache = IdempotencyCache(redis_service=mock_redis)
    await cache.release("a")
    mock_redis.delete.assert_awaited_once_with("maker:idempotency:a")


async def test_redis_error_falls_back_to_memory(mock_redis):
    mock_redis.set_if_absent.side_effect = ConnectionError("down")
    cache = IdempotencyCache(redis_service=mock_redis)
    assert await cache.claim("a") is True
    assert await cache.claim("a") is False


async def test_close_closes_redis(mock_redis):
    mock_redis.close = AsyncMock()
    await IdempotencyCache(redis_service=mock_redis).close()
    mock_redis.close.assert_awaited_once()


# =============================================================================
# Keys
# =============================================================================


def test_key_is_stable_and_order_independent():
    key = idempotency_key("finish", "v1.tok", {"name": "A", "status": "Green"})
    assert key == idempotency_key("finish", "v1.tok", {"status": "Green", "name": "A"})
    assert len(key) == 64


def test_key_changes_with_values():
    assert idempotency_key("finish", "t", {"name": "A"}) != idempotency_key("finish", "t", {"name": "B"})
    assert idempotency_key("finish", "t1", {}) != idempotency_key("finish", "t2", {})
