"""
Services for the Maker Update bot.

Services:
    - SlackClient: async Slack Web API client (httpx)
    - RedisService: optional Redis backend for shared short-lived keys
    - IdempotencyCache: "seen this callback" cache for the terminal transition
"""

from .dedup_cache import IdempotencyCache, idempotency_key
from .redis_service import RedisService, get_redis_service
from .slack_client import SlackClient

__all__ = [
    "IdempotencyCache",
    "idempotency_key",
    "RedisService",
    "get_redis_service",
    "SlackClient",
]
