"""Redis cache helper: JSON get/set with a TTL.

Every failure is logged and treated as a miss so callers never depend on Redis.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import redis.asyncio as redis
import structlog

from bookmarkd.config import get_settings

logger = structlog.get_logger()

_redis_client: redis.Redis | None = None


async def get_redis() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        settings = get_settings()
        _redis_client = redis.from_url(settings.redis_dsn, decode_responses=True)
    return _redis_client


async def get_cached(key: str) -> Optional[Any]:
    try:
        r = await get_redis()
        value = await r.get(key)
        if value:
            return json.loads(value)
    except (redis.RedisError, OSError, ValueError):
        logger.warning("cache_get_error", key=key)
    return None


async def set_cached(key: str, value: Any, ttl_seconds: int = 300) -> None:
    try:
        r = await get_redis()
        await r.setex(key, ttl_seconds, json.dumps(value, default=str))
    except (redis.RedisError, OSError):
        logger.warning("cache_set_error", key=key)


async def close_redis() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
