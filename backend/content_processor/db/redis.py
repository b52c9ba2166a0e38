"""
Redis Connection

Lazily created connection pool shared by the Redis chunk store.

Usage:
    from content_processor.db.redis import get_redis, close_redis_pool

    client = await get_redis()
    await client.hgetall("contentProcessor:chunks")
    await close_redis_pool()
"""

import logging
from typing import Optional

import redis.asyncio as redis

from content_processor.config.settings import settings

logger = logging.getLogger(__name__)

# Single operator, sequential pipeline: a handful of connections is plenty
MAX_CONNECTIONS = 4

_redis_pool: Optional[redis.ConnectionPool] = None


async def get_redis_pool() -> redis.ConnectionPool:
    """Get or create the connection pool for settings.REDIS_URL."""
    global _redis_pool
    if _redis_pool is None:
        logger.debug(f"Creating Redis pool for {settings.REDIS_URL}")
        _redis_pool = redis.ConnectionPool.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            max_connections=MAX_CONNECTIONS,
        )
    return _redis_pool


async def get_redis() -> redis.Redis:
    """Redis client bound to the shared pool (string responses)."""
    pool = await get_redis_pool()
    return redis.Redis(connection_pool=pool)


async def close_redis_pool() -> None:
    """Disconnect and forget the shared pool."""
    global _redis_pool
    if _redis_pool is not None:
        await _redis_pool.disconnect()
        _redis_pool = None
