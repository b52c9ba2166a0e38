"""Database connections (Redis)."""

from content_processor.db.redis import close_redis_pool, get_redis, get_redis_pool

__all__ = ["close_redis_pool", "get_redis", "get_redis_pool"]
