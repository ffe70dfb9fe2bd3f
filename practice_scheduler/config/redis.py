# practice_scheduler/config/redis.py
"""Redis configuration and connection setup"""
import redis.asyncio as redis
from typing import Optional

from practice_scheduler.config.settings import get_settings

settings = get_settings()

# Redis connection pool
_redis_pool: Optional[redis.ConnectionPool] = None


def get_redis_pool() -> redis.ConnectionPool:
    """Get or create Redis connection pool"""
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = redis.ConnectionPool.from_url(
            settings.REDIS_URL,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            retry_on_timeout=True,
        )
    return _redis_pool


async def get_redis() -> redis.Redis:
    """Get Redis client from pool"""
    pool = get_redis_pool()
    return redis.Redis(connection_pool=pool)


def create_standalone_redis() -> redis.Redis:
    """
    Redis client with its own connections.

    Celery tasks drive coroutines through asyncio.run, which opens a fresh
    event loop per call, so they cannot reuse the shared pool.
    """
    return redis.Redis.from_url(settings.REDIS_URL, retry_on_timeout=True)


class RedisKeys:
    """Redis key patterns for consistent naming"""

    # Single-flight lock for the weekly series extension run
    SERIES_EXTENSION_LOCK = "lock:series_extension"

    # Last extension run summary (processed/created/skipped/failed)
    SERIES_EXTENSION_LAST_RUN = "series_extension:last_run"
