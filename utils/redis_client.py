"""
Optional Redis connection shared by caching and rate limiting.
Without REDIS_URL (or with Redis unreachable) callers fall back to local behaviour.
"""
import logging

import redis

from config.settings import settings

logger = logging.getLogger(__name__)

_redis_client = None
_redis_checked = False


def get_redis_client():
    """Return a connected Redis client, or None. The connection is attempted once."""
    global _redis_client, _redis_checked
    if _redis_checked:
        return _redis_client
    _redis_checked = True

    if not settings.redis_url:
        logger.info("REDIS_URL not set. Using in-process fallbacks for caching and rate limiting.")
        return None
    try:
        # Supports redis:// and redis://:password@host:port
        client = redis.from_url(settings.redis_url, decode_responses=True)
        client.ping()
    except redis.RedisError as e:
        logger.warning(f"Redis connection failed: {e}. Using in-process fallbacks.")
        return None

    logger.info("Redis connected successfully")
    _redis_client = client
    return _redis_client
