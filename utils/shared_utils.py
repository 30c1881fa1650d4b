"""
Shared utility functions for routers and services
"""
import json
import logging
from typing import Optional, Callable, Any, Awaitable

from utils.redis_client import get_redis_client

logger = logging.getLogger(__name__)


async def get_cached(key: str, fallback_func: Callable[[], Awaitable[Any]], ttl_seconds: int) -> Any:
    """
    Distributed caching utility with Redis fallback.

    Attempts to fetch data from Redis cache. If not found or Redis is unavailable,
    executes the fallback function and stores the result in Redis with TTL.

    Args:
        key: Redis cache key (e.g., "user:123")
        fallback_func: Async callable that returns the data to cache
        ttl_seconds: Time-to-live in seconds for the cached value

    Returns:
        The cached value or the result from fallback_func
    """
    client = get_redis_client()
    if client is not None:
        try:
            cached_value = client.get(key)
            if cached_value is not None:
                try:
                    return json.loads(cached_value)
                except (json.JSONDecodeError, TypeError):
                    return cached_value
        except Exception as e:
            logger.warning(f"Redis cache get failed for key '{key}': {e}. Executing fallback.")

    # Cache miss or Redis unavailable - execute fallback
    result = await fallback_func()

    if client is not None:
        try:
            cache_value = json.dumps(result) if isinstance(result, (dict, list)) else str(result)
            client.setex(key, ttl_seconds, cache_value)
        except Exception as e:
            logger.warning(f"Redis cache set failed for key '{key}': {e}. Result not cached.")

    return result


def invalidate_cached(key: str) -> None:
    """Drop a cached value so the next get_cached call reloads it."""
    client = get_redis_client()
    if client is None:
        return
    try:
        client.delete(key)
    except Exception as e:
        logger.warning(f"Redis cache delete failed for key '{key}': {e}")


def log_endpoint_event(endpoint: str, user_id: Optional[str] = None, result: str = "success", details: Optional[dict] = None):
    """Log endpoint execution to app.log"""
    logger.info(f"{endpoint} | user={user_id or 'none'} | {result} | {json.dumps(details or {}, default=str)}")
