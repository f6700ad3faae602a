"""
Redis Cache Module

Optional caching layer. When Redis is not initialized every cache operation
is a no-op, so the API keeps serving straight from the database.
"""

import json
from typing import Any, Optional, Union
from datetime import timedelta

import structlog
from redis.asyncio import Redis, ConnectionPool
from redis.exceptions import RedisError

from src.config import get_settings

logger = structlog.get_logger(__name__)

# Global Redis connection
_redis_pool: Optional[ConnectionPool] = None
_redis_client: Optional[Redis] = None


async def init_redis() -> Redis:
    """Initialize Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client is not None:
        return _redis_client

    settings = get_settings()
    _redis_pool = ConnectionPool.from_url(
        settings.redis.get_url(),
        max_connections=settings.redis.max_connections,
        socket_timeout=settings.redis.socket_timeout,
        decode_responses=True,
    )
    client = Redis(connection_pool=_redis_pool)

    try:
        await client.ping()
    except RedisError as e:
        logger.error("Redis connection failed", error=str(e))
        await _redis_pool.disconnect()
        _redis_pool = None
        raise

    _redis_client = client
    logger.info("Redis connection established")
    return _redis_client


async def close_redis() -> None:
    """Close Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None

    if _redis_pool:
        await _redis_pool.disconnect()
        _redis_pool = None

    logger.info("Redis connection closed")


def get_redis() -> Optional[Redis]:
    """Redis client, or None when caching is disabled"""
    return _redis_client


def is_cache_available() -> bool:
    return _redis_client is not None


async def cache_get(key: str) -> Optional[Any]:
    """
    Get value from cache.

    Returns:
        Cached value or None if not found or caching is disabled
    """
    client = get_redis()
    if client is None:
        return None

    value = await client.get(key)
    if value is None:
        return None

    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


async def cache_set(
    key: str,
    value: Any,
    ttl: Optional[Union[int, timedelta]] = None,
) -> bool:
    """
    Set value in cache.

    Args:
        key: Cache key
        value: Value to cache (will be JSON serialized)
        ttl: Time-to-live in seconds or timedelta

    Returns:
        True if stored
    """
    client = get_redis()
    if client is None:
        return False

    try:
        serialized = json.dumps(value, default=str)
    except (TypeError, ValueError) as e:
        logger.warning("Failed to serialize value for cache", key=key, error=str(e))
        return False

    if ttl:
        if isinstance(ttl, timedelta):
            ttl = int(ttl.total_seconds())
        await client.setex(key, ttl, serialized)
    else:
        await client.set(key, serialized)

    return True


async def cache_delete(key: str) -> bool:
    """Delete key from cache"""
    client = get_redis()
    if client is None:
        return False
    result = await client.delete(key)
    return result > 0


class CacheManager:
    """
    Namespaced cache whose failures degrade to cache misses.

    Example:
        cache = CacheManager("reports")
        await cache.set("123", report_data, ttl=600)
        report = await cache.get("123")
    """

    def __init__(self, namespace: str, default_ttl: int = 3600):
        self.namespace = namespace
        self.default_ttl = default_ttl

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        try:
            return await cache_get(self._key(key))
        except RedisError as e:
            logger.warning("Cache read failed", namespace=self.namespace, key=key, error=str(e))
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        try:
            return await cache_set(self._key(key), value, ttl or self.default_ttl)
        except RedisError as e:
            logger.warning("Cache write failed", namespace=self.namespace, key=key, error=str(e))
            return False

    async def delete(self, key: str) -> bool:
        try:
            return await cache_delete(self._key(key))
        except RedisError as e:
            logger.warning("Cache delete failed", namespace=self.namespace, key=key, error=str(e))
            return False


reports_cache = CacheManager("reports", default_ttl=get_settings().analytics.report_cache_ttl)
