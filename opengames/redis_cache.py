"""
Redis Cache Module for OpenGames
Response cache for the public API with graceful degradation: when Redis is
not configured or errors, every operation is a logged no-op.
"""

import json
import logging
import re
from typing import Any, Callable, Dict, Optional

import redis

from opengames.cache_keys import GAME_DATA_PREFIXES, CacheTTL
from opengames.metrics import cache_operations_total

logger = logging.getLogger("main")

redis_client = None
_redis_url = None
_cache_stats = {
    "hits": 0,
    "misses": 0,
    "sets": 0,
    "deletes": 0,
    "errors": 0,
}

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def init_cache(redis_url: Optional[str]) -> bool:
    """
    Connect to Redis. Returns False, leaving the cache disabled, when no URL is
    configured or the server does not answer.
    """
    global redis_client, _redis_url

    redis_client = None
    _redis_url = redis_url
    if not redis_url:
        logger.info("Redis not configured. Cache will be disabled.")
        return False

    try:
        client = redis.from_url(redis_url, decode_responses=True, socket_timeout=2)
        client.ping()
        redis_client = client
        logger.info(f"Redis cache initialized at {_mask_url(redis_url)}")
        return True
    except (redis.RedisError, ValueError) as e:
        logger.warning(f"Redis cache initialization failed: {e}. Cache will be disabled.")
        return False


def _mask_url(url: Optional[str]) -> Optional[str]:
    if not url or "@" not in url:
        return url
    scheme, _, rest = url.partition("://")
    return f"{scheme}://***@{rest.split('@', 1)[1]}"


def _record(operation: str, count: int = 1) -> None:
    _cache_stats[operation] += count
    cache_operations_total.labels(operation=operation).inc(count)


def is_cache_enabled() -> bool:
    """Check if Redis cache is enabled and available"""
    return redis_client is not None


def get_cache_stats() -> Dict:
    """Get cache statistics (hits, misses, sets, deletes, errors)"""
    if not redis_client:
        return {"status": "disabled"}
    lookups = _cache_stats["hits"] + _cache_stats["misses"]
    hit_rate = round(_cache_stats["hits"] / lookups, 3) if lookups else 0.0
    return {**_cache_stats, "hitRate": hit_rate}


def reset_cache_stats() -> None:
    """Reset cache statistics"""
    for key in _cache_stats:
        _cache_stats[key] = 0


def cache_get(key: str) -> Optional[Any]:
    """
    Get a value from cache

    Args:
        key: Cache key

    Returns:
        Decoded JSON value, or None if not found or the cache is unavailable
    """
    if not redis_client:
        return None
    try:
        value = redis_client.get(key)
    except redis.RedisError as e:
        _record("errors")
        logger.warning(f"Cache get error for {key}: {e}")
        return None

    if value is None:
        _record("misses")
        logger.debug(f"Cache MISS: {key}")
        return None

    try:
        decoded = json.loads(value)
    except (TypeError, ValueError):
        logger.warning(f"Discarding undecodable cache entry: {key}")
        cache_delete(key)
        return None

    _record("hits")
    logger.debug(f"Cache HIT: {key}")
    return decoded


def cache_set(key: str, value: Any, ttl: int = CacheTTL.MEDIUM) -> bool:
    """
    Set a value in cache with TTL

    Args:
        key: Cache key
        value: Value to cache (must be JSON-serializable)
        ttl: Time to live in seconds (default: 300 = 5 min)

    Returns:
        True if set successfully, False otherwise
    """
    if not redis_client:
        return False
    try:
        redis_client.setex(key, ttl, json.dumps(value))
        _record("sets")
        logger.debug(f"Cache SET: {key} (TTL: {ttl}s)")
        return True
    except (redis.RedisError, TypeError, ValueError) as e:
        _record("errors")
        logger.warning(f"Cache set error for {key}: {e}")
        return False


def cache_get_or_set(key: str, fetcher: Callable[[], Any], ttl: int = CacheTTL.MEDIUM):
    """
    Return the cached value for `key`, computing and storing it on a miss.

    Returns:
        (value, hit) where hit tells whether the value came from the cache
    """
    cached_value = cache_get(key)
    if cached_value is not None:
        return cached_value, True

    value = fetcher()
    cache_set(key, value, ttl)
    return value, False


def cache_delete(key: str) -> bool:
    """
    Delete a value from cache

    Returns:
        True if a key was deleted, False otherwise
    """
    if not redis_client:
        return False
    try:
        result = redis_client.delete(key)
        if result > 0:
            _record("deletes", result)
            logger.debug(f"Cache DELETE: {key}")
        return result > 0
    except redis.RedisError as e:
        _record("errors")
        logger.warning(f"Cache delete error for {key}: {e}")
        return False


def cache_delete_pattern(prefix: str) -> int:
    """
    Delete every key starting with `prefix` (a trailing `*` is accepted and ignored)

    Returns:
        Number of keys deleted
    """
    if not redis_client:
        return 0

    prefix = prefix[:-1] if prefix.endswith("*") else prefix
    match = _GLOB_SPECIAL.sub(r"\\\1", prefix) + "*"
    try:
        keys = list(redis_client.scan_iter(match=match, count=500))
        if not keys:
            return 0
        count = redis_client.delete(*keys)
        _record("deletes", count)
        logger.info(f"Cache DELETE: {prefix}* ({count} keys)")
        return count
    except redis.RedisError as e:
        _record("errors")
        logger.warning(f"Cache delete pattern error for {prefix}: {e}")
        return 0


def invalidate_game_cache() -> int:
    """Drop every cached response derived from the games table"""
    total_deleted = 0
    for prefix in GAME_DATA_PREFIXES:
        total_deleted += cache_delete_pattern(prefix)

    if total_deleted > 0:
        logger.info(f"Invalidated {total_deleted} game cache entries")
    return total_deleted


def clear_all_cache() -> int:
    """
    Clear all cache entries in Redis (use with caution!)

    Returns:
        Number of keys deleted
    """
    if not redis_client:
        return 0

    try:
        count = 0
        for key in redis_client.scan_iter(count=500):
            count += redis_client.delete(key)

        _record("deletes", count)
        logger.info(f"Cleared all cache entries ({count} keys)")
        return count
    except redis.RedisError as e:
        _record("errors")
        logger.error(f"Error clearing all cache: {e}")
        return 0


def get_cache_info() -> Dict:
    """
    Get detailed cache information

    Returns:
        Dictionary with cache status, stats, and key count
    """
    if not redis_client:
        return {"status": "disabled", "error": "Redis not available"}

    try:
        key_count = sum(1 for _ in redis_client.scan_iter(count=500))
        return {
            "status": "enabled",
            "keys": key_count,
            "stats": get_cache_stats(),
            "redisUrl": _mask_url(_redis_url),
        }
    except redis.RedisError as e:
        return {"status": "error", "error": str(e)}
