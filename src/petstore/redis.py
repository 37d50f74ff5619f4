"""
Redis client utilities for petstore.

Provides lazy-initialized Redis client to avoid import-time connections.
"""

import functools

import redis

from petstore.settings import get_settings


@functools.lru_cache()
def get_redis_url() -> str:
    """Get Redis URL from settings."""
    return get_settings().REDIS_URL


@functools.lru_cache()
def get_redis_client() -> redis.Redis:
    """
    Get Redis client (cached).

    This function lazily initializes the Redis client to avoid import-time connections.
    Short socket timeouts keep an unreachable cache from stalling requests.
    """
    url = get_redis_url()
    return redis.from_url(
        url,
        decode_responses=True,
        socket_connect_timeout=1,
        socket_timeout=1,
    )
