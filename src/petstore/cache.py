"""
Cache Layer

Cache-aside JSON store on Redis with glob-pattern invalidation.

Every operation is advisory: Redis failures and undecodable entries are
logged and reported as a miss (or False), never raised. The ledger stays the
source of truth, so a broken cache only costs latency.
"""

import json
import logging
from typing import Any

import redis

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300
SCAN_BATCH_SIZE = 100


# Cache key helpers


def pet_cache_key(store_id: Any, pet_id: Any) -> str:
    return f"pet:{store_id}:{pet_id}"


def pet_list_cache_key(store_id: Any, *parts: Any) -> str:
    suffix = ":".join("" if p is None else str(p) for p in parts)
    return f"pets:list:{store_id}:{suffix}"


def pet_list_pattern(store_id: Any) -> str:
    return f"pets:list:{store_id}:*"


def order_pets_cache_key(order_id: Any) -> str:
    return f"order:pets:{order_id}"


def store_cache_key(store_id: Any) -> str:
    return f"store:{store_id}"


def store_owner_cache_key(owner_id: str) -> str:
    return f"store:owner:{owner_id}"


class Cache:
    """
    Advisory JSON cache over a Redis client.

    Values must be JSON-serializable; callers convert read models with
    to_dict()/from_dict().
    """

    def __init__(self, client: redis.Redis, default_ttl: int = DEFAULT_TTL_SECONDS):
        self.client = client
        self.default_ttl = default_ttl

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on miss or failure."""
        try:
            raw = self.client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Cache get failed for {key}: {e}")
            return None

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Discarding undecodable cache entry {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store a value with the given TTL (seconds), or the default TTL."""
        try:
            data = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.warning(f"Cannot serialize value for cache key {key}: {e}")
            return False

        try:
            self.client.set(key, data, ex=ttl or self.default_ttl)
            return True
        except redis.RedisError as e:
            logger.warning(f"Cache set failed for {key}: {e}")
            return False

    def delete(self, *keys: str) -> bool:
        if not keys:
            return True
        try:
            self.client.delete(*keys)
            return True
        except redis.RedisError as e:
            logger.warning(f"Cache delete failed for {len(keys)} keys: {e}")
            return False

    def invalidate_pattern(self, pattern: str) -> bool:
        """
        Delete every key matching a glob pattern.

        Uses SCAN so large keyspaces are not blocked, deleting in batches.
        """
        try:
            batch: list[str] = []
            deleted = 0
            for key in self.client.scan_iter(match=pattern, count=SCAN_BATCH_SIZE):
                batch.append(key)
                if len(batch) >= SCAN_BATCH_SIZE:
                    deleted += self.client.delete(*batch)
                    batch = []
            if batch:
                deleted += self.client.delete(*batch)
        except redis.RedisError as e:
            logger.warning(f"Cache invalidation failed for pattern {pattern}: {e}")
            return False

        logger.debug(f"Invalidated {deleted} cache keys matching {pattern}")
        return True

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False

    def close(self) -> None:
        try:
            self.client.close()
        except redis.RedisError as e:
            logger.warning(f"Error closing cache connection: {e}")


def get_cache() -> Cache:
    """Build the application cache from settings."""
    from petstore.redis import get_redis_client
    from petstore.settings import get_settings

    return Cache(get_redis_client(), default_ttl=get_settings().CACHE_DEFAULT_TTL_SECONDS)
