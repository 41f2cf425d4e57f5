"""
Redis Caching Service

Key-value cache used by the cache-aside coordinator.

Features:
- CacheBackend interface with a Redis implementation and a no-op one, so
  callers never check for a missing client
- Short socket timeouts: a slow Redis costs at most ``cache_timeout``
- Every Redis failure is converted to AccelerantDegradedError

Cache keys:
- "<collection>:<id>" for one entity, e.g. "book:42"
- "all:<collection>" for the full collection, e.g. "all:book"

The adapters only move strings around. Serialization belongs to the
entity collections and error handling to the coordinator.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import redis
from redis.exceptions import RedisError

from catalog.config import Settings
from catalog.exceptions import AccelerantDegradedError

logger = logging.getLogger(__name__)


# =============================================================================
# Cache Key Generation
# =============================================================================

def make_cache_key(prefix: str, *args, **kwargs) -> str:
    """
    Generate a consistent cache key from prefix and arguments.

    Examples:
        make_cache_key("book", 1) -> "book:1"
        make_cache_key("all", "book") -> "all:book"
        make_cache_key("search", q="dragon", page=1) -> "search:page=1:q=dragon"

    Args:
        prefix: Cache key prefix
        *args: Positional arguments to include in key
        **kwargs: Keyword arguments to include in key (sorted for consistency)

    Returns:
        Cache key string
    """
    parts = [prefix]

    for arg in args:
        if arg is not None:
            parts.append(str(arg))

    for key in sorted(kwargs.keys()):
        value = kwargs[key]
        if value is not None:
            parts.append(f"{key}={value}")

    return ":".join(parts)


def entity_cache_key(collection_key: str, entity_id: int) -> str:
    """Key for a single entity, e.g. ``book:42``."""
    return make_cache_key(collection_key, entity_id)


def collection_cache_key(collection_key: str) -> str:
    """Key for the full-collection list, e.g. ``all:book``."""
    return make_cache_key("all", collection_key)


# =============================================================================
# Cache Backends
# =============================================================================

class CacheBackend(ABC):
    """
    Contract for the key-value cache.

    Implementations raise AccelerantDegradedError on any failure and never
    let a client-library exception escape.
    """

    # False for a cache that never holds entries, so nothing can go stale
    stores_entries = True

    @abstractmethod
    def ping(self) -> bool:
        """Return True if the backend answers."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None on a miss."""

    @abstractmethod
    def set(self, key: str, value: str, ttl: int) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds."""

    @abstractmethod
    def delete(self, *keys: str) -> None:
        """Remove keys. Missing keys are not an error."""

    def stats(self) -> dict[str, Any]:
        return {}

    def close(self) -> None:
        pass


class RedisCache(CacheBackend):
    """
    Redis-backed cache.

    The client is created eagerly but redis-py only opens a socket on the
    first command, so construction never fails; ``ping()`` is the real
    connection attempt.
    """

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisCache":
        client = redis.from_url(
            settings.redis_url,
            decode_responses=True,  # Return strings instead of bytes
            socket_connect_timeout=settings.cache_timeout,
            socket_timeout=settings.cache_timeout,
        )
        return cls(client)

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except RedisError as e:
            raise AccelerantDegradedError("cache", f"Redis ping failed: {e}") from e

    def get(self, key: str) -> str | None:
        try:
            value = self._client.get(key)
        except RedisError as e:
            raise AccelerantDegradedError("cache", f"Cache get error for {key}: {e}") from e

        if value is not None:
            logger.debug(f"Cache HIT: {key}")
        else:
            logger.debug(f"Cache MISS: {key}")
        return value

    def set(self, key: str, value: str, ttl: int) -> None:
        try:
            self._client.setex(key, ttl, value)
        except RedisError as e:
            raise AccelerantDegradedError("cache", f"Cache set error for {key}: {e}") from e
        logger.debug(f"Cache SET: {key} (TTL: {ttl}s)")

    def delete(self, *keys: str) -> None:
        if not keys:
            return
        try:
            self._client.delete(*keys)
        except RedisError as e:
            raise AccelerantDegradedError("cache", f"Cache delete error for {keys}: {e}") from e
        logger.debug(f"Cache DELETE: {', '.join(keys)}")

    def stats(self) -> dict[str, Any]:
        """Hit/miss counters for monitoring; empty when Redis is down."""
        try:
            info = self._client.info("stats")
            return {
                "hits": info.get("keyspace_hits", 0),
                "misses": info.get("keyspace_misses", 0),
                "keys": self._client.dbsize(),
            }
        except RedisError:
            return {}

    def close(self) -> None:
        self._client.close()
        logger.info("Redis connection closed")


class NullCache(CacheBackend):
    """Cache used when Redis is disabled: never answers, never stores."""

    stores_entries = False

    def ping(self) -> bool:
        return False

    def get(self, key: str) -> str | None:
        return None

    def set(self, key: str, value: str, ttl: int) -> None:
        pass

    def delete(self, *keys: str) -> None:
        pass
