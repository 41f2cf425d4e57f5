"""
Cache-Aside Coordinator

Wraps reads and writes on any collection with cache lookup, population
and invalidation.

Read path:
    1. Cache usable? Try "<key>:<id>" (or "all:<key>")
    2. HIT  -> deserialize and return, the store is never touched
    3. MISS -> load from the store, store the serialized result with TTL

Write path:
    1. Run the mutation against the store
    2. On success, delete "<key>:<id>" and "all:<key>", plus the cached
       entries of collections that embed the entity (an author's books)

Cached values are never updated in place; the next read repopulates them.
A store error propagates before any invalidation happens, and a NotFound
is never cached.

Every cache failure is caught here, reported to the health monitor and
treated as a miss (reads) or a no-op (writes).

Invalidations that cannot reach the cache are queued and replayed as soon
as the cache is usable again, before any read is served from it. While the
cache is marked down no call is made, so writes never wait on a dead Redis.
"""

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from catalog.exceptions import AccelerantDegradedError
from catalog.services.cache import CacheBackend, collection_cache_key, entity_cache_key
from catalog.services.collections import EntityCollection
from catalog.services.health import Backend, HealthMonitor

logger = logging.getLogger(__name__)

DependentsLoader = Callable[[], Mapping[str, Iterable[int]]]


class CacheAsideCoordinator:
    """
    Cache-aside reads and invalidating writes for every collection.

    Args:
        cache: Cache backend (Redis or the no-op cache)
        health: Health monitor consulted before every cache call
        ttl: Lifetime of a cached entry in seconds
    """

    def __init__(self, cache: CacheBackend, health: HealthMonitor, ttl: int = 3600) -> None:
        self.cache = cache
        self.health = health
        self.ttl = ttl
        self._pending: set[str] = set()
        self._pending_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    def read_one(
        self,
        collection: EntityCollection,
        entity_id: int,
        load: Callable[[], Any],
    ) -> BaseModel:
        key = entity_cache_key(collection.key, entity_id)

        payload = self._get(key)
        if payload is not None:
            try:
                return collection.deserialize(payload)
            except ValidationError as e:
                logger.warning(f"Discarding undecodable cache entry {key}: {e}")

        # NotFoundError propagates from here and nothing is cached
        item = collection.to_schema(load())
        self._set(key, item.model_dump_json())
        return item

    def read_all(
        self,
        collection: EntityCollection,
        load: Callable[[], list[Any]],
    ) -> list[BaseModel]:
        key = collection_cache_key(collection.key)

        payload = self._get(key)
        if payload is not None:
            try:
                return collection.deserialize_many(payload)
            except ValidationError as e:
                logger.warning(f"Discarding undecodable cache entry {key}: {e}")

        items = [collection.to_schema(entity) for entity in load()]
        self._set(key, collection.serialize_many(items))
        return items

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------
    def write(
        self,
        collection: EntityCollection,
        mutate: Callable[[], Any],
        entity_id: int | None = None,
        dependents: DependentsLoader | None = None,
    ) -> Any:
        """
        Run a create or update, then invalidate.

        For a create the id is unknown up front and is read from the
        entity the mutation returns. ``dependents`` is called after the
        mutation and names the cached entries of other collections that
        embed this entity.
        """
        entity = mutate()
        if entity_id is None:
            entity_id = entity.id
        self.invalidate(collection, entity_id, dependents() if dependents else None)
        return entity

    def delete(
        self,
        collection: EntityCollection,
        entity_id: int,
        remove: Callable[[], Any],
        dependents: DependentsLoader | None = None,
    ) -> None:
        remove()
        self.invalidate(collection, entity_id, dependents() if dependents else None)

    def invalidate(
        self,
        collection: EntityCollection,
        entity_id: int,
        dependent_ids: Mapping[str, Iterable[int]] | None = None,
    ) -> None:
        """
        Drop the cached entity and the cached collection list.

        For each dependent collection, its cached list and the cached
        entries with the given ids are dropped as well.
        """
        keys = [
            entity_cache_key(collection.key, entity_id),
            collection_cache_key(collection.key),
        ]
        for dependent_key, ids in (dependent_ids or {}).items():
            keys.extend(entity_cache_key(dependent_key, i) for i in ids)
            keys.append(collection_cache_key(dependent_key))
        self._delete(*keys)

    # -------------------------------------------------------------------------
    # Guarded cache calls
    # -------------------------------------------------------------------------
    def _usable(self) -> bool:
        """Cache available, with invalidations missed while it was down replayed."""
        if not self.health.cache_available():
            return False
        with self._pending_lock:
            pending, self._pending = self._pending, set()
        if not pending:
            return True
        try:
            self.cache.delete(*sorted(pending))
            logger.info(f"Replayed {len(pending)} deferred cache invalidations")
            return True
        except AccelerantDegradedError as e:
            with self._pending_lock:
                self._pending |= pending
            self.health.mark_unavailable(Backend.CACHE, e)
            return False

    def _get(self, key: str) -> str | None:
        if not self._usable():
            return None
        try:
            return self.cache.get(key)
        except AccelerantDegradedError as e:
            self.health.mark_unavailable(Backend.CACHE, e)
            return None

    def _set(self, key: str, value: str) -> None:
        if not self._usable():
            return
        try:
            self.cache.set(key, value, self.ttl)
        except AccelerantDegradedError as e:
            self.health.mark_unavailable(Backend.CACHE, e)

    def _delete(self, *keys: str) -> None:
        if not self.cache.stores_entries:
            return
        # While the cache is down the keys are kept and deleted on recovery,
        # before any read or population goes through again.
        if not self._usable():
            with self._pending_lock:
                self._pending.update(keys)
            return
        try:
            self.cache.delete(*keys)
        except AccelerantDegradedError as e:
            with self._pending_lock:
                self._pending.update(keys)
            self.health.mark_unavailable(Backend.CACHE, e)
