"""
Services Package

This package contains business logic services that are:
- Separate from HTTP handling (routers)
- Reusable across different parts of the application
- Easier to test in isolation

Current services:
- aggregation.py: Top rated and top selling book rankings
- cache.py: Redis cache backend and cache key helpers
- collections.py: Descriptors for the four entity collections
- coordinator.py: Cache-aside reads and invalidating writes
- elasticsearch.py: Elasticsearch search index backend
- entities.py: Per-collection CRUD composed from store, cache and index
- health.py: Liveness tracking for Redis and Elasticsearch
- search.py: Index mirroring and search with database fallback
- store.py: Database access with catalog error translation
"""
