"""
Search Mirror

Keeps the Elasticsearch indices in step with the store, on a best-effort
basis, and answers free-text queries with a store fallback.

Mirroring:
- on_create / on_update / on_delete are no-ops when the index is down
  or the collection is not searchable
- a failed index call is logged and never fails the write that caused it

Searching:
- index path: multi_match over the collection's text fields
- store path: any token matching any text field, case-insensitive
- both paths return the same SearchPage shape

Index names are "<prefix><collection>", e.g. "catalog_books".
"""

import logging
import math
from collections.abc import Iterable
from typing import Any

from fastapi.concurrency import run_in_threadpool

from catalog.exceptions import AccelerantDegradedError
from catalog.schemas.search import SearchPage
from catalog.services.collections import SEARCHABLE_COLLECTIONS, EntityCollection
from catalog.services.elasticsearch import SearchIndex, build_index_body
from catalog.services.health import Backend, HealthMonitor
from catalog.services.store import DocumentStore

logger = logging.getLogger(__name__)


def tokenize(query_text: str | None) -> list[str]:
    """Split a query on whitespace, dropping empty tokens."""
    if not query_text:
        return []
    return query_text.split()


def page_count(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if total > 0 else 0


class SearchMirror:
    """
    Best-effort index propagation and index-first search.

    Args:
        index: Search index backend
        health: Health monitor, probed before every index call
        prefix: Prefix prepended to every index name
    """

    def __init__(self, index: SearchIndex, health: HealthMonitor, prefix: str = "") -> None:
        self.index = index
        self.health = health
        self.prefix = prefix

    def index_name(self, collection: EntityCollection) -> str:
        return f"{self.prefix}{collection.index_name}"

    async def ensure_indices(self) -> None:
        """Create any missing index. Called once at startup."""
        for collection in SEARCHABLE_COLLECTIONS.values():
            try:
                await self.index.ensure_index(
                    self.index_name(collection),
                    build_index_body(collection.search_fields),
                )
            except AccelerantDegradedError as e:
                self.health.mark_unavailable(Backend.SEARCH, e)
                return

    # -------------------------------------------------------------------------
    # Mirroring
    # -------------------------------------------------------------------------
    async def _can_mirror(self, collection: EntityCollection) -> bool:
        if not collection.searchable:
            return False
        return await self.health.search_available()

    async def on_create(self, collection: EntityCollection, entity: Any) -> None:
        if not await self._can_mirror(collection):
            return
        try:
            await self.index.index(
                self.index_name(collection),
                entity.id,
                collection.to_document(entity),
            )
        except AccelerantDegradedError as e:
            logger.error(f"Failed to index {collection.key} {entity.id}: {e}")

    async def on_update(self, collection: EntityCollection, entity_id: int, entity: Any) -> None:
        if not await self._can_mirror(collection):
            return
        try:
            await self.index.update(
                self.index_name(collection),
                entity_id,
                collection.to_document(entity),
            )
        except AccelerantDegradedError as e:
            logger.error(f"Failed to update {collection.key} {entity_id} in index: {e}")

    async def on_delete(self, collection: EntityCollection, entity_id: int) -> None:
        if not await self._can_mirror(collection):
            return
        try:
            await self.index.delete(self.index_name(collection), entity_id)
        except AccelerantDegradedError as e:
            logger.error(f"Failed to delete {collection.key} {entity_id} from index: {e}")

    # -------------------------------------------------------------------------
    # Searching
    # -------------------------------------------------------------------------
    async def search(
        self,
        collection: EntityCollection,
        query_text: str | None,
        page: int,
        page_size: int,
        store: DocumentStore,
    ) -> SearchPage:
        """
        Search one collection, using the index when it is healthy.

        Args:
            collection: A searchable collection
            query_text: Free text; blank matches every document
            page: Page number (1-indexed)
            page_size: Results per page
            store: Store adapter for the same collection, used as fallback

        Returns:
            SearchPage with ``source`` set to the backend that answered
        """
        if await self.health.search_available():
            logger.debug(f"Using Elasticsearch to search {collection.index_name}")
            try:
                return await self._search_index(collection, query_text, page, page_size)
            except AccelerantDegradedError as e:
                logger.warning(f"Index search failed, falling back to the store: {e}")
                self.health.mark_unavailable(Backend.SEARCH, e)

        logger.debug(f"Falling back to the store to search {collection.index_name}")
        return await run_in_threadpool(
            self._search_store, collection, query_text, page, page_size, store
        )

    async def _search_index(
        self,
        collection: EntityCollection,
        query_text: str | None,
        page: int,
        page_size: int,
    ) -> SearchPage:
        if tokenize(query_text):
            query: dict[str, Any] = {
                "multi_match": {
                    "query": query_text,
                    "fields": list(collection.search_fields),
                    "operator": "or",
                }
            }
        else:
            query = {"match_all": {}}

        hits, total = await self.index.search(
            self.index_name(collection),
            query,
            from_=(page - 1) * page_size,
            size=page_size,
        )
        return SearchPage(
            collection=collection.index_name,
            items=hits,
            total=total,
            page=page,
            size=page_size,
            pages=page_count(total, page_size),
            source="index",
        )

    def _search_store(
        self,
        collection: EntityCollection,
        query_text: str | None,
        page: int,
        page_size: int,
        store: DocumentStore,
    ) -> SearchPage:
        tokens = tokenize(query_text)
        condition = store.match_any_token(tokens) if tokens else None

        total = store.count(condition)
        entities = store.find(condition, skip=(page - 1) * page_size, limit=page_size)

        return SearchPage(
            collection=collection.index_name,
            items=[collection.to_document(entity) for entity in entities],
            total=total,
            page=page,
            size=page_size,
            pages=page_count(total, page_size),
            source="store",
        )

    # -------------------------------------------------------------------------
    # Reindexing
    # -------------------------------------------------------------------------
    async def reindex(
        self,
        collection: EntityCollection,
        entities: Iterable[Any],
        drop: bool = False,
    ) -> tuple[int, int]:
        """
        Bulk-load a collection into its index.

        Raises AccelerantDegradedError if the index cannot be reached;
        reindexing is an operator action and should fail loudly.

        Returns:
            Tuple of (success_count, error_count)
        """
        name = self.index_name(collection)
        if drop:
            await self.index.delete_index(name)
        await self.index.ensure_index(name, build_index_body(collection.search_fields))

        documents = ((entity.id, collection.to_document(entity)) for entity in entities)
        success, errors = await self.index.bulk_index(name, documents)
        logger.info(f"Reindexed {name}: {success} indexed, {errors} errors")
        return success, errors
