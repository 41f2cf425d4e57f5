"""
Elasticsearch Service

Async search-index adapter used by the search mirror and the health
monitor.

Features:
- SearchIndex interface with an Elasticsearch implementation and a
  no-op one for when the index is disabled
- Shared English analyzer for every catalog index
- Bounded request timeout, no client-side retries: a slow cluster must
  degrade latency, not stall the request
- Every client failure is converted to AccelerantDegradedError
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from elasticsearch import AsyncElasticsearch, NotFoundError
from elasticsearch.helpers import async_bulk

from catalog.config import Settings
from catalog.exceptions import AccelerantDegradedError

logger = logging.getLogger(__name__)


# =============================================================================
# Index Management
# =============================================================================

INDEX_SETTINGS = {
    "number_of_shards": 1,
    "number_of_replicas": 0,  # Single node
    "analysis": {
        "analyzer": {
            "catalog_analyzer": {
                "type": "custom",
                "tokenizer": "standard",
                "filter": ["lowercase", "english_stemmer", "english_possessive_stemmer"]
            }
        },
        "filter": {
            "english_stemmer": {
                "type": "stemmer",
                "language": "english"
            },
            "english_possessive_stemmer": {
                "type": "stemmer",
                "language": "possessive_english"
            }
        }
    }
}


def build_index_body(text_fields: Iterable[str]) -> dict[str, Any]:
    """
    Build the settings and mapping for one catalog index.

    Only the free-text fields get an explicit mapping; the rest of the
    document is mapped dynamically.
    """
    properties: dict[str, Any] = {"id": {"type": "integer"}}
    for field in text_fields:
        properties[field] = {
            "type": "text",
            "analyzer": "catalog_analyzer",
            "fields": {"keyword": {"type": "keyword", "ignore_above": 256}},
        }
    return {"settings": INDEX_SETTINGS, "mappings": {"properties": properties}}


# =============================================================================
# Search Index Backends
# =============================================================================

class SearchIndex(ABC):
    """
    Contract for the full-text search index.

    Implementations raise AccelerantDegradedError on any failure.
    """

    @abstractmethod
    async def cluster_health(self) -> dict[str, Any]:
        """Return the cluster health document (must contain ``status``)."""

    @abstractmethod
    async def ensure_index(self, index: str, body: dict[str, Any]) -> None:
        """Create the index if it does not exist yet."""

    @abstractmethod
    async def delete_index(self, index: str) -> None:
        """Drop the index if it exists."""

    @abstractmethod
    async def index(self, index: str, doc_id: int, document: dict[str, Any]) -> None:
        """Create or replace a document."""

    @abstractmethod
    async def update(self, index: str, doc_id: int, document: dict[str, Any]) -> None:
        """Apply a partial document, creating it if missing."""

    @abstractmethod
    async def delete(self, index: str, doc_id: int) -> None:
        """Remove a document. Unknown ids are not an error."""

    @abstractmethod
    async def search(
        self,
        index: str,
        query: dict[str, Any],
        from_: int,
        size: int,
    ) -> tuple[list[dict[str, Any]], int]:
        """Run a query and return (source documents, total hits)."""

    @abstractmethod
    async def bulk_index(
        self,
        index: str,
        documents: Iterable[tuple[int, dict[str, Any]]],
    ) -> tuple[int, int]:
        """Index many documents; return (success_count, error_count)."""

    @abstractmethod
    async def count(self, index: str) -> int:
        """Number of documents in the index."""

    async def close(self) -> None:
        pass


class ElasticsearchIndex(SearchIndex):
    """Search index backed by an AsyncElasticsearch client."""

    def __init__(self, client: AsyncElasticsearch) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "ElasticsearchIndex":
        client = AsyncElasticsearch(
            hosts=[settings.elasticsearch_url],
            request_timeout=settings.elasticsearch_timeout,
            retry_on_timeout=False,
            max_retries=0,
        )
        return cls(client)

    async def cluster_health(self) -> dict[str, Any]:
        try:
            health = await self._client.cluster.health()
        except Exception as e:
            raise AccelerantDegradedError("search", f"Cluster health failed: {e}") from e
        return dict(health)

    async def ensure_index(self, index: str, body: dict[str, Any]) -> None:
        try:
            exists = await self._client.indices.exists(index=index)
            if not exists:
                await self._client.indices.create(
                    index=index,
                    settings=body["settings"],
                    mappings=body["mappings"],
                )
                logger.info(f"Created Elasticsearch index: {index}")
            else:
                logger.debug(f"Elasticsearch index already exists: {index}")
        except Exception as e:
            raise AccelerantDegradedError("search", f"Failed to create index {index}: {e}") from e

    async def delete_index(self, index: str) -> None:
        try:
            exists = await self._client.indices.exists(index=index)
            if exists:
                await self._client.indices.delete(index=index)
                logger.info(f"Deleted Elasticsearch index: {index}")
        except Exception as e:
            raise AccelerantDegradedError("search", f"Failed to delete index {index}: {e}") from e

    async def index(self, index: str, doc_id: int, document: dict[str, Any]) -> None:
        try:
            await self._client.index(
                index=index,
                id=str(doc_id),
                document=document,
                refresh=True,  # Make immediately searchable
            )
        except Exception as e:
            raise AccelerantDegradedError("search", f"Failed to index {index}/{doc_id}: {e}") from e
        logger.debug(f"Indexed {index}/{doc_id}")

    async def update(self, index: str, doc_id: int, document: dict[str, Any]) -> None:
        try:
            await self._client.update(
                index=index,
                id=str(doc_id),
                doc=document,
                doc_as_upsert=True,
                refresh=True,
            )
        except Exception as e:
            raise AccelerantDegradedError("search", f"Failed to update {index}/{doc_id}: {e}") from e
        logger.debug(f"Updated {index}/{doc_id}")

    async def delete(self, index: str, doc_id: int) -> None:
        try:
            await self._client.delete(index=index, id=str(doc_id), refresh=True)
        except NotFoundError:
            # Already not in index, that's fine
            return
        except Exception as e:
            raise AccelerantDegradedError("search", f"Failed to delete {index}/{doc_id}: {e}") from e
        logger.debug(f"Deleted {index}/{doc_id} from index")

    async def search(
        self,
        index: str,
        query: dict[str, Any],
        from_: int,
        size: int,
    ) -> tuple[list[dict[str, Any]], int]:
        try:
            response = await self._client.search(
                index=index,
                query=query,
                from_=from_,
                size=size,
                source=True,
            )
        except Exception as e:
            raise AccelerantDegradedError("search", f"Elasticsearch search failed: {e}") from e

        hits = [hit["_source"] for hit in response["hits"]["hits"]]
        total = response["hits"]["total"]["value"]
        return hits, total

    async def bulk_index(
        self,
        index: str,
        documents: Iterable[tuple[int, dict[str, Any]]],
    ) -> tuple[int, int]:
        def generate_actions():
            for doc_id, document in documents:
                yield {
                    "_index": index,
                    "_id": str(doc_id),
                    "_source": document,
                }

        try:
            success, errors = await async_bulk(
                self._client,
                generate_actions(),
                raise_on_error=False,
                refresh=True,
            )
        except Exception as e:
            raise AccelerantDegradedError("search", f"Bulk indexing failed: {e}") from e

        error_count = len(errors) if isinstance(errors, list) else 0
        return success, error_count

    async def count(self, index: str) -> int:
        try:
            response = await self._client.count(index=index)
        except Exception as e:
            raise AccelerantDegradedError("search", f"Count failed for {index}: {e}") from e
        return response["count"]

    async def close(self) -> None:
        await self._client.close()
        logger.info("Elasticsearch connection closed")


class NullSearchIndex(SearchIndex):
    """Index used when Elasticsearch is disabled: always unhealthy."""

    async def cluster_health(self) -> dict[str, Any]:
        raise AccelerantDegradedError("search", "Elasticsearch is disabled")

    async def ensure_index(self, index: str, body: dict[str, Any]) -> None:
        pass

    async def delete_index(self, index: str) -> None:
        pass

    async def index(self, index: str, doc_id: int, document: dict[str, Any]) -> None:
        pass

    async def update(self, index: str, doc_id: int, document: dict[str, Any]) -> None:
        pass

    async def delete(self, index: str, doc_id: int) -> None:
        pass

    async def search(
        self,
        index: str,
        query: dict[str, Any],
        from_: int,
        size: int,
    ) -> tuple[list[dict[str, Any]], int]:
        return [], 0

    async def bulk_index(
        self,
        index: str,
        documents: Iterable[tuple[int, dict[str, Any]]],
    ) -> tuple[int, int]:
        return 0, 0

    async def count(self, index: str) -> int:
        return 0
