"""
Entity Service

One service per collection composing the three moving parts of every
request:

    DocumentStore        -> authoritative read/write
    CacheAsideCoordinator -> cache lookup, population, invalidation
    SearchMirror         -> best-effort index propagation

Routers only translate HTTP to these calls.

Store and cache clients are synchronous. Writes run them in the
threadpool and only await the search mirror on the event loop.
"""

import logging
from typing import Any

from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel
from sqlalchemy.orm import Session

from catalog.exceptions import CatalogValidationError
from catalog.services.collections import REVIEWS, EntityCollection, get_collection
from catalog.services.coordinator import CacheAsideCoordinator
from catalog.services.search import SearchMirror
from catalog.services.store import DocumentStore

logger = logging.getLogger(__name__)


class EntityService:
    """
    CRUD for one collection.

    Args:
        collection: Collection descriptor
        db: Session for the current request
        coordinator: Process-wide cache-aside coordinator
        mirror: Process-wide search mirror
    """

    def __init__(
        self,
        collection: EntityCollection,
        db: Session,
        coordinator: CacheAsideCoordinator,
        mirror: SearchMirror,
    ) -> None:
        self.collection = collection
        self.db = db
        self.store = DocumentStore(db, collection)
        self.coordinator = coordinator
        self.mirror = mirror

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    def get(self, entity_id: int) -> BaseModel:
        return self.coordinator.read_one(
            self.collection,
            entity_id,
            lambda: self.store.get_by_id(entity_id),
        )

    def list_all(self) -> list[BaseModel]:
        return self.coordinator.read_all(self.collection, self.store.find)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------
    def _check_references(self, values: dict[str, Any]) -> None:
        """Every referenced entity must exist at write time."""
        for field, target_key in self.collection.references:
            if field not in values:
                continue
            target = get_collection(target_key)
            if not DocumentStore(self.db, target).exists(values[field]):
                raise CatalogValidationError(
                    f"{target_key.capitalize()} with id {values[field]} does not exist",
                    details={"field": field, "id": values[field]},
                )

    def _dependent_ids(self, entity_id: int) -> dict[str, list[int]]:
        """Ids of the entities whose cached form embeds this one."""
        dependent_ids = {}
        for dependent_key, field in self.collection.dependents:
            dependent = get_collection(dependent_key)
            column = getattr(dependent.model, field)
            dependent_ids[dependent_key] = DocumentStore(self.db, dependent).find_ids(
                column == entity_id
            )
        return dependent_ids

    def _update_values(self, data: BaseModel) -> dict[str, Any]:
        """
        Fields sent in a partial update.

        Null clears a nullable column and is ignored for a required one.
        """
        columns = self.collection.model.__table__.columns
        return {
            k: v
            for k, v in data.model_dump(exclude_unset=True).items()
            if v is not None or (k in columns and columns[k].nullable)
        }

    def _insert(self, values: dict[str, Any]) -> BaseModel:
        self._check_references(values)
        entity = self.coordinator.write(self.collection, lambda: self.store.insert(values))
        return self.collection.to_schema(entity)

    def _update(self, entity_id: int, values: dict[str, Any]) -> BaseModel:
        self._check_references(values)
        entity = self.coordinator.write(
            self.collection,
            lambda: self.store.update_by_id(entity_id, values),
            entity_id,
            lambda: self._dependent_ids(entity_id),
        )
        return self.collection.to_schema(entity)

    def _delete(self, entity_id: int) -> None:
        self.coordinator.delete(
            self.collection,
            entity_id,
            lambda: self.store.delete_by_id(entity_id),
            lambda: self._dependent_ids(entity_id),
        )

    async def create(self, data: BaseModel) -> BaseModel:
        item = await run_in_threadpool(self._insert, data.model_dump())
        await self.mirror.on_create(self.collection, item)
        return item

    async def update(self, entity_id: int, data: BaseModel) -> BaseModel:
        """
        Partial update. Absent fields are left unchanged; see _update_values
        for nulls.
        """
        item = await run_in_threadpool(self._update, entity_id, self._update_values(data))
        await self.mirror.on_update(self.collection, entity_id, item)
        return item

    async def delete(self, entity_id: int) -> None:
        await run_in_threadpool(self._delete, entity_id)
        await self.mirror.on_delete(self.collection, entity_id)


class ReviewService(EntityService):
    """Reviews add a server-side upvote counter."""

    def __init__(
        self,
        db: Session,
        coordinator: CacheAsideCoordinator,
        mirror: SearchMirror,
    ) -> None:
        super().__init__(REVIEWS, db, coordinator, mirror)

    def _upvote(self, review_id: int) -> BaseModel:
        entity = self.coordinator.write(
            self.collection,
            lambda: self.store.increment(review_id, "upvotes"),
            review_id,
        )
        return self.collection.to_schema(entity)

    async def upvote(self, review_id: int) -> BaseModel:
        item = await run_in_threadpool(self._upvote, review_id)
        await self.mirror.on_update(self.collection, review_id, item)
        return item
