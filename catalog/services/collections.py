"""
Entity Collections

One descriptor per entity kind. The cache-aside coordinator, the search
mirror and the entity service are written once against EntityCollection
instead of once per resource.

A collection knows:
- its cache key namespace ("book" -> "book:42", "all:book")
- its SQLAlchemy model and Pydantic response schema (the serialized form
  stored in the cache and sent to the index)
- which fields are free text, and therefore searchable
- which fields reference another collection and must exist on write
- which other collections embed it, and so go stale when it changes
"""

from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

from pydantic import BaseModel, TypeAdapter

from catalog.database import Base
from catalog.models import Author, Book, Review, Sale
from catalog.schemas import AuthorResponse, BookResponse, ReviewResponse, SaleResponse


@dataclass(frozen=True)
class EntityCollection:
    """
    Descriptor for one entity kind.

    Attributes:
        key: Cache namespace, also used in error messages ("book")
        model: SQLAlchemy model class
        schema: Pydantic response schema used for (de)serialization
        index_name: Search index suffix, None if not mirrored
        search_fields: Free-text fields matched by search
        references: (field, target collection key) pairs checked on write
        dependents: (collection key, reference field) pairs whose cached
            entries embed this collection
    """

    key: str
    model: type[Base]
    schema: type[BaseModel]
    index_name: str | None = None
    search_fields: tuple[str, ...] = ()
    references: tuple[tuple[str, str], ...] = field(default=())
    dependents: tuple[tuple[str, str], ...] = field(default=())

    @property
    def searchable(self) -> bool:
        return self.index_name is not None and bool(self.search_fields)

    @cached_property
    def _list_adapter(self) -> TypeAdapter:
        return TypeAdapter(list[self.schema])

    def to_schema(self, entity: Any) -> BaseModel:
        """Convert an ORM entity (or an existing schema instance) to the response schema."""
        if isinstance(entity, self.schema):
            return entity
        return self.schema.model_validate(entity)

    def serialize(self, entity: Any) -> str:
        return self.to_schema(entity).model_dump_json()

    def deserialize(self, payload: str) -> BaseModel:
        return self.schema.model_validate_json(payload)

    def serialize_many(self, entities: list[Any]) -> str:
        items = [self.to_schema(entity) for entity in entities]
        return self._list_adapter.dump_json(items).decode()

    def deserialize_many(self, payload: str) -> list[BaseModel]:
        return self._list_adapter.validate_json(payload)

    def to_document(self, entity: Any) -> dict[str, Any]:
        """JSON-compatible document, as stored in the search index."""
        return self.to_schema(entity).model_dump(mode="json")


AUTHORS = EntityCollection(
    key="author",
    model=Author,
    schema=AuthorResponse,
    index_name="authors",
    search_fields=("name", "description"),
    dependents=(("book", "author_id"),),
)

BOOKS = EntityCollection(
    key="book",
    model=Book,
    schema=BookResponse,
    index_name="books",
    search_fields=("name", "summary"),
    references=(("author_id", "author"),),
)

REVIEWS = EntityCollection(
    key="review",
    model=Review,
    schema=ReviewResponse,
    index_name="reviews",
    search_fields=("review",),
    references=(("book_id", "book"),),
)

SALES = EntityCollection(
    key="sale",
    model=Sale,
    schema=SaleResponse,
    references=(("book_id", "book"),),
)

COLLECTIONS: dict[str, EntityCollection] = {
    collection.key: collection
    for collection in (AUTHORS, BOOKS, REVIEWS, SALES)
}

SEARCHABLE_COLLECTIONS: dict[str, EntityCollection] = {
    collection.index_name: collection
    for collection in COLLECTIONS.values()
    if collection.searchable
}


def get_collection(key: str) -> EntityCollection:
    """Look up a collection by cache key ("book") or index name ("books")."""
    if key in COLLECTIONS:
        return COLLECTIONS[key]
    if key in SEARCHABLE_COLLECTIONS:
        return SEARCHABLE_COLLECTIONS[key]
    raise KeyError(f"Unknown collection: {key}")
