"""
Catalog Exceptions

Error taxonomy shared by the store adapter, the services and the routers.

Only three kinds ever cross a component boundary:

- NotFoundError: the requested id is absent from the store (HTTP 404)
- CatalogValidationError: a field is missing, out of range, or references
  an entity that does not exist (HTTP 400)
- StoreUnavailableError: the authoritative database cannot be reached
  (HTTP 503)

AccelerantDegradedError is raised by the Redis and Elasticsearch adapters
and is always caught inside the component that owns the accelerant.
"""

from typing import Any


class CatalogError(Exception):
    """Base class for every error raised by the catalog services."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(CatalogError):
    """The requested entity does not exist in the store."""

    def __init__(self, collection: str, entity_id: int) -> None:
        super().__init__(
            f"{collection.capitalize()} with id {entity_id} not found",
            details={"collection": collection, "id": entity_id},
        )
        self.collection = collection
        self.entity_id = entity_id


class CatalogValidationError(CatalogError):
    """A write was rejected because its data is invalid."""


class StoreUnavailableError(CatalogError):
    """The authoritative store could not be reached."""


class AccelerantDegradedError(CatalogError):
    """A cache or search-index call failed or timed out."""

    def __init__(self, backend: str, message: str) -> None:
        super().__init__(message, details={"backend": backend})
        self.backend = backend
