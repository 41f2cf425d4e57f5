"""
Document Store Adapter

Per-collection access to the authoritative database with a small,
document-style contract:

    insert(values) -> entity
    get_by_id(id) -> entity | NotFoundError
    find(filter, skip, limit) -> [entity]
    find_ids(filter) -> [id]
    count(filter) -> int
    update_by_id(id, values) -> entity | NotFoundError
    delete_by_id(id) -> None | NotFoundError

SQLAlchemy errors are translated into the catalog error taxonomy:
connection failures become StoreUnavailableError and constraint
violations become CatalogValidationError. Everything else propagates.
"""

import logging
from collections.abc import Generator, Iterable, Sequence
from contextlib import contextmanager
from typing import Any

from sqlalchemy import ColumnElement, false, func, or_, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm import Session

from catalog.exceptions import CatalogValidationError, NotFoundError, StoreUnavailableError
from catalog.services.collections import EntityCollection

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(db: Session) -> Generator[None, None, None]:
    """
    Translate SQLAlchemy failures into catalog errors.

    The session is rolled back before re-raising so it stays usable for
    the rest of the request.
    """
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        raise CatalogValidationError(f"Constraint violation: {e.orig}") from e
    except OperationalError as e:
        db.rollback()
        logger.error(f"Store unavailable: {e}")
        raise StoreUnavailableError("The database is unavailable") from e
    except DBAPIError as e:
        db.rollback()
        if e.connection_invalidated:
            logger.error(f"Store connection lost: {e}")
            raise StoreUnavailableError("The database connection was lost") from e
        raise


def escape_like(token: str) -> str:
    """Escape LIKE wildcards so a search token matches literally."""
    return token.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class DocumentStore:
    """
    Store access for one collection, bound to a request's session.

    Args:
        db: SQLAlchemy session for the current request
        collection: Collection descriptor (model, key)
    """

    def __init__(self, db: Session, collection: EntityCollection) -> None:
        self.db = db
        self.collection = collection
        self.model = collection.model

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------
    def match_any_token(
        self,
        tokens: Sequence[str],
        fields: Iterable[str] | None = None,
    ) -> ColumnElement[bool]:
        """
        Filter matching rows where any field contains any token.

        Matching is case-insensitive substring matching. With no tokens
        the filter matches nothing.
        """
        fields = tuple(fields if fields is not None else self.collection.search_fields)
        conditions = [
            getattr(self.model, field).ilike(f"%{escape_like(token)}%", escape="\\")
            for field in fields
            for token in tokens
        ]
        if not conditions:
            return false()
        return or_(*conditions)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    def get_by_id(self, entity_id: int) -> Any:
        with store_errors(self.db):
            entity = self.db.get(self.model, entity_id)
        if entity is None:
            raise NotFoundError(self.collection.key, entity_id)
        return entity

    def exists(self, entity_id: int) -> bool:
        with store_errors(self.db):
            stmt = select(func.count()).select_from(self.model).where(self.model.id == entity_id)
            return (self.db.execute(stmt).scalar() or 0) > 0

    def find(
        self,
        filter: ColumnElement[bool] | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[Any]:
        stmt = select(self.model)
        if filter is not None:
            stmt = stmt.where(filter)
        stmt = stmt.order_by(self.model.id).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)

        with store_errors(self.db):
            return list(self.db.execute(stmt).unique().scalars().all())

    def find_ids(self, filter: ColumnElement[bool]) -> list[int]:
        stmt = select(self.model.id).where(filter).order_by(self.model.id)
        with store_errors(self.db):
            return list(self.db.execute(stmt).scalars().all())

    def count(self, filter: ColumnElement[bool] | None = None) -> int:
        stmt = select(func.count()).select_from(self.model)
        if filter is not None:
            stmt = stmt.where(filter)
        with store_errors(self.db):
            return self.db.execute(stmt).scalar() or 0

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------
    def insert(self, values: dict[str, Any]) -> Any:
        entity = self.model(**values)
        with store_errors(self.db):
            self.db.add(entity)
            self.db.commit()
            self.db.refresh(entity)
        logger.info(f"Created {self.collection.key} {entity.id}")
        return entity

    def update_by_id(self, entity_id: int, values: dict[str, Any]) -> Any:
        entity = self.get_by_id(entity_id)
        for field, value in values.items():
            setattr(entity, field, value)
        with store_errors(self.db):
            self.db.commit()
            self.db.refresh(entity)
        logger.info(f"Updated {self.collection.key} {entity_id}")
        return entity

    def increment(self, entity_id: int, field: str, amount: int = 1) -> Any:
        """Atomically add ``amount`` to a counter column."""
        column = getattr(self.model, field)
        stmt = (
            update(self.model)
            .where(self.model.id == entity_id)
            .values({field: column + amount})
        )
        with store_errors(self.db):
            result = self.db.execute(stmt)
            if result.rowcount == 0:
                self.db.rollback()
                raise NotFoundError(self.collection.key, entity_id)
            self.db.commit()
        entity = self.get_by_id(entity_id)
        self.db.refresh(entity)
        return entity

    def delete_by_id(self, entity_id: int) -> None:
        entity = self.get_by_id(entity_id)
        with store_errors(self.db):
            self.db.delete(entity)
            self.db.commit()
        logger.info(f"Deleted {self.collection.key} {entity_id}")
