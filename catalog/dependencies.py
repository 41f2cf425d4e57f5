"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.

The process-wide objects (health monitor, cache-aside coordinator, search
mirror) are built once in the application lifespan and kept on
``app.state``. The dependencies below read them from there and combine
them with the per-request database session.

Usage in a route:
    @router.get("/{book_id}")
    def get_book(book_id: int, books: BookServiceDep):
        return books.get(book_id)
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from catalog.database import get_db
from catalog.services.collections import AUTHORS, BOOKS, SALES
from catalog.services.coordinator import CacheAsideCoordinator
from catalog.services.entities import EntityService, ReviewService
from catalog.services.health import HealthMonitor
from catalog.services.search import SearchMirror

# =============================================================================
# Type Aliases with Annotated
# =============================================================================
DbSession = Annotated[Session, Depends(get_db)]


# =============================================================================
# Process-wide components
# =============================================================================
def get_health_monitor(request: Request) -> HealthMonitor:
    return request.app.state.health


def get_coordinator(request: Request) -> CacheAsideCoordinator:
    return request.app.state.coordinator


def get_search_mirror(request: Request) -> SearchMirror:
    return request.app.state.mirror


HealthMonitorDep = Annotated[HealthMonitor, Depends(get_health_monitor)]
CoordinatorDep = Annotated[CacheAsideCoordinator, Depends(get_coordinator)]
SearchMirrorDep = Annotated[SearchMirror, Depends(get_search_mirror)]


# =============================================================================
# Entity services
# =============================================================================
def get_author_service(
    db: DbSession,
    coordinator: CoordinatorDep,
    mirror: SearchMirrorDep,
) -> EntityService:
    return EntityService(AUTHORS, db, coordinator, mirror)


def get_book_service(
    db: DbSession,
    coordinator: CoordinatorDep,
    mirror: SearchMirrorDep,
) -> EntityService:
    return EntityService(BOOKS, db, coordinator, mirror)


def get_review_service(
    db: DbSession,
    coordinator: CoordinatorDep,
    mirror: SearchMirrorDep,
) -> ReviewService:
    return ReviewService(db, coordinator, mirror)


def get_sale_service(
    db: DbSession,
    coordinator: CoordinatorDep,
    mirror: SearchMirrorDep,
) -> EntityService:
    return EntityService(SALES, db, coordinator, mirror)


AuthorServiceDep = Annotated[EntityService, Depends(get_author_service)]
BookServiceDep = Annotated[EntityService, Depends(get_book_service)]
ReviewServiceDep = Annotated[ReviewService, Depends(get_review_service)]
SaleServiceDep = Annotated[EntityService, Depends(get_sale_service)]
