"""
Search Router

Free-text search over books, authors and reviews.

Uses Elasticsearch when the cluster is healthy and falls back to
case-insensitive matching in the database otherwise. The response shape
is the same either way; ``source`` tells which backend answered.
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Query

from catalog.dependencies import DbSession, SearchMirrorDep
from catalog.schemas import SearchPage
from catalog.services.collections import get_collection
from catalog.services.store import DocumentStore

# =============================================================================
# Router Configuration
# =============================================================================

router = APIRouter(
    prefix="/search",
    tags=["Search"],
)

SearchableCollection = Literal["books", "authors", "reviews"]


@router.get(
    "/",
    response_model=SearchPage,
    summary="Search the catalog",
    description="""
    Full-text search over one collection.

    - books: name and summary
    - authors: name and description
    - reviews: review text

    A document matches if any of its text fields contains any word of the
    query. An empty query returns every document, paged.
    """,
)
async def search(
    db: DbSession,
    mirror: SearchMirrorDep,
    q: Annotated[str | None, Query(max_length=500, description="Search text")] = None,
    collection: Annotated[SearchableCollection, Query(description="Collection to search")] = "books",
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    size: Annotated[int, Query(ge=1, le=100, description="Results per page")] = 10,
) -> SearchPage:
    target = get_collection(collection)
    return await mirror.search(
        target,
        q,
        page=page,
        page_size=size,
        store=DocumentStore(db, target),
    )
