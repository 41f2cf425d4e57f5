"""
Authors Router

CRUD endpoints for authors.
Follows the same patterns as the books router.
"""

from fastapi import APIRouter, status

from catalog.dependencies import AuthorServiceDep
from catalog.schemas import AuthorCreate, AuthorListResponse, AuthorResponse, AuthorUpdate

router = APIRouter(
    prefix="/authors",
    tags=["Authors"],
    responses={
        404: {"description": "Author not found"},
    },
)


@router.get(
    "/",
    response_model=AuthorListResponse,
    summary="List all authors",
    description="Get every author in the catalog.",
)
def list_authors(authors: AuthorServiceDep) -> AuthorListResponse:
    """List all authors."""
    items = authors.list_all()
    return AuthorListResponse(items=items, total=len(items))


@router.get(
    "/{author_id}",
    response_model=AuthorResponse,
    summary="Get an author by ID",
    description="Retrieve detailed information about a specific author.",
)
def get_author(author_id: int, authors: AuthorServiceDep) -> AuthorResponse:
    """Get a single author by ID."""
    return authors.get(author_id)


@router.post(
    "/",
    response_model=AuthorResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new author",
    description="Create a new author in the catalog.",
)
async def create_author(author_data: AuthorCreate, authors: AuthorServiceDep) -> AuthorResponse:
    """Create a new author."""
    return await authors.create(author_data)


@router.patch(
    "/{author_id}",
    response_model=AuthorResponse,
    summary="Update an author",
    description="Update an existing author. Only the fields sent are changed; null clears profile_image.",
)
async def update_author(
    author_id: int,
    author_data: AuthorUpdate,
    authors: AuthorServiceDep,
) -> AuthorResponse:
    """Update an existing author."""
    return await authors.update(author_id, author_data)


@router.delete(
    "/{author_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an author",
    description="Delete an author. Their books are left in place.",
)
async def delete_author(author_id: int, authors: AuthorServiceDep) -> None:
    """Delete an author."""
    await authors.delete(author_id)
