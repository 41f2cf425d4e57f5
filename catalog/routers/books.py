"""
Books Router

This module contains all book-related API endpoints.

Endpoints:
- GET    /books/              - List all books
- GET    /books/top-rated     - Books ranked by average review score
- GET    /books/top-selling   - Books ranked by their sales ledger
- GET    /books/{id}          - Get a single book
- POST   /books/              - Create a new book
- PATCH  /books/{id}          - Update a book (partial)
- DELETE /books/{id}          - Delete a book

The ranking routes are declared before /{book_id} so that "top-rated"
is never parsed as a book id.
"""

from fastapi import APIRouter, Query, status

from catalog.dependencies import BookServiceDep, DbSession
from catalog.schemas import (
    BookCreate,
    BookListResponse,
    BookResponse,
    BookUpdate,
    TopRatedResponse,
    TopSellingResponse,
)
from catalog.services.aggregation import top_rated_books, top_selling_books

router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={
        404: {"description": "Book not found"},
    },
)


# =============================================================================
# Rankings
# =============================================================================

@router.get(
    "/top-rated",
    response_model=TopRatedResponse,
    summary="Top rated books",
    description="""
    Books ranked by average review score, then by number of reviews.

    Each entry includes the book's highest and lowest rated review.
    Books without reviews are listed last.
    """,
)
def get_top_rated_books(
    db: DbSession,
    limit: int = Query(default=10, ge=1, le=100, description="Number of books to return"),
) -> TopRatedResponse:
    return TopRatedResponse(items=top_rated_books(db, limit=limit))


@router.get(
    "/top-selling",
    response_model=TopSellingResponse,
    summary="Top selling books",
    description="""
    Books ranked by the sum of their recorded sales.

    Each entry includes the author's total sales across all their books and
    whether the book was a top 5 seller in its year of publication.
    """,
)
def get_top_selling_books(
    db: DbSession,
    limit: int = Query(default=50, ge=1, le=500, description="Number of books to return"),
) -> TopSellingResponse:
    return TopSellingResponse(items=top_selling_books(db, limit=limit))


# =============================================================================
# CRUD
# =============================================================================

@router.get(
    "/",
    response_model=BookListResponse,
    summary="List all books",
    description="Get every book in the catalog, each with its author.",
)
def list_books(books: BookServiceDep) -> BookListResponse:
    """
    List all books.

    The full list is cached under a single key and dropped on any book
    write.
    """
    items = books.list_all()
    return BookListResponse(items=items, total=len(items))


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    summary="Get a book by ID",
    description="Retrieve detailed information about a specific book.",
)
def get_book(book_id: int, books: BookServiceDep) -> BookResponse:
    """
    Get a single book by ID.

    Raises:
        NotFoundError: If book doesn't exist (404)
    """
    return books.get(book_id)


@router.post(
    "/",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new book",
    description="""
    Create a new book in the catalog.

    - **name**: Book title (required)
    - **summary**: Book summary (required)
    - **publication_date**: Date of publication (required)
    - **author_id**: Identifier of an existing author (required)
    - **total_sales**: Display counter, defaults to 0
    - **cover_image**: Reference to the cover image (optional)
    """,
)
async def create_book(book_data: BookCreate, books: BookServiceDep) -> BookResponse:
    """
    Create a new book.

    Raises:
        CatalogValidationError: If the author does not exist (400)
    """
    return await books.create(book_data)


@router.patch(
    "/{book_id}",
    response_model=BookResponse,
    summary="Update a book",
    description="Update an existing book. Only the fields sent are changed; null clears cover_image.",
)
async def update_book(
    book_id: int,
    book_data: BookUpdate,
    books: BookServiceDep,
) -> BookResponse:
    """Update an existing book."""
    return await books.update(book_id, book_data)


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a book",
    description="Permanently delete a book. Its reviews and sales are kept.",
)
async def delete_book(book_id: int, books: BookServiceDep) -> None:
    """Delete a book."""
    await books.delete(book_id)
