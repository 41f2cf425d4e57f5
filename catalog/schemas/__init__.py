"""
Pydantic Schemas Package

Schema Naming Convention:
- XxxBase: Shared fields between create/update
- XxxCreate: Fields required when creating a new record
- XxxUpdate: Fields allowed when updating (all optional)
- XxxResponse: Fields returned in API responses and stored in the cache
"""

from catalog.schemas.author import (
    AuthorBase,
    AuthorCreate,
    AuthorListResponse,
    AuthorResponse,
    AuthorSummary,
    AuthorUpdate,
)
from catalog.schemas.book import (
    BookBase,
    BookCreate,
    BookListResponse,
    BookResponse,
    BookSummary,
    BookUpdate,
)
from catalog.schemas.rankings import (
    TopRatedBook,
    TopRatedResponse,
    TopSellingBook,
    TopSellingResponse,
)
from catalog.schemas.review import (
    ReviewBase,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)
from catalog.schemas.sale import (
    SaleBase,
    SaleCreate,
    SaleListResponse,
    SaleResponse,
    SaleUpdate,
)
from catalog.schemas.search import SearchPage

__all__ = [
    # Author schemas
    "AuthorBase",
    "AuthorCreate",
    "AuthorUpdate",
    "AuthorResponse",
    "AuthorSummary",
    "AuthorListResponse",
    # Book schemas
    "BookBase",
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "BookSummary",
    "BookListResponse",
    # Review schemas
    "ReviewBase",
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
    "ReviewListResponse",
    # Sale schemas
    "SaleBase",
    "SaleCreate",
    "SaleUpdate",
    "SaleResponse",
    "SaleListResponse",
    # Rankings
    "TopRatedBook",
    "TopSellingBook",
    "TopRatedResponse",
    "TopSellingResponse",
    # Search
    "SearchPage",
]
