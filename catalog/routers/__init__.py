"""
API Routers Package

This package contains FastAPI routers that handle API endpoints.

Router Structure:
- authors.py: /api/v1/authors/* endpoints
- books.py: /api/v1/books/* endpoints, including the rankings
- reviews.py: /api/v1/reviews/* endpoints, including upvotes
- sales.py: /api/v1/sales/* endpoints
- search.py: /api/v1/search endpoint

Each router is imported and registered in main.py.
"""

from catalog.routers.authors import router as authors_router
from catalog.routers.books import router as books_router
from catalog.routers.reviews import router as reviews_router
from catalog.routers.sales import router as sales_router
from catalog.routers.search import router as search_router

__all__ = [
    "authors_router",
    "books_router",
    "reviews_router",
    "sales_router",
    "search_router",
]
