"""
Search Pydantic Schemas

The index path and the store-fallback path both produce a SearchPage, so
callers never need to know which backend answered.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class SearchPage(BaseModel):
    """One page of free-text search results."""

    collection: str
    items: list[dict[str, Any]] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    size: int = 10
    pages: int = 0
    source: Literal["index", "store"] = Field(
        default="store",
        description="Which backend served the request",
    )
