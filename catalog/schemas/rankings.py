"""
Ranking Pydantic Schemas

Results of the aggregation engine. They are computed on every request and
never cached, so they carry no timestamps of their own.
"""

from pydantic import BaseModel, Field

from catalog.schemas.book import BookSummary
from catalog.schemas.review import ReviewResponse


class TopRatedBook(BaseModel):
    """A book ranked by its average review score."""

    book: BookSummary
    average_score: float | None = Field(
        default=None,
        description="Mean review score rounded to 2 decimals, null without reviews",
    )
    review_count: int = 0
    highest_rated_review: ReviewResponse | None = None
    lowest_rated_review: ReviewResponse | None = None


class TopSellingBook(BaseModel):
    """A book ranked by the sum of its sales ledger."""

    book: BookSummary
    total_sales: int = Field(
        ...,
        description="Sum of every Sale row for the book (all years)",
    )
    author_total_sales: int = Field(
        ...,
        description="Sum of the ledger across all books by the same author",
    )
    in_top_five_on_publication_year: bool = Field(
        ...,
        description="True if the book was a top-5 seller in its publication year",
    )


class TopRatedResponse(BaseModel):
    items: list[TopRatedBook]


class TopSellingResponse(BaseModel):
    items: list[TopSellingBook]
