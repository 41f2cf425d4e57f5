"""
Review Pydantic Schemas

Business Rules:
- Score must be 1-5 (validated at schema level and by the database)
- Upvotes cannot be set by clients; only POST /reviews/{id}/upvote
  changes them. Unknown fields such as "upvotes" in a request body are
  ignored.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReviewBase(BaseModel):
    """Base schema with shared review fields."""

    book_id: int = Field(..., description="Identifier of the reviewed book")
    review: str = Field(
        ...,
        min_length=1,
        max_length=5000,
        description="Review text",
        examples=["A quiet, wise book about names and power."],
    )
    score: int = Field(
        ...,
        ge=1,
        le=5,
        description="Score from 1 to 5",
        examples=[4, 5],
    )

    @field_validator("review")
    @classmethod
    def review_must_not_be_blank(cls, v: str) -> str:
        """Validate and normalize the review text."""
        if not v.strip():
            raise ValueError("Review cannot be empty or whitespace")
        return v.strip()


class ReviewCreate(ReviewBase):
    """Schema for creating a new review."""

    pass


class ReviewUpdate(BaseModel):
    """Schema for updating a review. Upvotes are deliberately absent."""

    book_id: int | None = None
    review: str | None = Field(default=None, min_length=1, max_length=5000)
    score: int | None = Field(default=None, ge=1, le=5)

    @field_validator("review")
    @classmethod
    def review_must_not_be_blank(cls, v: str | None) -> str | None:
        """Validate review text if provided."""
        if v is not None and not v.strip():
            raise ValueError("Review cannot be empty or whitespace")
        return v.strip() if v else v


class ReviewResponse(ReviewBase):
    """Schema for review responses."""

    id: int
    upvotes: int = Field(default=0, ge=0)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReviewListResponse(BaseModel):
    """Every review in the catalog."""

    items: list[ReviewResponse]
    total: int
