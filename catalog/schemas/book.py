"""
Book Pydantic Schemas

- BookBase: shared fields and validation
- BookCreate / BookUpdate: request bodies
- BookResponse: full book with its (possibly missing) author embedded
- BookSummary: compact form used inside ranking results
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catalog.schemas.author import AuthorSummary


class BookBase(BaseModel):
    """Base schema with shared book fields."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Book title",
        examples=["A Wizard of Earthsea"],
    )
    summary: str = Field(
        ...,
        min_length=1,
        max_length=5000,
        description="Book summary",
    )
    publication_date: date = Field(
        ...,
        description="Date of publication",
        examples=["1968-11-01"],
    )
    total_sales: int = Field(
        default=0,
        ge=0,
        description="Denormalised sales counter (display only)",
    )
    author_id: int = Field(
        ...,
        description="Identifier of the book's author",
    )
    cover_image: str | None = Field(
        default=None,
        max_length=500,
        description="Reference to the cover image",
    )

    @field_validator("name", "summary")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        """Validate and normalize text fields."""
        if not v.strip():
            raise ValueError("Value cannot be empty or whitespace")
        return v.strip()


class BookCreate(BookBase):
    """
    Schema for creating a new book.

    Example request body:
    {
        "name": "A Wizard of Earthsea",
        "summary": "A young mage...",
        "publication_date": "1968-11-01",
        "author_id": 1
    }
    """

    pass


class BookUpdate(BaseModel):
    """
    Schema for updating an existing book.

    All fields are optional for PATCH-style updates.
    """

    name: str | None = Field(default=None, min_length=1, max_length=500)
    summary: str | None = Field(default=None, min_length=1, max_length=5000)
    publication_date: date | None = None
    total_sales: int | None = Field(default=None, ge=0)
    author_id: int | None = None
    cover_image: str | None = Field(default=None, max_length=500)

    @field_validator("name", "summary")
    @classmethod
    def must_not_be_blank(cls, v: str | None) -> str | None:
        """Validate text fields if provided."""
        if v is not None and not v.strip():
            raise ValueError("Value cannot be empty or whitespace")
        return v.strip() if v else v


class BookResponse(BookBase):
    """
    Schema for book responses.

    ``author`` is None when the referenced author has since been deleted.
    """

    id: int = Field(..., description="Unique identifier")
    created_at: datetime
    updated_at: datetime
    author: AuthorSummary | None = None

    model_config = ConfigDict(from_attributes=True)


class BookSummary(BaseModel):
    """Compact book info for ranking results."""

    id: int
    name: str
    publication_date: date
    author_id: int
    author: AuthorSummary | None = None

    model_config = ConfigDict(from_attributes=True)


class BookListResponse(BaseModel):
    """Every book in the catalog."""

    items: list[BookResponse]
    total: int
