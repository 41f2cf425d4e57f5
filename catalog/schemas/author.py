"""
Author Pydantic Schemas

These schemas define the shape of data for Author-related API operations.

- AuthorBase: shared fields and validation
- AuthorCreate: request body for POST
- AuthorUpdate: request body for PATCH (all fields optional)
- AuthorResponse: what the API and the cache return
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AuthorBase(BaseModel):
    """Base schema with shared author fields."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Author's full name",
        examples=["Ursula K. Le Guin"],
    )
    date_of_birth: date = Field(
        ...,
        description="Date of birth",
        examples=["1929-10-21"],
    )
    country_of_origin: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Country of origin",
        examples=["United States"],
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=5000,
        description="Author biography",
    )
    profile_image: str | None = Field(
        default=None,
        max_length=500,
        description="Reference to the profile image",
    )

    @field_validator("name", "country_of_origin", "description")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        """Reject whitespace-only values and trim the rest."""
        if not v.strip():
            raise ValueError("Value cannot be empty or whitespace")
        return v.strip()


class AuthorCreate(AuthorBase):
    """Schema for creating a new author."""

    pass


class AuthorUpdate(BaseModel):
    """
    Schema for updating an existing author.

    All fields are optional; only the fields sent are changed.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    date_of_birth: date | None = None
    country_of_origin: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=5000)
    profile_image: str | None = Field(default=None, max_length=500)

    @field_validator("name", "country_of_origin", "description")
    @classmethod
    def must_not_be_blank(cls, v: str | None) -> str | None:
        """Validate text fields if provided."""
        if v is not None and not v.strip():
            raise ValueError("Value cannot be empty or whitespace")
        return v.strip() if v else v


class AuthorResponse(AuthorBase):
    """Schema for author responses, including database fields."""

    id: int = Field(..., description="Unique identifier")
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthorSummary(BaseModel):
    """Minimal author info for embedding in book responses."""

    id: int
    name: str
    country_of_origin: str

    model_config = ConfigDict(from_attributes=True)


class AuthorListResponse(BaseModel):
    """Every author in the catalog."""

    items: list[AuthorResponse]
    total: int
