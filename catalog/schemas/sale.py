"""
Sale Pydantic Schemas
"""

from pydantic import BaseModel, ConfigDict, Field


class SaleBase(BaseModel):
    """Base schema with shared sale fields."""

    book_id: int = Field(..., description="Identifier of the book sold")
    year: int = Field(
        ...,
        ge=1000,
        le=9999,
        description="Calendar year",
        examples=[2010],
    )
    sales: int = Field(
        ...,
        ge=0,
        description="Units sold in that year",
        examples=[1500],
    )


class SaleCreate(SaleBase):
    """Schema for recording a sale."""

    pass


class SaleUpdate(BaseModel):
    """Schema for updating a sale; only the fields sent are changed."""

    book_id: int | None = None
    year: int | None = Field(default=None, ge=1000, le=9999)
    sales: int | None = Field(default=None, ge=0)


class SaleResponse(SaleBase):
    """Schema for sale responses."""

    id: int

    model_config = ConfigDict(from_attributes=True)


class SaleListResponse(BaseModel):
    """Every sale in the ledger."""

    items: list[SaleResponse]
    total: int
