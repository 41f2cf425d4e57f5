"""
Sales Router

CRUD endpoints for the sales ledger. Sales are cached like every other
collection but are not mirrored into the search index.
"""

from fastapi import APIRouter, status

from catalog.dependencies import SaleServiceDep
from catalog.schemas import SaleCreate, SaleListResponse, SaleResponse, SaleUpdate

router = APIRouter(
    prefix="/sales",
    tags=["Sales"],
    responses={
        404: {"description": "Sale not found"},
    },
)


@router.get("/", response_model=SaleListResponse, summary="List all sales")
def list_sales(sales: SaleServiceDep) -> SaleListResponse:
    items = sales.list_all()
    return SaleListResponse(items=items, total=len(items))


@router.get("/{sale_id}", response_model=SaleResponse, summary="Get a sale by ID")
def get_sale(sale_id: int, sales: SaleServiceDep) -> SaleResponse:
    return sales.get(sale_id)


@router.post(
    "/",
    response_model=SaleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a sale",
    description="Add a ledger line. Several lines for the same book and year are allowed.",
)
async def create_sale(sale_data: SaleCreate, sales: SaleServiceDep) -> SaleResponse:
    return await sales.create(sale_data)


@router.patch("/{sale_id}", response_model=SaleResponse, summary="Update a sale")
async def update_sale(sale_id: int, sale_data: SaleUpdate, sales: SaleServiceDep) -> SaleResponse:
    return await sales.update(sale_id, sale_data)


@router.delete(
    "/{sale_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a sale",
)
async def delete_sale(sale_id: int, sales: SaleServiceDep) -> None:
    await sales.delete(sale_id)
