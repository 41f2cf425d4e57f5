"""
Reviews Router

CRUD endpoints for reviews, plus upvoting.

Upvotes are never accepted in a request body; the only way to change
them is POST /reviews/{id}/upvote, which increments the counter in the
database.
"""

from fastapi import APIRouter, status

from catalog.dependencies import ReviewServiceDep
from catalog.schemas import ReviewCreate, ReviewListResponse, ReviewResponse, ReviewUpdate

router = APIRouter(
    prefix="/reviews",
    tags=["Reviews"],
    responses={
        404: {"description": "Review not found"},
    },
)


@router.get(
    "/",
    response_model=ReviewListResponse,
    summary="List all reviews",
)
def list_reviews(reviews: ReviewServiceDep) -> ReviewListResponse:
    items = reviews.list_all()
    return ReviewListResponse(items=items, total=len(items))


@router.get(
    "/{review_id}",
    response_model=ReviewResponse,
    summary="Get a review by ID",
)
def get_review(review_id: int, reviews: ReviewServiceDep) -> ReviewResponse:
    return reviews.get(review_id)


@router.post(
    "/",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a review",
    description="""
    Review an existing book.

    - **book_id**: Identifier of the reviewed book
    - **review**: Review text
    - **score**: Score from 1 to 5
    """,
)
async def create_review(review_data: ReviewCreate, reviews: ReviewServiceDep) -> ReviewResponse:
    return await reviews.create(review_data)


@router.patch(
    "/{review_id}",
    response_model=ReviewResponse,
    summary="Update a review",
)
async def update_review(
    review_id: int,
    review_data: ReviewUpdate,
    reviews: ReviewServiceDep,
) -> ReviewResponse:
    return await reviews.update(review_id, review_data)


@router.post(
    "/{review_id}/upvote",
    response_model=ReviewResponse,
    summary="Upvote a review",
    description="Add one upvote to a review and return the updated review.",
)
async def upvote_review(review_id: int, reviews: ReviewServiceDep) -> ReviewResponse:
    return await reviews.upvote(review_id)


@router.delete(
    "/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a review",
)
async def delete_review(review_id: int, reviews: ReviewServiceDep) -> None:
    await reviews.delete(review_id)
