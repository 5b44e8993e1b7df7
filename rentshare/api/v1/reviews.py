"""Review endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from rentshare.api.deps import CurrentUser, get_current_user, get_review_service
from rentshare.models import Review
from rentshare.schemas.review import ReviewCreate, ReviewListResponse, ReviewResponse
from rentshare.services.review_service import ReviewService

router = APIRouter()


@router.post("/", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    review_data: ReviewCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    reviews: Annotated[ReviewService, Depends(get_review_service)],
) -> Review:
    """Review a finished rental."""
    return await reviews.create_review(
        review_data.booking_id,
        current_user.id,
        review_data.rating,
        review_data.comment,
    )


@router.get("/item/{item_id}", response_model=ReviewListResponse)
async def get_item_reviews(
    item_id: UUID,
    reviews: Annotated[ReviewService, Depends(get_review_service)],
) -> ReviewListResponse:
    """Reviews of an item."""
    items, average = await reviews.list_for_item(item_id)
    return ReviewListResponse(
        reviews=[ReviewResponse.model_validate(r) for r in items],
        total=len(items),
        average_rating=average,
    )
