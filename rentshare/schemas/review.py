"""Review-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ReviewCreate(BaseModel):
    """Schema for creating a review."""

    booking_id: UUID
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=2000)


class ReviewResponse(BaseModel):
    """Schema for review response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    item_id: UUID
    reviewer_id: UUID
    reviewee_id: UUID
    review_type: str
    rating: int
    comment: str | None
    created_at: datetime


class ReviewListResponse(BaseModel):
    """Schema for item reviews."""

    reviews: list[ReviewResponse]
    total: int
    average_rating: float | None
