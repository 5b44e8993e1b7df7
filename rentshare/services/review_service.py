"""Review business logic."""

import logging
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rentshare.core.exceptions import AlreadyReviewedError, AuthorizationError, NotFoundError, ValidationError
from rentshare.domain.cancellation_policy import utc_today
from rentshare.models import Booking, Review

logger = logging.getLogger(__name__)


class ReviewService:
    """One review per (booking, reviewer) once a paid rental has ended."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_review(
        self,
        booking_id: UUID,
        reviewer_id: UUID,
        rating: int,
        comment: str | None = None,
        today=None,
    ) -> Review:
        booking = await self.db.get(Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking", str(booking_id))

        if reviewer_id == booking.renter_id:
            reviewee_id, review_type = booking.owner_id, "renter_to_owner"
        elif reviewer_id == booking.owner_id:
            reviewee_id, review_type = booking.renter_id, "owner_to_renter"
        else:
            raise AuthorizationError("Only the renter or the owner can review this booking")

        if booking.status != "paid":
            raise ValidationError("Only paid bookings can be reviewed")
        if booking.end_date >= (today or utc_today()):
            raise ValidationError("The rental has not ended yet")
        if not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5")

        existing = await self.db.execute(
            select(Review.id).where(Review.booking_id == booking_id, Review.reviewer_id == reviewer_id)
        )
        if existing.scalar_one_or_none():
            raise AlreadyReviewedError()

        review = Review(
            booking_id=booking.id,
            item_id=booking.item_id,
            reviewer_id=reviewer_id,
            reviewee_id=reviewee_id,
            review_type=review_type,
            rating=rating,
            comment=(comment or "").strip() or None,
        )
        self.db.add(review)
        await self.db.flush()
        logger.info(f"Review {review.id} left on booking {booking.id} ({review_type})")
        return review

    async def list_for_item(self, item_id: UUID) -> tuple[list[Review], float | None]:
        """Reviews of an item with the average rating to one decimal."""
        result = await self.db.execute(
            select(Review).where(Review.item_id == item_id).order_by(Review.created_at.desc())
        )
        reviews = list(result.scalars().all())

        avg_result = await self.db.execute(select(func.avg(Review.rating)).where(Review.item_id == item_id))
        average = avg_result.scalar()
        if average is None:
            return reviews, None
        return reviews, float(Decimal(str(average)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
