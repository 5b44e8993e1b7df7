"""Tests for reviews of finished rentals."""

import uuid
from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from rentshare.core.exceptions import AlreadyReviewedError, AuthorizationError, ValidationError
from rentshare.models import Review
from rentshare.services.review_service import ReviewService

TODAY = date(2024, 6, 10)


@pytest.fixture
def reviews(db):
    return ReviewService(db)


async def finished_booking(make_item, make_booking, status="paid", end=date(2024, 6, 3)):
    item = await make_item()
    return await make_booking(item, date(2024, 6, 1), end, status=status)


async def test_renter_reviews_owner(reviews, make_item, make_booking):
    booking = await finished_booking(make_item, make_booking)

    review = await reviews.create_review(booking.id, booking.renter_id, 4, "  Worked great ", today=TODAY)

    assert review.review_type == "renter_to_owner"
    assert review.reviewee_id == booking.owner_id
    assert review.comment == "Worked great"


async def test_owner_reviews_renter(reviews, make_item, make_booking):
    booking = await finished_booking(make_item, make_booking)

    review = await reviews.create_review(booking.id, booking.owner_id, 5, today=TODAY)

    assert review.review_type == "owner_to_renter"
    assert review.reviewee_id == booking.renter_id
    assert review.comment is None


async def test_one_review_per_reviewer(reviews, make_item, make_booking):
    booking = await finished_booking(make_item, make_booking)
    await reviews.create_review(booking.id, booking.renter_id, 4, today=TODAY)

    with pytest.raises(AlreadyReviewedError):
        await reviews.create_review(booking.id, booking.renter_id, 2, today=TODAY)


async def test_rental_must_have_ended(reviews, make_item, make_booking):
    booking = await finished_booking(make_item, make_booking, end=TODAY)

    with pytest.raises(ValidationError):
        await reviews.create_review(booking.id, booking.renter_id, 4, today=TODAY)


async def test_booking_must_be_paid(reviews, make_item, make_booking):
    booking = await finished_booking(make_item, make_booking, status="cancelled")

    with pytest.raises(ValidationError):
        await reviews.create_review(booking.id, booking.renter_id, 4, today=TODAY)


async def test_strangers_cannot_review(reviews, make_item, make_booking):
    booking = await finished_booking(make_item, make_booking)

    with pytest.raises(AuthorizationError):
        await reviews.create_review(booking.id, uuid.uuid4(), 4, today=TODAY)


@pytest.mark.parametrize("rating", [0, 6])
async def test_rating_range(reviews, make_item, make_booking, rating):
    booking = await finished_booking(make_item, make_booking)

    with pytest.raises(ValidationError):
        await reviews.create_review(booking.id, booking.renter_id, rating, today=TODAY)


async def test_item_average(reviews, make_item, make_booking):
    item = await make_item()
    first = await make_booking(item, date(2024, 6, 1), date(2024, 6, 2), status="paid")
    second = await make_booking(item, date(2024, 6, 4), date(2024, 6, 5), status="paid")
    await reviews.create_review(first.id, first.renter_id, 5, today=TODAY)
    await reviews.create_review(second.id, second.renter_id, 4, today=TODAY)
    await reviews.create_review(second.id, second.owner_id, 4, today=TODAY)

    items, average = await reviews.list_for_item(item.id)

    assert len(items) == 3
    assert average == 4.3


async def test_no_reviews_has_no_average(reviews, make_item):
    item = await make_item()
    assert await reviews.list_for_item(item.id) == ([], None)


async def test_rating_check_constraint(db, make_item, make_booking):
    booking = await finished_booking(make_item, make_booking)
    db.add(Review(
        booking_id=booking.id,
        item_id=booking.item_id,
        reviewer_id=booking.renter_id,
        reviewee_id=booking.owner_id,
        review_type="renter_to_owner",
        rating=6,
    ))

    with pytest.raises(IntegrityError):
        await db.flush()
