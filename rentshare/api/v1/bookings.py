"""Booking endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from rentshare.api.deps import (
    CurrentUser,
    get_booking_engine,
    get_current_user,
    get_payment_service,
)
from rentshare.domain.date_range import day_count
from rentshare.domain.pricing import quote_price
from rentshare.models import Booking
from rentshare.schemas.booking import (
    ApprovalResponse,
    BookingCancelRequest,
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    CancellationResponse,
    PriceQuoteRequest,
    PriceQuoteResponse,
)
from rentshare.services.booking_engine import BookingEngine
from rentshare.services.payment_service import PaymentService

router = APIRouter()


@router.post("/quote", response_model=PriceQuoteResponse)
async def quote_booking(
    request: PriceQuoteRequest,
    engine: Annotated[BookingEngine, Depends(get_booking_engine)],
) -> PriceQuoteResponse:
    """Price a date range without creating a booking."""
    item = await engine.get_item(request.item_id)
    days = day_count(request.start_date, request.end_date)
    quote = quote_price(days, item.price_per_day, item.price_3_days, item.price_7_days)
    available = await engine.is_available(item.id, request.start_date, request.end_date)
    return PriceQuoteResponse(
        item_id=item.id,
        days=quote.days,
        total_price=quote.total_price,
        average_per_day=quote.average_per_day,
        available=available,
    )


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    engine: Annotated[BookingEngine, Depends(get_booking_engine)],
) -> Booking:
    """Request a booking."""
    return await engine.create_booking(
        booking_data.item_id,
        current_user.id,
        booking_data.start_date,
        booking_data.end_date,
    )


@router.get("/", response_model=BookingListResponse)
async def get_my_bookings(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    engine: Annotated[BookingEngine, Depends(get_booking_engine)],
    role: str = Query(default="renter", pattern="^(renter|owner)$"),
    status_filter: list[str] | None = Query(default=None, alias="status"),
) -> BookingListResponse:
    """Bookings the current user made (renter) or received (owner)."""
    if role == "renter":
        bookings = await engine.list_for_renter(current_user.id, status_filter)
    else:
        bookings = await engine.list_for_owner(current_user.id, status_filter)

    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=len(bookings),
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    engine: Annotated[BookingEngine, Depends(get_booking_engine)],
) -> Booking:
    """Get a booking by ID."""
    viewer_id = None if current_user.is_admin else current_user.id
    return await engine.get_booking(booking_id, viewer_id=viewer_id)


@router.post("/{booking_id}/approve", response_model=ApprovalResponse)
async def approve_booking(
    booking_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    engine: Annotated[BookingEngine, Depends(get_booking_engine)],
) -> ApprovalResponse:
    """Approve a pending booking (owner only)."""
    result = await engine.approve_booking(booking_id, current_user.id)
    return ApprovalResponse(
        booking=BookingResponse.model_validate(result.booking),
        pending_overlaps=result.pending_overlaps,
    )


@router.post("/{booking_id}/reject", response_model=BookingResponse)
async def reject_booking(
    booking_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    engine: Annotated[BookingEngine, Depends(get_booking_engine)],
) -> Booking:
    """Reject a pending booking (owner only)."""
    return await engine.reject_booking(booking_id, current_user.id)


@router.post("/{booking_id}/cancel", response_model=CancellationResponse)
async def cancel_booking(
    booking_id: UUID,
    request: BookingCancelRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    engine: Annotated[BookingEngine, Depends(get_booking_engine)],
    payments: Annotated[PaymentService, Depends(get_payment_service)],
) -> CancellationResponse:
    """Cancel a booking and report the refund the policy allows."""
    if request.refund:
        result = await payments.cancel_with_refund(booking_id, current_user.id)
    else:
        result = await engine.cancel_booking(booking_id, current_user.id, paid_override=request.paid_override)

    return CancellationResponse(
        booking=BookingResponse.model_validate(result.booking),
        refund_percent=result.refund.percent,
        refund_amount=result.refund.amount,
        days_until_start=result.refund.days_until_start,
        reopened_booking_ids=result.reopened_ids,
    )
