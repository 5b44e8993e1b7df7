"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class BookingCreate(BaseModel):
    """Schema for requesting a booking."""

    item_id: UUID
    start_date: date
    end_date: date


class PriceQuoteRequest(BaseModel):
    """Schema for pricing a date range without booking it."""

    item_id: UUID
    start_date: date
    end_date: date


class PriceQuoteResponse(BaseModel):
    """Schema for price quote."""

    item_id: UUID
    days: int
    total_price: Decimal
    average_per_day: Decimal
    available: bool


class BookingCancelRequest(BaseModel):
    """Schema for cancelling a booking."""

    # Client saw the payment succeed before the webhook arrived
    paid_override: bool = False
    refund: bool = Field(default=False, description="Refund through the payment provider right away")


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    item_id: UUID
    renter_id: UUID
    owner_id: UUID

    # Dates
    start_date: date
    end_date: date
    days: int

    # Pricing
    total_price: Decimal

    # Status
    status: str
    payment_reference: str | None

    # Timestamps
    created_at: datetime
    updated_at: datetime
    paid_at: datetime | None
    cancelled_at: datetime | None
    refunded_at: datetime | None


class BookingListResponse(BaseModel):
    """Schema for booking list."""

    bookings: list[BookingResponse]
    total: int


class ApprovalResponse(BaseModel):
    """Schema for an owner approval."""

    booking: BookingResponse
    pending_overlaps: int


class CancellationResponse(BaseModel):
    """Schema for a cancellation.

    Refund fields are null when the booking was never paid.
    """

    booking: BookingResponse
    refund_percent: int | None
    refund_amount: Decimal | None
    days_until_start: int
    reopened_booking_ids: list[UUID]


class DateRange(BaseModel):
    """Dates already held on an item."""

    start_date: date
    end_date: date
