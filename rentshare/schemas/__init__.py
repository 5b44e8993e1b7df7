"""Pydantic schemas for request/response validation."""

from rentshare.schemas.booking import (
    ApprovalResponse,
    BookingCancelRequest,
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    CancellationResponse,
    DateRange,
    PriceQuoteRequest,
    PriceQuoteResponse,
)
from rentshare.schemas.item import ItemCreate, ItemResponse, ItemUpdate
from rentshare.schemas.notification import NotificationListResponse, NotificationResponse
from rentshare.schemas.payment import CheckoutRequest, CheckoutResponse, RefundRequest
from rentshare.schemas.review import ReviewCreate, ReviewListResponse, ReviewResponse

__all__ = [
    # Booking
    "BookingCreate",
    "BookingResponse",
    "BookingListResponse",
    "BookingCancelRequest",
    "ApprovalResponse",
    "CancellationResponse",
    "DateRange",
    "PriceQuoteRequest",
    "PriceQuoteResponse",
    # Item
    "ItemCreate",
    "ItemUpdate",
    "ItemResponse",
    # Payment
    "CheckoutRequest",
    "CheckoutResponse",
    "RefundRequest",
    # Review
    "ReviewCreate",
    "ReviewResponse",
    "ReviewListResponse",
    # Notification
    "NotificationResponse",
    "NotificationListResponse",
]
