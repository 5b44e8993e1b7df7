"""Core utilities: errors, token verification, middleware."""

from rentshare.core.exceptions import (
    AlreadyPaidError,
    AppException,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DatesNotAvailable,
    InvalidBookingStatus,
    ItemNotAvailable,
    NotApprovedError,
    NotFoundError,
    PaymentError,
    ValidationError,
)
from rentshare.core.security import verify_token

__all__ = [
    "AppException",
    "AlreadyPaidError",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "DatesNotAvailable",
    "InvalidBookingStatus",
    "ItemNotAvailable",
    "NotApprovedError",
    "NotFoundError",
    "PaymentError",
    "ValidationError",
    "verify_token",
]
