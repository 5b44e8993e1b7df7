"""Custom application exceptions.

Every exception carries a machine-readable ``code`` next to the human
``detail`` so clients can localize messages by kind.
"""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    code: str = "internal_error"

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
        code: str | None = None,
    ) -> None:
        if code is not None:
            self.code = code
        super().__init__(status_code=status_code, detail=detail, headers=headers)


# ==================== VALIDATION ====================


class ValidationError(AppException):
    """Validation error exception."""

    code = "validation_error"

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class InvalidRangeError(ValidationError):
    """End date falls before start date."""

    code = "invalid_range"

    def __init__(self, detail: str = "End date must not be before start date") -> None:
        super().__init__(detail)


class InvalidDurationError(ValidationError):
    """Requested rental duration is not a positive number of days."""

    code = "invalid_duration"

    def __init__(self, detail: str = "Rental duration must be at least one day") -> None:
        super().__init__(detail)


class InvalidAmountError(ValidationError):
    """Booking amount cannot be charged."""

    code = "invalid_amount"

    def __init__(self, detail: str = "Booking total must be greater than zero") -> None:
        super().__init__(detail)


# ==================== ACCESS ====================


class NotFoundError(AppException):
    """Resource not found exception."""

    code = "not_found"

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AuthenticationError(AppException):
    """Authentication failed exception."""

    code = "authentication_failed"

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(AppException):
    """Authorization denied exception."""

    code = "forbidden"

    def __init__(self, detail: str = "You don't have permission to access this resource") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


# ==================== CONFLICTS ====================


class ConflictError(AppException):
    """Operation conflicts with the current stored state."""

    code = "conflict"

    def __init__(self, detail: str = "The request conflicts with the current state") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ItemNotAvailable(ConflictError):
    """Item is inactive or awaiting moderation."""

    code = "item_unavailable"

    def __init__(self, detail: str = "This item is not available for rent") -> None:
        super().__init__(detail)


class DatesNotAvailable(ConflictError):
    """Dates not available exception."""

    code = "dates_unavailable"

    def __init__(self, detail: str = "The selected dates are not available") -> None:
        super().__init__(detail)


class InvalidBookingStatus(ConflictError):
    """Invalid booking status for operation."""

    code = "invalid_transition"

    def __init__(self, detail: str = "This operation is not allowed for the current booking status") -> None:
        super().__init__(detail)


class NotApprovedError(InvalidBookingStatus):
    """Checkout requested for a booking the owner has not approved."""

    code = "not_approved"

    def __init__(self, detail: str = "Booking must be approved before payment") -> None:
        super().__init__(detail)


class AlreadyPaidError(InvalidBookingStatus):
    """Booking has already been paid."""

    code = "already_paid"

    def __init__(self, detail: str = "Booking is already paid") -> None:
        super().__init__(detail)


class AlreadyReviewedError(ConflictError):
    """Reviewer already left a review for this booking."""

    code = "already_reviewed"

    def __init__(self, detail: str = "You have already reviewed this booking") -> None:
        super().__init__(detail)


# ==================== UPSTREAM ====================


class PaymentError(AppException):
    """Payment provider rejected or failed the operation."""

    code = "payment_error"

    def __init__(self, detail: str = "Payment processing failed") -> None:
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


class UpstreamTimeoutError(AppException):
    """Payment provider did not answer in time. Safe to retry."""

    code = "upstream_timeout"

    def __init__(self, service: str = "payment provider") -> None:
        super().__init__(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail=f"Timed out waiting for {service}, please retry",
        )


class ExternalServiceError(AppException):
    """External service is not configured or unavailable."""

    code = "not_configured"

    def __init__(self, service: str, detail: str | None = None) -> None:
        message = f"External service '{service}' is unavailable"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=message)
