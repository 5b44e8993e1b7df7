"""Payment endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from rentshare.api.deps import CurrentUser, get_current_user, get_payment_service
from rentshare.core.exceptions import AuthorizationError
from rentshare.models import Booking
from rentshare.schemas.booking import BookingResponse
from rentshare.schemas.payment import CheckoutRequest, CheckoutResponse, RefundRequest
from rentshare.services.payment_service import PaymentService

router = APIRouter()


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout(
    request: CheckoutRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    payments: Annotated[PaymentService, Depends(get_payment_service)],
) -> CheckoutResponse:
    """Start hosted checkout for an approved booking."""
    redirect = await payments.create_checkout(request.booking_id, current_user.id)
    return CheckoutResponse(booking_id=redirect.booking_id, session_id=redirect.session_id, url=redirect.url)


@router.post("/{booking_id}/refund", response_model=BookingResponse)
async def refund_booking(
    booking_id: UUID,
    request: RefundRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    payments: Annotated[PaymentService, Depends(get_payment_service)],
) -> Booking:
    """Refund a paid booking (owner or admin)."""
    booking = await payments.engine.get_booking(booking_id)
    if not current_user.is_admin and booking.owner_id != current_user.id:
        raise AuthorizationError("Only the owner or an admin can refund this booking")
    return await payments.refund(booking_id, request.amount)
