"""Payment reconciliation: checkout creation, webhook confirmation, refunds.

Webhook responses drive the provider's retry behaviour:

* 400 - signature could not be verified, nothing was touched;
* 200 - event applied, duplicated, or permanently unmatched (no retry wanted);
* 500 - event matched a booking but the write failed, so the provider retries.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from fastapi import status
from sqlalchemy.exc import SQLAlchemyError

from rentshare.config import Settings, settings
from rentshare.core.exceptions import (
    AlreadyPaidError,
    AuthorizationError,
    ConflictError,
    InvalidAmountError,
    NotApprovedError,
    NotFoundError,
    PaymentError,
)
from rentshare.domain.booking_state import BookingStatus
from rentshare.gateways.base import PaymentGateway
from rentshare.models import Booking
from rentshare.services.booking_engine import BookingEngine, CancellationResult

logger = logging.getLogger(__name__)

# Stripe events that mean the money has been captured
PAYMENT_COMPLETED_EVENTS = frozenset({
    "checkout.session.completed",
    "checkout.session.async_payment_succeeded",
})


@dataclass
class CheckoutRedirect:
    booking_id: UUID
    session_id: str
    url: str


@dataclass
class WebhookOutcome:
    status_code: int
    message: str
    booking_id: UUID | None = None


class PaymentService:
    """Coordinates the payment provider with the booking state machine."""

    def __init__(self, engine: BookingEngine, gateway: PaymentGateway, config: Settings | None = None):
        self.engine = engine
        self.gateway = gateway
        self.config = config or settings

    async def create_checkout(self, booking_id: UUID, renter_id: UUID) -> CheckoutRedirect:
        """Create a hosted checkout for an approved booking."""
        booking = await self.engine.get_booking(booking_id)
        if booking.renter_id != renter_id:
            raise AuthorizationError("You can only pay for your own bookings")
        if booking.was_paid:
            raise AlreadyPaidError()
        if booking.status != BookingStatus.APPROVED.value:
            raise NotApprovedError(f"Booking is {booking.status}, it must be approved before payment")
        if Decimal(booking.total_price) <= 0:
            raise InvalidAmountError()

        item = await self.engine.get_item(booking.item_id)
        base_url = self.config.public_base_url.rstrip("/")
        result = await self.gateway.create_checkout_session(
            amount=booking.total_price,
            currency=self.config.payment_currency,
            correlation_id=str(booking.id),
            description=item.title,
            success_url=f"{base_url}/my-bookings?paid=1&bookingId={booking.id}",
            cancel_url=f"{base_url}/my-bookings?canceled=1&bookingId={booking.id}",
        )
        if not result.success or not result.session_id or not result.redirect_url:
            logger.error(f"Checkout creation failed for booking {booking.id}: {result.error_message}")
            raise PaymentError(result.error_message or "Could not start checkout")

        await self.engine.attach_checkout_session(booking, result.session_id)
        logger.info(f"{self.gateway.name} checkout {result.session_id} created for booking {booking.id}")
        return CheckoutRedirect(booking_id=booking.id, session_id=result.session_id, url=result.redirect_url)

    async def handle_webhook(self, payload: bytes, signature: str | None) -> WebhookOutcome:
        """Verify and apply one provider event."""
        if not signature:
            return WebhookOutcome(status.HTTP_400_BAD_REQUEST, "Missing signature")

        event = self.gateway.verify_webhook(payload, signature)
        if event is None:
            return WebhookOutcome(status.HTTP_400_BAD_REQUEST, "Invalid signature")

        event_type = event.get("type")
        if event_type not in PAYMENT_COMPLETED_EVENTS:
            return WebhookOutcome(status.HTTP_200_OK, f"Ignored {event_type}")

        session = (event.get("data") or {}).get("object") or {}
        if session.get("payment_status") not in (None, "paid", "no_payment_required"):
            # Delayed payment methods finish with async_payment_succeeded
            return WebhookOutcome(status.HTTP_200_OK, "Payment not captured yet")

        raw_booking_id = (session.get("metadata") or {}).get("booking_id")
        if not raw_booking_id:
            logger.warning(f"Missing metadata.booking_id on session {session.get('id')}")
            return WebhookOutcome(status.HTTP_200_OK, "No booking reference")

        try:
            booking_id = UUID(str(raw_booking_id))
        except ValueError:
            logger.warning(f"Malformed booking id {raw_booking_id!r} on session {session.get('id')}")
            return WebhookOutcome(status.HTTP_200_OK, "Unknown booking")

        try:
            confirmation = await self.engine.confirm_payment(
                booking_id,
                payment_reference=session.get("payment_intent"),
                checkout_session_id=session.get("id"),
            )
            await self.engine.repository.commit()
        except NotFoundError:
            logger.warning(f"Booking not found for paid session {session.get('id')}: {booking_id}")
            return WebhookOutcome(status.HTTP_200_OK, "Unknown booking", booking_id)
        except ConflictError as e:
            # Cancelled/rejected before the money landed: needs a manual refund
            await self.engine.repository.rollback()
            logger.error(f"Payment for booking {booking_id} could not be applied: {e.detail}")
            return WebhookOutcome(status.HTTP_200_OK, "Booking no longer payable", booking_id)
        except SQLAlchemyError:
            await self.engine.repository.rollback()
            logger.exception(f"Persisting payment for booking {booking_id} failed")
            return WebhookOutcome(status.HTTP_500_INTERNAL_SERVER_ERROR, "DB update failed", booking_id)

        if not confirmation.applied:
            return WebhookOutcome(status.HTTP_200_OK, "Already paid", booking_id)
        return WebhookOutcome(status.HTTP_200_OK, "Booking paid", booking_id)

    async def refund(self, booking_id: UUID, amount: Decimal | None = None) -> Booking:
        return await self.engine.refund_booking(booking_id, amount)

    async def cancel_with_refund(self, booking_id: UUID, actor_id: UUID) -> CancellationResult:
        """Cancel and immediately refund what the policy allows."""
        result = await self.engine.cancel_booking(booking_id, actor_id)
        if result.refund.applies and result.refund.percent and result.booking.payment_reference:
            amount = None if result.refund.percent == 100 else result.refund.amount
            await self.engine.refund_booking(booking_id, amount)
        return result
