"""Stripe payment gateway adapter."""

import asyncio
import json
import logging
from collections.abc import Callable
from decimal import Decimal
from typing import Any

import stripe

from rentshare.config import Settings, settings
from rentshare.core.exceptions import UpstreamTimeoutError
from rentshare.gateways.base import (
    CheckoutResult,
    PaymentGateway,
    RefundResult,
)

logger = logging.getLogger(__name__)


def to_minor_units(amount: Decimal) -> int:
    """Stripe expects integer cents."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1")))


class StripeGateway(PaymentGateway):
    """Stripe payment gateway implementation."""

    name = "stripe"

    def __init__(self, config: Settings | None = None):
        config = config or settings
        self.secret_key = config.stripe_secret_key
        self.webhook_secret = config.stripe_webhook_secret
        self.timeout = config.payment_timeout_seconds

    async def _call(self, fn: Callable[..., Any], **kwargs: Any) -> Any:
        """Run a blocking SDK call off the event loop, bounded by the timeout."""
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(fn, api_key=self.secret_key, **kwargs),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Stripe call {getattr(fn, '__qualname__', fn)} timed out after {self.timeout}s")
            raise UpstreamTimeoutError("Stripe")

    async def create_checkout_session(
        self,
        amount: Decimal,
        currency: str,
        correlation_id: str,
        description: str,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutResult:
        """Create a Stripe Checkout Session carrying the booking id."""
        if not self.secret_key:
            return CheckoutResult(success=False, error_message="Stripe not configured")

        try:
            session = await self._call(
                stripe.checkout.Session.create,
                mode="payment",
                line_items=[
                    {
                        "price_data": {
                            "currency": currency.lower(),
                            "product_data": {"name": description},
                            "unit_amount": to_minor_units(amount),
                        },
                        "quantity": 1,
                    }
                ],
                success_url=success_url,
                cancel_url=cancel_url,
                metadata={"booking_id": correlation_id},
                payment_intent_data={"metadata": {"booking_id": correlation_id}},
            )
        except stripe.StripeError as e:
            return CheckoutResult(success=False, error_message=str(e))

        return CheckoutResult(success=True, session_id=session.id, redirect_url=session.url)

    async def process_refund(
        self,
        payment_reference: str,
        amount: Decimal | None = None,
    ) -> RefundResult:
        """Process Stripe refund."""
        if not self.secret_key:
            return RefundResult(success=False, error_message="Stripe not configured")

        params: dict[str, Any] = {"payment_intent": payment_reference}
        if amount is not None:
            params["amount"] = to_minor_units(amount)

        try:
            refund = await self._call(stripe.Refund.create, **params)
        except stripe.StripeError as e:
            return RefundResult(success=False, error_message=str(e))

        return RefundResult(
            success=refund.status in ("succeeded", "pending"),
            refund_id=refund.id,
            error_message=None if refund.status in ("succeeded", "pending") else f"Refund {refund.status}",
            raw_response={"status": refund.status, "id": refund.id},
        )

    def verify_webhook(
        self,
        payload: bytes,
        signature: str,
    ) -> dict | None:
        """Verify Stripe webhook signature."""
        if not self.webhook_secret:
            return None

        try:
            stripe.Webhook.construct_event(
                payload,
                signature,
                self.webhook_secret,
            )
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning(f"Stripe webhook verification failed: {e}")
            return None
        # Plain dict of the verified body, independent of SDK object types
        return json.loads(payload)
