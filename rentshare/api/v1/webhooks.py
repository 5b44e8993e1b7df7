"""Webhook endpoints for payment gateways."""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import PlainTextResponse

from rentshare.api.deps import get_payment_service
from rentshare.services.payment_service import PaymentService

router = APIRouter()


@router.post("/stripe", response_class=PlainTextResponse)
async def stripe_webhook(
    request: Request,
    payments: Annotated[PaymentService, Depends(get_payment_service)],
    stripe_signature: str | None = Header(None, alias="Stripe-Signature"),
) -> PlainTextResponse:
    """Handle Stripe webhook events."""
    # Raw body for signature verification
    payload = await request.body()
    outcome = await payments.handle_webhook(payload, stripe_signature)
    return PlainTextResponse(outcome.message, status_code=outcome.status_code)
