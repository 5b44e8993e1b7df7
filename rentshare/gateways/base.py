"""Payment provider interface used by the booking engine.

Adapters only talk to the provider. Deciding what a payment means for a
booking is the engine's job.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal


@dataclass
class CheckoutResult:
    """Hosted checkout created by the provider."""

    success: bool
    session_id: str | None = None
    redirect_url: str | None = None
    error_message: str | None = None


@dataclass
class RefundResult:
    """Outcome of a refund request."""

    success: bool
    refund_id: str | None = None
    error_message: str | None = None
    raw_response: dict | None = None


class PaymentGateway(ABC):
    """Provider adapter. Amounts are decimal currency units."""

    name: str = "gateway"

    @abstractmethod
    async def create_checkout_session(
        self,
        amount: Decimal,
        currency: str,
        correlation_id: str,
        description: str,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutResult:
        """Start a hosted checkout.

        ``correlation_id`` is the booking id; the provider echoes it back in
        the webhook metadata so the payment can be matched to the booking.

        Raises:
            UpstreamTimeoutError: provider did not answer in time
        """

    @abstractmethod
    async def process_refund(
        self,
        payment_reference: str,
        amount: Decimal | None = None,
    ) -> RefundResult:
        """Refund a captured payment, in full when ``amount`` is None."""

    @abstractmethod
    def verify_webhook(self, payload: bytes, signature: str) -> dict | None:
        """Parsed event when ``signature`` matches the raw ``payload``, else None."""
