"""Payment-related Pydantic schemas."""

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class CheckoutRequest(BaseModel):
    """Schema for starting checkout."""

    booking_id: UUID


class CheckoutResponse(BaseModel):
    """Schema for checkout redirect."""

    booking_id: UUID
    session_id: str
    url: str


class RefundRequest(BaseModel):
    """Schema for an explicit refund. Omit amount for a full refund."""

    amount: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
