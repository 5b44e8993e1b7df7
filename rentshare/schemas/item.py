"""Item-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from rentshare.domain.cancellation_policy import get_policy_description

PolicyName = Literal["flexible", "medium", "strict"]


def _bundle_or_none(v: Decimal | None) -> Decimal | None:
    # Zero or negative bundle prices mean "no bundle"
    if v is not None and v <= 0:
        return None
    return v


class ItemBase(BaseModel):
    """Base item schema."""

    title: str = Field(..., min_length=3, max_length=200)
    description: str | None = Field(None, max_length=5000)
    category: str | None = Field(None, max_length=50)
    city: str | None = Field(None, max_length=100)
    neighborhood: str | None = Field(None, max_length=100)
    price_per_day: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    price_3_days: Decimal | None = Field(None, max_digits=10, decimal_places=2)
    price_7_days: Decimal | None = Field(None, max_digits=10, decimal_places=2)
    cancellation_policy: PolicyName = "flexible"

    @field_validator("price_3_days", "price_7_days")
    @classmethod
    def empty_bundle_is_unset(cls, v: Decimal | None) -> Decimal | None:
        return _bundle_or_none(v)


class ItemCreate(ItemBase):
    """Schema for submitting an item."""


class ItemUpdate(BaseModel):
    """Schema for owner edits."""

    title: str | None = Field(None, min_length=3, max_length=200)
    description: str | None = Field(None, max_length=5000)
    category: str | None = Field(None, max_length=50)
    city: str | None = Field(None, max_length=100)
    neighborhood: str | None = Field(None, max_length=100)
    price_per_day: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    price_3_days: Decimal | None = Field(None, max_digits=10, decimal_places=2)
    price_7_days: Decimal | None = Field(None, max_digits=10, decimal_places=2)
    cancellation_policy: PolicyName | None = None

    @field_validator("title", "price_per_day", "cancellation_policy")
    @classmethod
    def required_field_not_null(cls, v):
        # Omit the field to keep the current value
        if v is None:
            raise ValueError("cannot be null")
        return v

    @field_validator("price_3_days", "price_7_days")
    @classmethod
    def empty_bundle_is_unset(cls, v: Decimal | None) -> Decimal | None:
        return _bundle_or_none(v)


class ItemResponse(ItemBase):
    """Schema for item response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    is_active: bool
    status: str
    cancellation_policy: str
    created_at: datetime

    @computed_field
    @property
    def cancellation_policy_description(self) -> str:
        return get_policy_description(self.cancellation_policy)
