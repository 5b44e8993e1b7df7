"""Rentable item (listing) model."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from rentshare.database import Base, utcnow


class Item(Base):
    """Item offered for rent by its owner."""

    __tablename__ = "items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # User ids come from the external auth provider
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str | None] = mapped_column(String(50))
    city: Mapped[str | None] = mapped_column(String(100))
    neighborhood: Mapped[str | None] = mapped_column(String(100))

    # Pricing (currency units)
    price_per_day: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    price_3_days: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    price_7_days: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    cancellation_policy: Mapped[str] = mapped_column(
        String(20), default="flexible", nullable=False
    )  # flexible, medium, strict

    # Moderation
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default="pending", nullable=False, index=True
    )  # pending, approved, rejected

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )
