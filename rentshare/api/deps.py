"""API dependencies for authentication and service wiring."""

from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from rentshare.core.exceptions import AuthorizationError
from rentshare.core.security import is_admin, user_id_from_claims, verify_token
from rentshare.database import get_db
from rentshare.gateways.base import PaymentGateway
from rentshare.gateways.stripe_gateway import StripeGateway
from rentshare.repositories.booking_repository import BookingRepository
from rentshare.services.booking_engine import BookingEngine
from rentshare.services.item_service import ItemService
from rentshare.services.notification_service import (
    DatabaseNotificationSink,
    NotificationDispatcher,
    NotificationSink,
)
from rentshare.services.payment_service import PaymentService
from rentshare.services.review_service import ReviewService

# Security scheme
security = HTTPBearer()


@dataclass(frozen=True)
class CurrentUser:
    """Caller identity taken from the auth provider's token."""

    id: UUID
    is_admin: bool = False


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> CurrentUser:
    """Get the current authenticated user from the bearer token."""
    payload = verify_token(credentials.credentials)
    return CurrentUser(id=user_id_from_claims(payload), is_admin=is_admin(payload))


async def get_current_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Get current user and verify they are an admin."""
    if not current_user.is_admin:
        raise AuthorizationError("Admin access required")
    return current_user


def get_payment_gateway() -> PaymentGateway:
    return StripeGateway()


async def get_notification_sink(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> NotificationSink:
    return DatabaseNotificationSink(db)


async def get_notifier(
    sink: Annotated[NotificationSink, Depends(get_notification_sink)],
) -> NotificationDispatcher:
    return NotificationDispatcher(sink)


async def get_booking_engine(
    db: Annotated[AsyncSession, Depends(get_db)],
    notifier: Annotated[NotificationDispatcher, Depends(get_notifier)],
    gateway: Annotated[PaymentGateway, Depends(get_payment_gateway)],
) -> BookingEngine:
    return BookingEngine(BookingRepository(db), notifier, gateway)


async def get_payment_service(
    engine: Annotated[BookingEngine, Depends(get_booking_engine)],
    gateway: Annotated[PaymentGateway, Depends(get_payment_gateway)],
) -> PaymentService:
    return PaymentService(engine, gateway)


async def get_item_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    notifier: Annotated[NotificationDispatcher, Depends(get_notifier)],
) -> ItemService:
    return ItemService(db, notifier)


async def get_review_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ReviewService:
    return ReviewService(db)
