"""Shared fixtures: in-memory database, fake payment gateway, factories."""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["AUTH_JWT_SECRET"] = "test-secret"

import json
import uuid
from datetime import UTC, date, datetime
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import rentshare.models  # noqa: F401
from rentshare.database import Base
from rentshare.gateways.base import CheckoutResult, PaymentGateway, RefundResult
from rentshare.models import Booking, Item
from rentshare.repositories.booking_repository import BookingRepository
from rentshare.services.booking_engine import BookingEngine
from rentshare.services.notification_service import NotificationDispatcher, RecordingNotificationSink
from rentshare.services.payment_service import PaymentService

# Ten days before the 2024-06-01 rentals most tests use
NOW = datetime(2024, 5, 22, 12, 0, tzinfo=UTC)

VALID_SIGNATURE = "t=1,v1=valid"


class FakeGateway(PaymentGateway):
    """In-memory stand-in for the payment provider."""

    name = "fake"

    def __init__(self):
        self.checkouts: list[dict] = []
        self.refunds: list[tuple[str, Decimal | None]] = []
        self.refund_succeeds = True

    async def create_checkout_session(self, amount, currency, correlation_id, description, success_url, cancel_url):
        session_id = f"cs_test_{len(self.checkouts) + 1}"
        self.checkouts.append({
            "amount": amount,
            "currency": currency,
            "correlation_id": correlation_id,
            "success_url": success_url,
            "cancel_url": cancel_url,
        })
        return CheckoutResult(success=True, session_id=session_id, redirect_url=f"https://checkout.test/{session_id}")

    async def process_refund(self, payment_reference, amount=None):
        self.refunds.append((payment_reference, amount))
        if not self.refund_succeeds:
            return RefundResult(success=False, error_message="card_declined")
        return RefundResult(success=True, refund_id=f"re_{len(self.refunds)}")

    def verify_webhook(self, payload, signature):
        if signature != VALID_SIGNATURE:
            return None
        return json.loads(payload)


def checkout_completed(booking_id, payment_intent="pi_123", payment_status="paid", event_type="checkout.session.completed") -> bytes:
    """Body of a Stripe checkout webhook for ``booking_id``."""
    return json.dumps({
        "id": "evt_1",
        "type": event_type,
        "data": {
            "object": {
                "id": "cs_test_1",
                "payment_intent": payment_intent,
                "payment_status": payment_status,
                "metadata": {"booking_id": str(booking_id)} if booking_id is not None else {},
            }
        },
    }).encode()


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db(db_engine):
    session_maker = async_sessionmaker(db_engine, expire_on_commit=False)
    async with session_maker() as session:
        yield session


@pytest.fixture
def sink():
    return RecordingNotificationSink()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def engine(db, sink, gateway):
    return BookingEngine(BookingRepository(db), NotificationDispatcher(sink), gateway, clock=lambda: NOW)


@pytest.fixture
def payments(engine, gateway):
    return PaymentService(engine, gateway)


@pytest.fixture
def owner_id():
    return uuid.uuid4()


@pytest.fixture
def renter_id():
    return uuid.uuid4()


@pytest.fixture
def make_item(db, owner_id):
    async def _make_item(**overrides) -> Item:
        fields = {
            "owner_id": owner_id,
            "title": "Cordless drill",
            "city": "Lisbon",
            "category": "tools",
            "price_per_day": Decimal("10.00"),
            "cancellation_policy": "medium",
            "is_active": True,
            "status": "approved",
        }
        fields.update(overrides)
        item = Item(**fields)
        db.add(item)
        await db.commit()
        return item

    return _make_item


@pytest.fixture
def make_booking(db):
    """Insert a booking row directly, bypassing the engine."""

    async def _make_booking(item: Item, start: date, end: date, status: str = "pending", renter_id=None, **fields) -> Booking:
        booking = Booking(
            item_id=item.id,
            renter_id=renter_id or uuid.uuid4(),
            owner_id=item.owner_id,
            start_date=start,
            end_date=end,
            total_price=fields.pop("total_price", Decimal("30.00")),
            status=status,
            **fields,
        )
        db.add(booking)
        await db.commit()
        return booking

    return _make_booking
