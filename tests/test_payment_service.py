"""Tests for checkout creation, webhook reconciliation and refunds."""

import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from rentshare.core.exceptions import (
    AlreadyPaidError,
    AuthorizationError,
    InvalidAmountError,
    NotApprovedError,
)
from rentshare.models import Booking
from tests.conftest import VALID_SIGNATURE, checkout_completed

JUNE_1 = date(2024, 6, 1)
JUNE_2 = date(2024, 6, 2)
JUNE_3 = date(2024, 6, 3)
JUNE_4 = date(2024, 6, 4)


async def approved_booking(engine, item, renter_id, start=JUNE_1, end=JUNE_3):
    booking = await engine.create_booking(item.id, renter_id, start, end)
    await engine.approve_booking(booking.id, item.owner_id)
    await engine.repository.commit()
    return booking


async def reload(db, booking_id) -> Booking:
    return await db.get(Booking, booking_id, populate_existing=True)


class TestCreateCheckout:

    async def test_creates_session_for_approved_booking(self, payments, engine, make_item, renter_id, gateway):
        item = await make_item()
        booking = await approved_booking(engine, item, renter_id)

        redirect = await payments.create_checkout(booking.id, renter_id)

        assert redirect.session_id == "cs_test_1"
        assert redirect.url == "https://checkout.test/cs_test_1"
        assert booking.checkout_session_id == "cs_test_1"
        checkout = gateway.checkouts[0]
        assert checkout["amount"] == Decimal("30.00")
        assert checkout["correlation_id"] == str(booking.id)
        assert checkout["success_url"].endswith(f"/my-bookings?paid=1&bookingId={booking.id}")
        assert "canceled=1" in checkout["cancel_url"]

    async def test_requires_approval(self, payments, engine, make_item, renter_id, gateway):
        item = await make_item()
        booking = await engine.create_booking(item.id, renter_id, JUNE_1, JUNE_3)

        with pytest.raises(NotApprovedError):
            await payments.create_checkout(booking.id, renter_id)
        assert gateway.checkouts == []

    async def test_rejects_paid_booking(self, payments, engine, make_item, renter_id):
        item = await make_item()
        booking = await approved_booking(engine, item, renter_id)
        await engine.confirm_payment(booking.id, payment_reference="pi_123")

        with pytest.raises(AlreadyPaidError):
            await payments.create_checkout(booking.id, renter_id)

    async def test_only_renter_can_pay(self, payments, engine, make_item, renter_id):
        item = await make_item()
        booking = await approved_booking(engine, item, renter_id)

        with pytest.raises(AuthorizationError):
            await payments.create_checkout(booking.id, uuid.uuid4())

    async def test_zero_total_cannot_be_charged(self, payments, make_item, make_booking):
        item = await make_item()
        booking = await make_booking(item, JUNE_1, JUNE_3, status="approved", total_price=Decimal("0.00"))

        with pytest.raises(InvalidAmountError):
            await payments.create_checkout(booking.id, booking.renter_id)


class TestHandleWebhook:

    async def test_missing_signature(self, payments, make_item, make_booking):
        item = await make_item()
        booking = await make_booking(item, JUNE_1, JUNE_3, status="approved")

        outcome = await payments.handle_webhook(checkout_completed(booking.id), None)

        assert outcome.status_code == 400

    async def test_invalid_signature_touches_nothing(self, payments, db, make_item, make_booking):
        item = await make_item()
        booking = await make_booking(item, JUNE_1, JUNE_3, status="approved")

        outcome = await payments.handle_webhook(checkout_completed(booking.id), "t=1,v1=forged")

        assert outcome.status_code == 400
        assert (await reload(db, booking.id)).status == "approved"

    async def test_marks_booking_paid(self, payments, db, engine, make_item, make_booking, renter_id):
        item = await make_item()
        competitor = await make_booking(item, JUNE_2, JUNE_4, status="pending")
        booking = await approved_booking(engine, item, renter_id)

        outcome = await payments.handle_webhook(checkout_completed(booking.id, "pi_abc"), VALID_SIGNATURE)

        assert outcome.status_code == 200
        assert outcome.booking_id == booking.id
        paid = await reload(db, booking.id)
        assert paid.status == "paid"
        assert paid.payment_reference == "pi_abc"
        assert paid.checkout_session_id == "cs_test_1"
        assert (await reload(db, competitor.id)).status == "rejected"

    async def test_duplicate_delivery(self, payments, db, engine, make_item, renter_id):
        item = await make_item()
        booking = await approved_booking(engine, item, renter_id)
        body = checkout_completed(booking.id, "pi_abc")

        first = await payments.handle_webhook(body, VALID_SIGNATURE)
        paid_at = (await reload(db, booking.id)).paid_at
        second = await payments.handle_webhook(body, VALID_SIGNATURE)

        assert first.status_code == second.status_code == 200
        assert second.message == "Already paid"
        assert (await reload(db, booking.id)).paid_at == paid_at

    async def test_async_payment_succeeded_event(self, payments, db, engine, make_item, renter_id):
        item = await make_item()
        booking = await approved_booking(engine, item, renter_id)
        body = checkout_completed(booking.id, event_type="checkout.session.async_payment_succeeded")

        outcome = await payments.handle_webhook(body, VALID_SIGNATURE)

        assert outcome.status_code == 200
        assert (await reload(db, booking.id)).status == "paid"

    async def test_ignores_other_events(self, payments, db, make_item, make_booking):
        item = await make_item()
        booking = await make_booking(item, JUNE_1, JUNE_3, status="approved")
        body = checkout_completed(booking.id, event_type="payment_intent.created")

        outcome = await payments.handle_webhook(body, VALID_SIGNATURE)

        assert outcome.status_code == 200
        assert (await reload(db, booking.id)).status == "approved"

    async def test_unpaid_session_is_not_applied(self, payments, db, make_item, make_booking):
        item = await make_item()
        booking = await make_booking(item, JUNE_1, JUNE_3, status="approved")
        body = checkout_completed(booking.id, payment_status="unpaid")

        outcome = await payments.handle_webhook(body, VALID_SIGNATURE)

        assert outcome.status_code == 200
        assert (await reload(db, booking.id)).status == "approved"

    async def test_missing_booking_reference(self, payments):
        outcome = await payments.handle_webhook(checkout_completed(None), VALID_SIGNATURE)
        assert outcome.status_code == 200

    async def test_malformed_booking_reference(self, payments):
        outcome = await payments.handle_webhook(checkout_completed("not-a-uuid"), VALID_SIGNATURE)
        assert outcome.status_code == 200

    async def test_unknown_booking(self, payments):
        outcome = await payments.handle_webhook(checkout_completed(uuid.uuid4()), VALID_SIGNATURE)
        assert outcome.status_code == 200
        assert outcome.message == "Unknown booking"

    async def test_cancelled_booking_is_not_paid(self, payments, db, engine, make_item, renter_id):
        item = await make_item()
        booking = await approved_booking(engine, item, renter_id)
        await engine.cancel_booking(booking.id, renter_id)
        await engine.repository.commit()
        booking_id = booking.id

        outcome = await payments.handle_webhook(checkout_completed(booking_id), VALID_SIGNATURE)

        assert outcome.status_code == 200
        assert (await reload(db, booking_id)).status == "cancelled"

    async def test_write_failure_asks_for_retry(self, payments, db, engine, make_item, renter_id, monkeypatch):
        item = await make_item()
        booking = await approved_booking(engine, item, renter_id)
        booking_id = booking.id

        async def failing_update(*args, **kwargs):
            raise SQLAlchemyError("connection lost")

        monkeypatch.setattr(engine.repository, "update", failing_update)
        outcome = await payments.handle_webhook(checkout_completed(booking_id), VALID_SIGNATURE)

        assert outcome.status_code == 500
        assert (await reload(db, booking_id)).status == "approved"

    async def test_retry_after_failure_succeeds(self, payments, db, engine, make_item, renter_id, monkeypatch):
        item = await make_item()
        booking = await approved_booking(engine, item, renter_id)
        booking_id = booking.id
        body = checkout_completed(booking_id)

        async def failing_update(*args, **kwargs):
            raise SQLAlchemyError("connection lost")

        monkeypatch.setattr(engine.repository, "update", failing_update)
        assert (await payments.handle_webhook(body, VALID_SIGNATURE)).status_code == 500
        monkeypatch.undo()

        assert (await payments.handle_webhook(body, VALID_SIGNATURE)).status_code == 200
        assert (await reload(db, booking_id)).status == "paid"


class TestCancelWithRefund:

    async def test_full_refund_through_provider(self, payments, engine, make_item, renter_id, gateway):
        item = await make_item(cancellation_policy="medium")
        booking = await approved_booking(engine, item, renter_id)
        await engine.confirm_payment(booking.id, payment_reference="pi_123")

        result = await payments.cancel_with_refund(booking.id, renter_id)

        assert result.refund.percent == 100
        assert gateway.refunds == [("pi_123", None)]
        assert result.booking.status == "refunded"

    async def test_partial_refund_amount(self, payments, engine, make_item, renter_id, gateway):
        # 4 days before start under medium: 50%
        item = await make_item(cancellation_policy="medium")
        booking = await approved_booking(engine, item, renter_id, start=date(2024, 5, 26), end=date(2024, 5, 28))
        await engine.confirm_payment(booking.id, payment_reference="pi_123")

        result = await payments.cancel_with_refund(booking.id, renter_id)

        assert result.refund.percent == 50
        assert gateway.refunds == [("pi_123", Decimal("15.00"))]

    async def test_nothing_refunded_at_zero_percent(self, payments, engine, make_item, renter_id, gateway):
        item = await make_item(cancellation_policy="strict")
        booking = await approved_booking(engine, item, renter_id)
        await engine.confirm_payment(booking.id, payment_reference="pi_123")

        result = await payments.cancel_with_refund(booking.id, renter_id)

        assert result.refund.percent == 0
        assert gateway.refunds == []
        assert result.booking.status == "cancelled"

    async def test_unpaid_booking_is_just_cancelled(self, payments, engine, make_item, renter_id, gateway):
        item = await make_item()
        booking = await approved_booking(engine, item, renter_id)

        result = await payments.cancel_with_refund(booking.id, renter_id)

        assert result.refund.percent is None
        assert gateway.refunds == []
        assert result.booking.status == "cancelled"
