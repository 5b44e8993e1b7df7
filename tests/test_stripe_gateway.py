"""Tests for the Stripe adapter that do not reach the network."""

import asyncio
import hashlib
import hmac
import json
import time
from decimal import Decimal

import pytest

from rentshare.config import Settings
from rentshare.core.exceptions import UpstreamTimeoutError
from rentshare.gateways.stripe_gateway import StripeGateway, to_minor_units

WEBHOOK_SECRET = "whsec_test"


def sign(payload: bytes, secret: str = WEBHOOK_SECRET) -> str:
    timestamp = int(time.time())
    signed = f"{timestamp}.{payload.decode()}".encode()
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


@pytest.fixture
def stripe_gateway():
    return StripeGateway(Settings(stripe_secret_key="sk_test_x", stripe_webhook_secret=WEBHOOK_SECRET))


def test_minor_units():
    assert to_minor_units(Decimal("30.00")) == 3000
    assert to_minor_units(Decimal("12.34")) == 1234


def test_valid_signature(stripe_gateway):
    payload = json.dumps({"id": "evt_1", "type": "checkout.session.completed", "data": {"object": {}}}).encode()

    event = stripe_gateway.verify_webhook(payload, sign(payload))

    assert event["type"] == "checkout.session.completed"


def test_wrong_secret(stripe_gateway):
    payload = json.dumps({"id": "evt_1", "type": "checkout.session.completed"}).encode()
    assert stripe_gateway.verify_webhook(payload, sign(payload, "whsec_other")) is None


def test_garbage_signature(stripe_gateway):
    assert stripe_gateway.verify_webhook(b"{}", "nonsense") is None


def test_unconfigured_secret_rejects_everything():
    gateway = StripeGateway(Settings(stripe_webhook_secret=None))
    payload = b'{"id": "evt_1"}'
    assert gateway.verify_webhook(payload, sign(payload)) is None


async def test_unconfigured_key_fails_checkout():
    gateway = StripeGateway(Settings(stripe_secret_key=None))

    result = await gateway.create_checkout_session(
        Decimal("30.00"), "eur", "booking-1", "Drill", "https://a.test/ok", "https://a.test/no"
    )

    assert not result.success


async def test_slow_provider_times_out(stripe_gateway):
    stripe_gateway.timeout = 0.01

    def slow_call(**kwargs):
        time.sleep(0.2)

    with pytest.raises(UpstreamTimeoutError):
        await stripe_gateway._call(slow_call)
