"""Tests for cancellation refund rules."""

from datetime import date
from decimal import Decimal

import pytest

from rentshare.domain.cancellation_policy import (
    CancellationPolicy,
    days_until_start,
    get_policy_description,
    quote_refund,
    refund_percentage,
    resolve_policy,
)


@pytest.mark.parametrize(
    ("policy", "days", "expected"),
    [
        ("flexible", 5, 100),
        ("flexible", 2, 100),
        ("flexible", 1, 50),
        ("flexible", 0, 0),
        ("medium", 10, 100),
        ("medium", 7, 100),
        ("medium", 6, 50),
        ("medium", 3, 50),
        ("medium", 2, 0),
        ("strict", 30, 100),
        ("strict", 29, 50),
        ("strict", 14, 50),
        ("strict", 13, 0),
        ("strict", 0, 0),
    ],
)
def test_refund_percentage(policy, days, expected):
    assert refund_percentage(policy, days) == expected


def test_unknown_policy_falls_back_to_flexible():
    assert resolve_policy("lenient") == CancellationPolicy.FLEXIBLE
    assert resolve_policy(None) == CancellationPolicy.FLEXIBLE
    assert refund_percentage("lenient", 1) == 50


def test_days_until_start_never_negative():
    assert days_until_start(date(2024, 6, 1), today=date(2024, 6, 5)) == 0
    assert days_until_start(date(2024, 6, 10), today=date(2024, 6, 1)) == 9


class TestQuoteRefund:

    def test_paid_booking_gets_amount(self):
        quote = quote_refund("medium", date(2024, 6, 1), Decimal("30.00"), was_paid=True, today=date(2024, 5, 28))
        assert quote.days_until_start == 4
        assert quote.percent == 50
        assert quote.amount == Decimal("15.00")
        assert quote.applies

    def test_unpaid_booking_has_no_refund_figure(self):
        quote = quote_refund("strict", date(2024, 6, 1), Decimal("30.00"), was_paid=False, today=date(2024, 5, 1))
        assert quote.percent is None
        assert quote.amount is None
        assert not quote.applies
        assert quote.days_until_start == 31

    def test_zero_percent_is_reported(self):
        quote = quote_refund("flexible", date(2024, 6, 1), Decimal("30.00"), was_paid=True, today=date(2024, 6, 1))
        assert quote.percent == 0
        assert quote.amount == Decimal("0.00")

    def test_half_refund_rounds_to_cents(self):
        quote = quote_refund("flexible", date(2024, 6, 2), Decimal("25.25"), was_paid=True, today=date(2024, 6, 1))
        assert quote.amount == Decimal("12.63")


def test_policy_description_mentions_thresholds():
    assert "30 days" in get_policy_description("strict")
    assert get_policy_description("unknown") == get_policy_description("flexible")
