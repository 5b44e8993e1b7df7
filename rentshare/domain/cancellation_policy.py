"""Cancellation policy domain logic.

Policies (days between today and the rental start):
- flexible: Full refund 2+ days before, 50% 1 day before, 0% on the day
- medium: Full refund 7+ days before, 50% 3-6 days before, 0% after
- strict: Full refund 30+ days before, 50% 14-29 days before, 0% after

The refund figure is advisory: it tells the caller what to pass to the
payment provider, it never moves money by itself.
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum

from rentshare.domain.pricing import to_money


class CancellationPolicy(str, Enum):
    """Cancellation policy tiers."""

    FLEXIBLE = "flexible"
    MEDIUM = "medium"
    STRICT = "strict"


# Refund rules: list of (min_days_before_start, refund_percentage)
# Evaluated in order - first match wins
POLICY_RULES: dict[CancellationPolicy, list[tuple[int, int]]] = {
    CancellationPolicy.FLEXIBLE: [
        (2, 100),
        (1, 50),
        (0, 0),
    ],
    CancellationPolicy.MEDIUM: [
        (7, 100),
        (3, 50),
        (0, 0),
    ],
    CancellationPolicy.STRICT: [
        (30, 100),
        (14, 50),
        (0, 0),
    ],
}


def resolve_policy(policy: str | CancellationPolicy | None) -> CancellationPolicy:
    """Unknown or missing tiers fall back to flexible."""
    if isinstance(policy, CancellationPolicy):
        return policy
    try:
        return CancellationPolicy(policy)
    except ValueError:
        return CancellationPolicy.FLEXIBLE


def utc_today() -> date:
    return datetime.now(UTC).date()


def days_until_start(start_date: date, today: date | None = None) -> int:
    """Whole days from today (UTC) until the start date, never negative."""
    today = today or utc_today()
    return max(0, (start_date - today).days)


def refund_percentage(policy: str | CancellationPolicy | None, days_before_start: int) -> int:
    """Refund percentage (0, 50 or 100) for a cancellation."""
    for min_days, refund_pct in POLICY_RULES[resolve_policy(policy)]:
        if days_before_start >= min_days:
            return refund_pct
    return 0


def calculate_refund_amount(total_price: Decimal | float | int, percent: int) -> Decimal:
    """Refund amount in currency units, rounded to cents."""
    return to_money(Decimal(str(total_price)) * percent / Decimal("100"))


@dataclass(frozen=True)
class RefundQuote:
    """Refund a cancelling renter is entitled to.

    ``percent`` and ``amount`` are None when the booking was never paid, so
    callers cannot mistake "nothing to refund" for "0% refund".
    """

    percent: int | None
    amount: Decimal | None
    days_until_start: int
    policy: CancellationPolicy

    @property
    def applies(self) -> bool:
        return self.percent is not None


def quote_refund(
    policy: str | CancellationPolicy | None,
    start_date: date,
    total_price: Decimal | float | int,
    was_paid: bool,
    today: date | None = None,
) -> RefundQuote:
    """Compute the refund for cancelling a booking today."""
    resolved = resolve_policy(policy)
    days_before = days_until_start(start_date, today)
    if not was_paid:
        return RefundQuote(percent=None, amount=None, days_until_start=days_before, policy=resolved)

    percent = refund_percentage(resolved, days_before)
    amount = calculate_refund_amount(total_price, percent) if Decimal(str(total_price)) > 0 else to_money(0)
    return RefundQuote(percent=percent, amount=amount, days_until_start=days_before, policy=resolved)


def get_policy_description(policy: str | CancellationPolicy | None) -> str:
    """Get human-readable policy description."""
    descriptions = {
        CancellationPolicy.FLEXIBLE: (
            "Full refund up to 2 days before the rental starts. "
            "50% refund if cancelled 1 day before. "
            "No refund on the start day."
        ),
        CancellationPolicy.MEDIUM: (
            "Full refund up to 7 days before the rental starts. "
            "50% refund if cancelled 3-6 days before. "
            "No refund if cancelled later."
        ),
        CancellationPolicy.STRICT: (
            "Full refund up to 30 days before the rental starts. "
            "50% refund if cancelled 14-29 days before. "
            "No refund if cancelled later."
        ),
    }
    return descriptions[resolve_policy(policy)]
