"""Rental price calculation with 3-day and 7-day bundles."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from rentshare.core.exceptions import InvalidDurationError

CENT = Decimal("0.01")

# Segment sizes a rental can be split into
BUNDLE_SIZES = (1, 3, 7)


def to_money(value: Decimal | float | int | str) -> Decimal:
    """Round to currency units with 2 decimals."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def _bundle_price(price: Decimal | float | int | None, size: int, per_day: Decimal) -> Decimal:
    if price is None or Decimal(str(price)) <= 0:
        return per_day * size
    return Decimal(str(price))


def calculate_total_price(
    days_requested: int,
    per_day_price: Decimal | float | int,
    bundle_3_price: Decimal | float | int | None = None,
    bundle_7_price: Decimal | float | int | None = None,
) -> Decimal:
    """Cheapest split of the rental into 1, 3 and 7 day segments.

    Unconfigured bundles cost the same as buying the days one by one, so
    the result never exceeds ``days_requested * per_day_price``.
    """
    if days_requested <= 0:
        raise InvalidDurationError(f"Cannot price a rental of {days_requested} days")

    per_day = Decimal(str(per_day_price))
    segment_cost = {
        1: per_day,
        3: _bundle_price(bundle_3_price, 3, per_day),
        7: _bundle_price(bundle_7_price, 7, per_day),
    }

    cost: list[Decimal] = [Decimal("0")] * (days_requested + 1)
    for n in range(1, days_requested + 1):
        cost[n] = min(
            cost[n - size] + segment_cost[size]
            for size in BUNDLE_SIZES
            if n >= size
        )

    return to_money(cost[days_requested])


@dataclass(frozen=True)
class PriceQuote:
    """Price shown to a renter before requesting a booking."""

    days: int
    total_price: Decimal
    average_per_day: Decimal


def quote_price(
    days_requested: int,
    per_day_price: Decimal | float | int,
    bundle_3_price: Decimal | float | int | None = None,
    bundle_7_price: Decimal | float | int | None = None,
) -> PriceQuote:
    total = calculate_total_price(days_requested, per_day_price, bundle_3_price, bundle_7_price)
    return PriceQuote(
        days=days_requested,
        total_price=total,
        average_per_day=to_money(total / days_requested),
    )
