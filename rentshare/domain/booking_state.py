"""Booking state machine."""

from enum import Enum

from rentshare.core.exceptions import InvalidBookingStatus


class BookingStatus(str, Enum):
    """Booking status values as stored and transmitted."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    PAID = "paid"
    REFUNDED = "refunded"


BOOKING_TRANSITIONS = {
    "pending": {"approved", "rejected", "cancelled"},
    "approved": {"paid", "cancelled"},
    "paid": {"cancelled", "refunded"},
    # A paid booking cancelled first can still be refunded afterwards
    "cancelled": {"refunded"},
    "rejected": set(),
    "refunded": set(),
}

# Confirmed bookings hold their dates; no two may overlap on one item
CONFIRMED_STATUSES = frozenset({"approved", "paid"})

CANCELLABLE_STATUSES = frozenset({"pending", "approved", "paid"})


def can_transition(current: str, target: str) -> bool:
    return target in BOOKING_TRANSITIONS.get(current, set())


def assert_booking_transition(current: str, target: str) -> None:
    if not can_transition(current, target):
        raise InvalidBookingStatus(
            f"Invalid booking transition: {current} → {target}"
        )
