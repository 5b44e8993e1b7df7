"""Calendar date range helpers.

Bookings store inclusive calendar dates. ``ranges_overlap`` is the only
overlap predicate in the system; the SQL rendering in
``rentshare.repositories.booking_repository.overlapping`` mirrors it.
"""

from datetime import date, timedelta

from rentshare.core.exceptions import InvalidRangeError, ValidationError


def parse_iso_date(value: date | str) -> date:
    """Accept a ``date`` or a ``YYYY-MM-DD`` string."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid calendar date: {value!r}")


def expand_range(start: date, end: date) -> list[date]:
    """Every calendar date from start to end, both inclusive, ascending."""
    if end < start:
        raise InvalidRangeError(f"Range ends ({end}) before it starts ({start})")
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def day_count(start: date, end: date) -> int:
    """Number of rental days in an inclusive range."""
    return len(expand_range(start, end))


def ranges_overlap(
    a_start: date | str,
    a_end: date | str,
    b_start: date | str,
    b_end: date | str,
) -> bool:
    """Strict-inequality interval test on the stored start/end values.

    A range ending on day X and another starting on day X do not overlap.
    The same holds for one-day ranges (start == end): two bookings of the
    same single day never collide, nor does a one-day booking on the first
    or last day of a longer one. Only a one-day range strictly inside
    another range overlaps it.

    Both sides must use the same representation (``date`` objects or ISO
    strings, which order lexicographically).
    """
    return a_start < b_end and a_end > b_start
