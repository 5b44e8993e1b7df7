"""Tests for inclusive date ranges and the overlap predicate."""

from datetime import date

import pytest

from rentshare.core.exceptions import InvalidRangeError, ValidationError
from rentshare.domain.date_range import day_count, expand_range, parse_iso_date, ranges_overlap


class TestExpandRange:

    def test_inclusive_both_ends(self):
        assert expand_range(date(2024, 6, 1), date(2024, 6, 3)) == [
            date(2024, 6, 1),
            date(2024, 6, 2),
            date(2024, 6, 3),
        ]

    def test_single_day(self):
        assert expand_range(date(2024, 6, 1), date(2024, 6, 1)) == [date(2024, 6, 1)]

    def test_crosses_month_boundary(self):
        days = expand_range(date(2024, 2, 28), date(2024, 3, 1))
        assert days == [date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]

    def test_end_before_start_raises(self):
        with pytest.raises(InvalidRangeError):
            expand_range(date(2024, 6, 3), date(2024, 6, 1))

    def test_day_count(self):
        assert day_count(date(2024, 6, 1), date(2024, 6, 10)) == 10


class TestParseIsoDate:

    def test_accepts_string(self):
        assert parse_iso_date("2024-06-01") == date(2024, 6, 1)

    def test_passes_dates_through(self):
        assert parse_iso_date(date(2024, 6, 1)) == date(2024, 6, 1)

    def test_rejects_garbage(self):
        with pytest.raises(ValidationError):
            parse_iso_date("June 1st")


class TestRangesOverlap:

    def test_partial_overlap(self):
        assert ranges_overlap(date(2024, 6, 1), date(2024, 6, 3), date(2024, 6, 2), date(2024, 6, 4))

    def test_contained(self):
        assert ranges_overlap(date(2024, 6, 1), date(2024, 6, 10), date(2024, 6, 4), date(2024, 6, 5))

    def test_identical(self):
        assert ranges_overlap(date(2024, 6, 1), date(2024, 6, 3), date(2024, 6, 1), date(2024, 6, 3))

    def test_touching_ranges_do_not_overlap(self):
        # Strict inequality on stored values
        assert not ranges_overlap(date(2024, 6, 1), date(2024, 6, 3), date(2024, 6, 3), date(2024, 6, 5))
        assert not ranges_overlap(date(2024, 6, 3), date(2024, 6, 5), date(2024, 6, 1), date(2024, 6, 3))

    def test_single_day_ranges_never_overlap_at_edges(self):
        # A one-day range has start == end, so it cannot satisfy both strict
        # comparisons against a range that starts or ends on that day
        june_5 = date(2024, 6, 5)
        assert not ranges_overlap(june_5, june_5, june_5, june_5)
        assert not ranges_overlap(june_5, june_5, june_5, date(2024, 6, 9))
        assert not ranges_overlap(june_5, june_5, date(2024, 6, 1), june_5)

    def test_single_day_inside_longer_range_overlaps(self):
        assert ranges_overlap(date(2024, 6, 5), date(2024, 6, 5), date(2024, 6, 1), date(2024, 6, 9))

    def test_disjoint(self):
        assert not ranges_overlap(date(2024, 6, 1), date(2024, 6, 2), date(2024, 6, 10), date(2024, 6, 12))

    def test_is_symmetric(self):
        a = (date(2024, 6, 1), date(2024, 6, 5))
        b = (date(2024, 6, 4), date(2024, 6, 8))
        assert ranges_overlap(*a, *b) == ranges_overlap(*b, *a)

    def test_iso_strings(self):
        assert ranges_overlap("2024-06-01", "2024-06-03", "2024-06-02", "2024-06-04")
