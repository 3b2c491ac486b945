"""
Tests for schedule date math: inclusive durations, overlap and end-date shifts.
"""

from datetime import date

import pytest

from oversight_kernel.domain.schedule import (
    DateRange,
    duration_days,
    ranges_overlap,
    shift_end_date,
    validate_range,
)
from oversight_kernel.exceptions import InvalidDateRangeError, ValidationError


class TestDurationLaw:
    def test_single_day_counts_as_one(self):
        assert duration_days(date(2024, 3, 1), date(2024, 3, 1)) == 1

    def test_end_day_is_included(self):
        assert duration_days(date(2024, 2, 1), date(2024, 2, 15)) == 15

    def test_spans_leap_day(self):
        assert duration_days(date(2024, 2, 28), date(2024, 3, 1)) == 3

    def test_reversed_range_rejected(self):
        with pytest.raises(InvalidDateRangeError) as exc_info:
            duration_days(date(2024, 2, 15), date(2024, 2, 1))
        assert exc_info.value.code == "INVALID_DATE_RANGE"
        assert isinstance(exc_info.value, ValidationError)

    def test_validate_range_accepts_equal_dates(self):
        validate_range(date(2024, 5, 5), date(2024, 5, 5))


class TestOverlapLaw:
    @pytest.mark.parametrize(
        "a, b, expected",
        [
            # partial overlap
            ((date(2024, 2, 1), date(2024, 2, 15)), (date(2024, 2, 10), date(2024, 2, 20)), True),
            # containment
            ((date(2024, 2, 1), date(2024, 2, 28)), (date(2024, 2, 10), date(2024, 2, 12)), True),
            # exact match
            ((date(2024, 2, 1), date(2024, 2, 15)), (date(2024, 2, 1), date(2024, 2, 15)), True),
            # shared boundary day
            ((date(2024, 2, 1), date(2024, 2, 15)), (date(2024, 2, 15), date(2024, 2, 20)), True),
            # adjacent, no shared day
            ((date(2024, 2, 1), date(2024, 2, 15)), (date(2024, 2, 16), date(2024, 2, 20)), False),
            # disjoint
            ((date(2024, 1, 1), date(2024, 1, 5)), (date(2024, 3, 1), date(2024, 3, 5)), False),
        ],
    )
    def test_overlap_cases(self, a, b, expected):
        assert ranges_overlap(*a, *b) is expected
        assert ranges_overlap(*b, *a) is expected

    def test_intersection_of_partial_overlap(self):
        shared = DateRange(date(2024, 2, 1), date(2024, 2, 15)).intersection(
            DateRange(date(2024, 2, 10), date(2024, 2, 20))
        )
        assert shared == DateRange(date(2024, 2, 10), date(2024, 2, 15))

    def test_intersection_of_disjoint_is_none(self):
        shared = DateRange(date(2024, 2, 1), date(2024, 2, 5)).intersection(
            DateRange(date(2024, 2, 6), date(2024, 2, 20))
        )
        assert shared is None

    def test_date_range_validates_on_construction(self):
        with pytest.raises(InvalidDateRangeError):
            DateRange(date(2024, 2, 2), date(2024, 2, 1))


class TestShiftEndDate:
    def test_shift_forward_crosses_year(self):
        assert shift_end_date(date(2024, 12, 31), 15) == date(2025, 1, 15)

    def test_shift_back_restores(self):
        assert shift_end_date(date(2025, 1, 15), -15) == date(2024, 12, 31)
