"""
Unit tests for billing calendar helpers.
"""

import pytest
from datetime import date

from agency.services.billing_dates import (
    bucket_end,
    bucket_start,
    month_bounds,
    next_payment_date,
    period_bounds,
    previous_bucket_start,
    previous_period,
    year_bounds,
)


@pytest.mark.parametrize(
    "current, expected",
    [
        (date(2025, 1, 15), date(2025, 2, 15)),
        (date(2025, 1, 31), date(2025, 2, 28)),
        (date(2024, 1, 31), date(2024, 2, 29)),
        (date(2025, 3, 31), date(2025, 4, 30)),
        (date(2025, 12, 15), date(2026, 1, 15)),
        (date(2025, 12, 31), date(2026, 1, 31)),
    ],
)
def test_next_payment_date(current, expected):
    assert next_payment_date(current) == expected


def test_next_payment_date_does_not_recover_clamped_day():
    # Jan 31 -> Feb 28 -> Mar 28: the day is not remembered
    assert next_payment_date(next_payment_date(date(2025, 1, 31))) == date(2025, 3, 28)


class TestPeriods:

    def test_month_bounds(self):
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
        assert month_bounds(2025, 11) == (date(2025, 11, 1), date(2025, 11, 30))

    @pytest.mark.parametrize("month", [0, 13])
    def test_month_bounds_rejects_bad_month(self, month):
        with pytest.raises(ValueError):
            month_bounds(2025, month)

    def test_year_bounds(self):
        assert year_bounds(2025) == (date(2025, 1, 1), date(2025, 12, 31))

    def test_period_bounds(self):
        assert period_bounds("month", 2025, 6) == (date(2025, 6, 1), date(2025, 6, 30))
        assert period_bounds("year", 2025) == (date(2025, 1, 1), date(2025, 12, 31))

    def test_period_bounds_rejects_unknown_view(self):
        with pytest.raises(ValueError):
            period_bounds("quarter", 2025, 1)

    def test_previous_period(self):
        assert previous_period("month", 2025, 6) == (2025, 5)
        assert previous_period("month", 2025, 1) == (2024, 12)
        assert previous_period("year", 2025, 6) == (2024, 6)


class TestBuckets:

    @pytest.mark.parametrize(
        "granularity, start, end",
        [
            ("day", date(2025, 6, 11), date(2025, 6, 11)),
            ("week", date(2025, 6, 9), date(2025, 6, 15)),
            ("month", date(2025, 6, 1), date(2025, 6, 30)),
        ],
    )
    def test_bucket_containing_a_wednesday(self, granularity, start, end):
        assert bucket_start(date(2025, 6, 11), granularity) == start
        assert bucket_end(start, granularity) == end

    def test_previous_bucket(self):
        assert previous_bucket_start(date(2025, 3, 1), "month") == date(2025, 2, 1)
        assert previous_bucket_start(date(2025, 1, 6), "week") == date(2024, 12, 30)
        assert previous_bucket_start(date(2025, 1, 1), "day") == date(2024, 12, 31)

    def test_unknown_granularity(self):
        with pytest.raises(ValueError):
            bucket_start(date(2025, 6, 11), "quarter")
