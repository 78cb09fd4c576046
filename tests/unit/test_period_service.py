"""Tests for due date clamping and billing period windows."""

from datetime import date

import pytest

from leasebill.services.period_service import BillingPeriod, calculate_due_date


class TestCalculateDueDate:
    """Due dates are clamped to the last day of short months."""

    @pytest.mark.parametrize(
        "preferred_day,month,year,expected",
        [
            (31, 2, 2024, date(2024, 2, 29)),
            (31, 2, 2023, date(2023, 2, 28)),
            (10, 9, 2025, date(2025, 9, 10)),
            (31, 4, 2025, date(2025, 4, 30)),
            (30, 2, 2000, date(2000, 2, 29)),
            (29, 2, 2100, date(2100, 2, 28)),
            (1, 12, 2024, date(2024, 12, 1)),
            (31, 12, 2024, date(2024, 12, 31)),
        ],
    )
    def test_due_date(self, preferred_day, month, year, expected):
        assert calculate_due_date(preferred_day, month, year) == expected

    def test_due_date_always_in_requested_month(self):
        for month in range(1, 13):
            for day in range(1, 32):
                due = calculate_due_date(day, month, 2023)
                assert (due.year, due.month) == (2023, month)
                assert due.day <= day


class TestBillingPeriod:
    """Half-open [start, end) windows and validation."""

    def test_window_bounds(self):
        period = BillingPeriod(month=3, year=2024)

        assert period.start == date(2024, 3, 1)
        assert period.end == date(2024, 4, 1)

    def test_december_rolls_into_next_year(self):
        period = BillingPeriod(month=12, year=2024)

        assert period.end == date(2025, 1, 1)

    def test_contains_is_half_open(self):
        january = BillingPeriod(month=1, year=2025)

        assert january.contains(date(2025, 1, 1))
        assert january.contains(date(2025, 1, 31))
        assert not january.contains(date(2025, 2, 1))
        assert not january.contains(date(2024, 12, 31))

    def test_due_date_delegates_to_clamping(self):
        assert BillingPeriod(month=2, year=2024).due_date(31) == date(2024, 2, 29)

    def test_current_uses_given_date(self):
        assert BillingPeriod.current(date(2025, 9, 17)) == BillingPeriod(month=9, year=2025)

    def test_str(self):
        assert str(BillingPeriod(month=3, year=2024)) == "3/2024"

    @pytest.mark.parametrize("month", [0, 13, -1])
    def test_invalid_month_rejected(self, month):
        with pytest.raises(ValueError, match="month"):
            BillingPeriod(month=month, year=2024)

    @pytest.mark.parametrize("year", [1999, 10000])
    def test_year_outside_calendar_range_rejected(self, year):
        with pytest.raises(ValueError, match="year must be between 2000 and 9999"):
            BillingPeriod(month=1, year=year)

    def test_december_9999_rejected(self):
        with pytest.raises(ValueError, match="past the last billable period"):
            BillingPeriod(month=12, year=9999)

    def test_november_9999_window(self):
        period = BillingPeriod(month=11, year=9999)

        assert period.end == date(9999, 12, 1)
        assert period.due_date(31) == date(9999, 11, 30)

    def test_period_is_immutable(self):
        period = BillingPeriod(month=1, year=2024)

        with pytest.raises(AttributeError):
            period.month = 2
