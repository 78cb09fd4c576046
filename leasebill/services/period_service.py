"""Billing period arithmetic: due dates and calendar-month windows."""

import calendar
from dataclasses import dataclass
from datetime import date

MIN_BILLING_YEAR = 2000
MAX_BILLING_YEAR = date.max.year


def calculate_due_date(preferred_day: int, month: int, year: int) -> date:
    """Return the due date for a billing month, clamped to the month's last day.

    A lease due on the 31st is billed on Feb 28 (or Feb 29 in a leap year),
    Apr 30, and so on.

    Args:
        preferred_day: Lease's preferred day of month (1-31)
        month: Calendar month (1-12)
        year: Calendar year

    Returns:
        Valid calendar date inside the given month
    """
    days_in_month = calendar.monthrange(year, month)[1]
    return date(year, month, min(preferred_day, days_in_month))


@dataclass(frozen=True)
class BillingPeriod:
    """Calendar month a billing run generates charges for.

    The period covers the half-open window [start, end): from the first day of
    the month up to, but excluding, the first day of the next month.
    """

    month: int
    year: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be between 1 and 12, got {self.month}")
        if not MIN_BILLING_YEAR <= self.year <= MAX_BILLING_YEAR:
            raise ValueError(
                f"year must be between {MIN_BILLING_YEAR} and {MAX_BILLING_YEAR}, got {self.year}"
            )
        # The window end (first day of the next month) must be a representable date
        if (self.month, self.year) == (12, MAX_BILLING_YEAR):
            raise ValueError(f"{self} is past the last billable period")

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end(self) -> date:
        if self.month == 12:
            return date(self.year + 1, 1, 1)
        return date(self.year, self.month + 1, 1)

    def due_date(self, preferred_day: int) -> date:
        return calculate_due_date(preferred_day, self.month, self.year)

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end

    @classmethod
    def current(cls, today: date | None = None) -> "BillingPeriod":
        """Period containing today (or the given date)."""
        today = today or date.today()
        return cls(month=today.month, year=today.year)

    def __str__(self) -> str:
        return f"{self.month}/{self.year}"


__all__ = ["BillingPeriod", "calculate_due_date", "MAX_BILLING_YEAR", "MIN_BILLING_YEAR"]
