#!/usr/bin/env python3
"""
Calendar Helpers

Day-granularity calendar arithmetic shared by the period resolver and the
granularity grouper. Weeks start on Sunday; quarters start in January,
April, July and October.
"""

import calendar
from datetime import date, timedelta


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month."""
    return calendar.monthrange(year, month)[1]


def add_months(value: date, months: int) -> date:
    """
    Shift a date by whole months, clamping the day to the target month.

    Args:
        value: Date to shift
        months: Number of months (may be negative)

    Returns:
        Shifted date, e.g. 2024-03-31 + (-1) -> 2024-02-29

    Example:
        add_months(date(2023, 1, 31), 1) -> date(2023, 2, 28)
    """
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    return date(year, month, min(value.day, days_in_month(year, month)))


def add_years(value: date, years: int) -> date:
    """Shift a date by whole years; Feb 29 maps to Feb 28 in non-leap years."""
    return add_months(value, years * 12)


def day_of_week(value: date) -> int:
    """Day of week with Sunday = 0 through Saturday = 6."""
    return (value.weekday() + 1) % 7


def week_start(value: date) -> date:
    """Sunday on or before the given date."""
    return value - timedelta(days=day_of_week(value))


def month_start(value: date) -> date:
    """First day of the date's month."""
    return value.replace(day=1)


def month_end(value: date) -> date:
    """Last day of the date's month."""
    return value.replace(day=days_in_month(value.year, value.month))


def quarter_index(value: date) -> int:
    """Zero-based quarter of the year."""
    return (value.month - 1) // 3


def quarter_start(value: date) -> date:
    """First day of the date's quarter."""
    return date(value.year, quarter_index(value) * 3 + 1, 1)


def quarter_end(value: date) -> date:
    """Last day of the date's quarter."""
    return add_months(quarter_start(value), 3) - timedelta(days=1)


def year_start(value: date) -> date:
    """January 1 of the date's year."""
    return date(value.year, 1, 1)


def year_end(value: date) -> date:
    """December 31 of the date's year."""
    return date(value.year, 12, 31)


def date_range(start: date, end: date) -> list[date]:
    """All dates from start through end inclusive; empty when end < start."""
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def parse_iso_date(value: "str | date | None") -> date | None:
    """Parse YYYY-MM-DD; passes dates and None through unchanged."""
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value)
