#!/usr/bin/env python3
"""
Period Boundary Resolver

Computes current vs. previous comparison windows for MoM, WoW, QoQ and YoY.

Two alignment policies exist:

- Equivalent (partial) windows: used while the reference date's period is
  still open. The current window runs from the period start to the
  reference date; the previous window covers the same day offset one period
  back, clamped to the previous period's length (Mar 31 -> Feb 28/29).
- Complete windows: used for a closed period. Both windows span full
  calendar periods.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from ..core.dates import (
    add_months,
    add_years,
    days_in_month,
    month_end,
    month_start,
    quarter_end,
    quarter_start,
    week_start,
    year_end,
    year_start,
)
from .parameters import ComparisonType, PeriodMode


@dataclass(frozen=True)
class PeriodBounds:
    """Inclusive date windows for a period comparison."""

    comparison_type: ComparisonType
    mode: PeriodMode
    current_start: date
    current_end: date
    previous_start: date
    previous_end: date

    def in_current(self, value: date) -> bool:
        """Whether a date falls in the current window."""
        return self.current_start <= value <= self.current_end

    def in_previous(self, value: date) -> bool:
        """Whether a date falls in the previous window."""
        return self.previous_start <= value <= self.previous_end

    def as_tuple(self) -> tuple[date, date, date, date]:
        """(current_start, current_end, previous_start, previous_end)."""
        return (self.current_start, self.current_end, self.previous_start, self.previous_end)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "comparison_type": self.comparison_type.value,
            "mode": self.mode.value,
            "current_start": self.current_start.isoformat(),
            "current_end": self.current_end.isoformat(),
            "previous_start": self.previous_start.isoformat(),
            "previous_end": self.previous_end.isoformat(),
        }


def full_period(comparison_type: ComparisonType, reference: date) -> tuple[date, date]:
    """Full calendar period containing the reference date."""
    if comparison_type == ComparisonType.WOW:
        start = week_start(reference)
        return start, start + timedelta(days=6)
    if comparison_type == ComparisonType.QOQ:
        return quarter_start(reference), quarter_end(reference)
    if comparison_type == ComparisonType.YOY:
        return year_start(reference), year_end(reference)
    return month_start(reference), month_end(reference)


def is_period_open(comparison_type: ComparisonType, reference: date, today: date) -> bool:
    """Whether the reference date's period has not yet closed as of today."""
    _, end = full_period(comparison_type, reference)
    return end >= today


def _equivalent_bounds(comparison_type: ComparisonType, reference: date) -> tuple[date, date, date, date]:
    if comparison_type == ComparisonType.WOW:
        current_start = week_start(reference)
        return current_start, reference, current_start - timedelta(days=7), reference - timedelta(days=7)

    if comparison_type == ComparisonType.QOQ:
        current_start = quarter_start(reference)
        previous_start = add_months(current_start, -3)
        offset = reference - current_start
        previous_end = min(previous_start + offset, current_start - timedelta(days=1))
        return current_start, reference, previous_start, previous_end

    if comparison_type == ComparisonType.YOY:
        current_start = year_start(reference)
        return current_start, reference, add_years(current_start, -1), add_years(reference, -1)

    current_start = month_start(reference)
    previous_start = add_months(current_start, -1)
    last_day = days_in_month(previous_start.year, previous_start.month)
    previous_end = previous_start.replace(day=min(reference.day, last_day))
    return current_start, reference, previous_start, previous_end


def _complete_bounds(comparison_type: ComparisonType, reference: date) -> tuple[date, date, date, date]:
    current_start, current_end = full_period(comparison_type, reference)
    if comparison_type == ComparisonType.WOW:
        previous_start = current_start - timedelta(days=7)
    elif comparison_type == ComparisonType.QOQ:
        previous_start = add_months(current_start, -3)
    elif comparison_type == ComparisonType.YOY:
        previous_start = add_years(current_start, -1)
    else:
        previous_start = add_months(current_start, -1)
    return current_start, current_end, previous_start, current_start - timedelta(days=1)


def resolve_period_bounds(
    comparison_type: ComparisonType | str,
    reference_date: date | None = None,
    today: date | None = None,
    mode: PeriodMode = PeriodMode.AUTO,
) -> PeriodBounds:
    """
    Resolve comparison windows for a reference date.

    Args:
        comparison_type: MoM, WoW, QoQ or YoY (strings are parsed leniently)
        reference_date: Date whose period is "current" (default: today)
        today: Clock override (default: date.today())
        mode: AUTO picks EQUIVALENT for an open period and COMPLETE for a closed one

    Returns:
        PeriodBounds with the four window dates

    Example:
        resolve_period_bounds("MoM", date(2023, 3, 31), today=date(2023, 3, 31))
        -> current 2023-03-01..2023-03-31, previous 2023-02-01..2023-02-28
    """
    comparison_type = ComparisonType.parse(comparison_type)
    today = today or date.today()
    reference = reference_date or today

    if mode == PeriodMode.AUTO:
        mode = PeriodMode.EQUIVALENT if is_period_open(comparison_type, reference, today) else PeriodMode.COMPLETE

    if mode == PeriodMode.EQUIVALENT:
        bounds = _equivalent_bounds(comparison_type, reference)
    else:
        bounds = _complete_bounds(comparison_type, reference)

    return PeriodBounds(comparison_type, mode, *bounds)
