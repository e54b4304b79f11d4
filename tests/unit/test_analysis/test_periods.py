#!/usr/bin/env python3
"""Tests for the period boundary resolver."""

from datetime import date

import pytest

from income_analytics.analysis.parameters import ComparisonType, PeriodMode
from income_analytics.analysis.periods import is_period_open, resolve_period_bounds


@pytest.mark.unit
class TestEquivalentWindows:
    """Test partial-period alignment used while a period is open."""

    def test_month_end_clamps_to_february_28(self):
        """Test Mar 31 compares against Feb 1-28 in a non-leap year."""
        bounds = resolve_period_bounds(ComparisonType.MOM, date(2023, 3, 31), today=date(2023, 3, 31))

        assert bounds.mode == PeriodMode.EQUIVALENT
        assert bounds.as_tuple() == (date(2023, 3, 1), date(2023, 3, 31), date(2023, 2, 1), date(2023, 2, 28))

    def test_month_end_clamps_to_february_29_in_leap_year(self):
        bounds = resolve_period_bounds(ComparisonType.MOM, date(2024, 3, 31), today=date(2024, 3, 31))

        assert bounds.previous_end == date(2024, 2, 29)

    def test_mid_month_same_day_offset(self):
        bounds = resolve_period_bounds("MoM", date(2024, 1, 30), today=date(2024, 1, 30))

        assert bounds.as_tuple() == (date(2024, 1, 1), date(2024, 1, 30), date(2023, 12, 1), date(2023, 12, 30))

    def test_week_starts_on_sunday(self):
        """Test WoW windows start on the Sunday on or before the reference."""
        bounds = resolve_period_bounds(ComparisonType.WOW, date(2024, 3, 6), today=date(2024, 3, 6))

        assert bounds.as_tuple() == (date(2024, 3, 3), date(2024, 3, 6), date(2024, 2, 25), date(2024, 2, 28))

    def test_quarter_offset_clamped_to_previous_quarter(self):
        """Test a 92-day quarter offset never spills past the previous quarter's end."""
        bounds = resolve_period_bounds(ComparisonType.QOQ, date(2024, 9, 30), today=date(2024, 9, 30))

        assert bounds.current_start == date(2024, 7, 1)
        assert bounds.previous_start == date(2024, 4, 1)
        assert bounds.previous_end == date(2024, 6, 30)

    def test_leap_day_year_over_year(self):
        """Test Feb 29 maps to Feb 28 of the previous year."""
        bounds = resolve_period_bounds(ComparisonType.YOY, date(2024, 2, 29), today=date(2024, 2, 29))

        assert bounds.as_tuple() == (date(2024, 1, 1), date(2024, 2, 29), date(2023, 1, 1), date(2023, 2, 28))


@pytest.mark.unit
class TestCompleteWindows:
    """Test full-period alignment used for closed periods."""

    def test_closed_month_uses_complete_windows(self):
        bounds = resolve_period_bounds(ComparisonType.MOM, date(2024, 2, 10), today=date(2024, 3, 5))

        assert bounds.mode == PeriodMode.COMPLETE
        assert bounds.as_tuple() == (date(2024, 2, 1), date(2024, 2, 29), date(2024, 1, 1), date(2024, 1, 31))

    @pytest.mark.parametrize(
        "comparison_type,reference,expected",
        [
            (
                ComparisonType.WOW,
                date(2024, 3, 6),
                (date(2024, 3, 3), date(2024, 3, 9), date(2024, 2, 25), date(2024, 3, 2)),
            ),
            (
                ComparisonType.QOQ,
                date(2024, 5, 15),
                (date(2024, 4, 1), date(2024, 6, 30), date(2024, 1, 1), date(2024, 3, 31)),
            ),
            (
                ComparisonType.YOY,
                date(2023, 6, 1),
                (date(2023, 1, 1), date(2023, 12, 31), date(2022, 1, 1), date(2022, 12, 31)),
            ),
        ],
        ids=["wow", "qoq", "yoy"],
    )
    def test_complete_windows_are_adjacent(self, comparison_type, reference, expected):
        """Test previous window ends the day before the current one starts."""
        bounds = resolve_period_bounds(comparison_type, reference, today=date(2025, 1, 1))

        assert bounds.as_tuple() == expected

    def test_explicit_mode_overrides_auto(self):
        bounds = resolve_period_bounds(
            ComparisonType.MOM, date(2024, 3, 15), today=date(2024, 3, 15), mode=PeriodMode.COMPLETE
        )

        assert bounds.current_end == date(2024, 3, 31)
        assert bounds.previous_start == date(2024, 2, 1)


@pytest.mark.unit
class TestPeriodHelpers:
    def test_is_period_open(self):
        assert is_period_open(ComparisonType.MOM, date(2024, 3, 1), date(2024, 3, 31))
        assert not is_period_open(ComparisonType.MOM, date(2024, 2, 1), date(2024, 3, 1))

    def test_reference_defaults_to_today(self):
        bounds = resolve_period_bounds("MoM", today=date(2024, 5, 20))
        assert bounds.current_end == date(2024, 5, 20)

    def test_membership_and_serialization(self):
        bounds = resolve_period_bounds("MoM", date(2024, 1, 30), today=date(2024, 1, 30))

        assert bounds.in_current(date(2024, 1, 15))
        assert not bounds.in_current(date(2023, 12, 15))
        assert bounds.in_previous(date(2023, 12, 15))
        assert bounds.to_dict()["previous_end"] == "2023-12-30"
        assert bounds.to_dict()["mode"] == "equivalent"
