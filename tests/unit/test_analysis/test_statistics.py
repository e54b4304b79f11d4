#!/usr/bin/env python3
"""Tests for statistical primitives."""

import pytest

from income_analytics.analysis.statistics import (
    change_percentage,
    coefficient_of_variation,
    dampened_growth_rate,
    mean,
    median,
    percentile,
    period_growth_rates,
    population_stdev,
    population_variance,
    weighted_average,
)
from income_analytics.core.config import ModelParameters


@pytest.mark.unit
@pytest.mark.statistics
class TestDescriptiveStatistics:
    """Test mean, median, variance and coefficient of variation."""

    def test_empty_sequences_are_zero(self):
        assert mean([]) == 0.0
        assert median([]) == 0.0
        assert population_variance([]) == 0.0
        assert population_stdev([]) == 0.0
        assert coefficient_of_variation([]) == 0.0

    @pytest.mark.parametrize(
        "values,expected",
        [([4, 1, 3, 2], 2.5), ([3, 1, 2], 2.0), ([7], 7.0), ([-40, 0, 100], 0.0)],
        ids=["even", "odd", "single", "mixed_sign"],
    )
    def test_median(self, values, expected):
        assert median(values) == expected

    def test_population_variance_divides_by_n(self):
        values = [2, 4, 4, 4, 5, 5, 7, 9]

        assert population_variance(values) == pytest.approx(4.0)
        assert population_stdev(values) == pytest.approx(2.0)
        assert coefficient_of_variation(values) == pytest.approx(0.4)

    def test_coefficient_of_variation_requires_positive_mean(self):
        assert coefficient_of_variation([-5, 5]) == 0.0


@pytest.mark.unit
@pytest.mark.statistics
class TestPercentile:
    """Test the floor(N * p) order statistic."""

    @pytest.mark.parametrize("p,expected", [(0.1, 10), (0.5, 30), (0.9, 40), (1.0, 40), (0.0, 10)])
    def test_percentile(self, p, expected):
        assert percentile([10, 20, 30, 40], p) == expected

    def test_percentile_of_hundred_values(self):
        values = list(range(1, 101))
        assert percentile(values, 0.1) == 11
        assert percentile(values, 0.5) == 51

    def test_empty(self):
        assert percentile([], 0.5) == 0.0


@pytest.mark.unit
@pytest.mark.statistics
class TestGrowth:
    """Test change percentages and the dampened growth estimator."""

    @pytest.mark.parametrize(
        "current,previous,expected",
        [(110, 100, 10.0), (50, 100, -50.0), (50, 0, 100.0), (0, 0, 0.0), (-5, 0, 0.0)],
    )
    def test_change_percentage(self, current, previous, expected):
        assert change_percentage(current, previous) == pytest.approx(expected)

    def test_growth_rates_are_clamped_and_skip_non_positive_bases(self):
        assert period_growth_rates([100, 400, 0, 50, 10]) == pytest.approx([0.5, -0.5, -0.5])

    def test_single_step_growth(self):
        """Test [100, 110] gives 10% growth dampened to 7%."""
        assert dampened_growth_rate([100, 110]) == pytest.approx(0.07)

    def test_outlier_is_clamped_before_dampening(self):
        assert dampened_growth_rate([100, 1000]) == pytest.approx(0.35)

    def test_recent_periods_weigh_more(self):
        """Test weights 1, 2 favour the most recent rate."""
        assert dampened_growth_rate([100, 110, 99]) == pytest.approx((0.1 - 0.2) / 3 * 0.7)

    @pytest.mark.parametrize("totals", [[], [100], [0, 100]], ids=["empty", "single", "zero_base"])
    def test_neutral_prior_without_usable_history(self, totals):
        assert dampened_growth_rate(totals) == pytest.approx(0.02)

    def test_custom_parameters(self):
        params = ModelParameters(growth_dampening=1.0, neutral_growth_rate=0.0)

        assert dampened_growth_rate([100, 110], params) == pytest.approx(0.1)
        assert dampened_growth_rate([100], params) == 0.0

    def test_weighted_average(self):
        assert weighted_average([1, 3], [1, 3]) == pytest.approx(2.5)
        assert weighted_average([1, 3], [0, 0]) == 0.0
