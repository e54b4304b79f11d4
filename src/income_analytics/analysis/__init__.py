"""
Analysis Package

Period alignment, bucketing, statistics, forecasting, simulation and the
cross-sectional reports, composed by AnalyticsEngine.
"""

from .engine import AnalyticsEngine, DashboardSummary
from .forecast import ForecastInputs, build_forecast_inputs, confidence_score, project
from .grouping import Bucket, group_by_period, group_records
from .monte_carlo import MonteCarloSimulator, run_monte_carlo
from .parameters import ChangeTrend, ComparisonType, Granularity, GroupBy, PeriodMode, TrendDirection
from .periods import PeriodBounds, resolve_period_bounds
from .statistics import dampened_growth_rate, median, percentile, population_stdev, population_variance

__all__ = [
    # Engine
    "AnalyticsEngine",
    "DashboardSummary",
    # Parameters
    "ChangeTrend",
    "ComparisonType",
    "Granularity",
    "GroupBy",
    "PeriodMode",
    "TrendDirection",
    # Building blocks
    "Bucket",
    "ForecastInputs",
    "MonteCarloSimulator",
    "PeriodBounds",
    "build_forecast_inputs",
    "confidence_score",
    "dampened_growth_rate",
    "group_by_period",
    "group_records",
    "median",
    "percentile",
    "population_stdev",
    "population_variance",
    "project",
    "resolve_period_bounds",
    "run_monte_carlo",
]
