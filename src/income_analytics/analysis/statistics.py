#!/usr/bin/env python3
"""
Statistical Primitives

Population statistics (divide by N), order-statistic percentiles and the
recency-weighted, dampened growth-rate estimator. Every ratio guards its
zero denominator and returns 0 instead of raising or producing NaN.
"""

import math
from collections.abc import Sequence

import numpy as np

from ..core.config import ModelParameters


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def median(values: Sequence[float]) -> float:
    """
    Median by the even/odd midpoint rule; 0 for an empty sequence.

    Example:
        median([4, 1, 3, 2]) -> 2.5
    """
    count = len(values)
    if count == 0:
        return 0.0
    ordered = sorted(values)
    middle = count // 2
    if count % 2 == 0:
        return (ordered[middle - 1] + ordered[middle]) / 2
    return float(ordered[middle])


def population_variance(values: Sequence[float]) -> float:
    """Mean squared deviation from the mean (divide by N, not N-1)."""
    if len(values) == 0:
        return 0.0
    return float(np.var(values))


def population_stdev(values: Sequence[float]) -> float:
    """Square root of the population variance."""
    return math.sqrt(population_variance(values))


def coefficient_of_variation(values: Sequence[float]) -> float:
    """stdev / mean when mean > 0, else 0."""
    average = mean(values)
    if average <= 0:
        return 0.0
    return population_stdev(values) / average


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """
    Order-statistic percentile of an ascending sequence.

    Uses index floor(N * p) clamped to [0, N - 1]; no interpolation.

    Example:
        percentile([10, 20, 30, 40], 0.5) -> 30
    """
    count = len(sorted_values)
    if count == 0:
        return 0.0
    index = min(max(int(math.floor(count * p)), 0), count - 1)
    return float(sorted_values[index])


def change_percentage(current: float, previous: float) -> float:
    """
    Percentage change from previous to current.

    Returns 100 when previous is 0 and current is positive, 0 when both
    are zero or current is not positive.
    """
    if previous != 0:
        return (current - previous) / previous * 100
    return 100.0 if current > 0 else 0.0


def period_growth_rates(totals: Sequence[float], clamp: float = 0.5) -> list[float]:
    """
    Period-over-period growth rates, each clamped to [-clamp, +clamp].

    Periods whose previous total is not positive contribute no rate.
    """
    rates = []
    for previous, current in zip(totals, totals[1:]):
        if previous > 0:
            rate = (current - previous) / previous
            rates.append(max(-clamp, min(clamp, rate)))
    return rates


def weighted_average(values: Sequence[float], weights: Sequence[float]) -> float:
    """Weighted mean; 0 when weights sum to zero."""
    weight_total = sum(weights)
    if weight_total == 0:
        return 0.0
    return sum(v * w for v, w in zip(values, weights)) / weight_total


def dampened_growth_rate(totals: Sequence[float], params: ModelParameters | None = None) -> float:
    """
    Recency-weighted, outlier-clamped, dampened growth rate.

    Args:
        totals: Chronologically ordered period totals
        params: Model constants (clamp, dampening, neutral prior)

    Returns:
        Weighted average of clamped period-over-period rates, weights
        1, 2, 3, ... with the most recent heaviest, multiplied by the
        dampening factor. Falls back to the neutral prior when fewer than
        two periods (or no usable rates) exist.

    Example:
        dampened_growth_rate([100, 110]) -> 0.07
    """
    params = params or ModelParameters()
    if len(totals) < 2:
        return params.neutral_growth_rate

    rates = period_growth_rates(totals, params.growth_clamp)
    if not rates:
        return params.neutral_growth_rate

    weights = list(range(1, len(rates) + 1))
    return weighted_average(rates, weights) * params.growth_dampening
