#!/usr/bin/env python3
"""
Monte Carlo Simulator

Simulates many cumulative income trajectories over a forecast horizon and
summarizes them as percentile envelopes, a goal probability and a histogram
of final outcomes.

Per path, per month m (1..M):
    fixed    = max(0, fixed_monthly * (1 + noise * z_fixed))
    variable = max(0, variable_monthly * g_m + effective_stdev * g_m * z_variable)
    where g_m = (1 + growth_rate) ** m

The stored trajectory is the running cumulative sum, not monthly deltas.
Normal variates come from a Box-Muller transform over an injected numpy
Generator, so a fixed seed reproduces a run exactly.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any

import numpy as np

from ..core.cancellation import CancellationToken
from ..core.config import ModelParameters
from ..core.currency import format_thousands, round_pct, round_usd
from ..core.dates import add_months, month_start
from .forecast import ForecastInputs
from .parameters import require_positive
from .statistics import percentile

logger = logging.getLogger(__name__)

PERCENTILE_LEVELS = (0.10, 0.25, 0.50, 0.75, 0.90)


@dataclass(frozen=True)
class PercentileSummary:
    """Percentiles, mean and population stdev of final cumulative outcomes."""

    p10: float
    p25: float
    p50: float
    p75: float
    p90: float
    mean: float
    stdev: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "p10": self.p10,
            "p25": self.p25,
            "p50": self.p50,
            "p75": self.p75,
            "p90": self.p90,
            "mean": self.mean,
            "stdev": self.stdev,
        }


@dataclass(frozen=True)
class HistogramBucket:
    """One equal-width bucket of the final-outcome histogram."""

    range_start: float
    range_end: float
    label: str
    count: int
    percentage: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "range_start": self.range_start,
            "range_end": self.range_end,
            "label": self.label,
            "count": self.count,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class MonthlyPercentiles:
    """Cross-path percentile envelope of cumulative value at one horizon month."""

    month: date
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "month": self.month.isoformat(),
            "p10": self.p10,
            "p25": self.p25,
            "p50": self.p50,
            "p75": self.p75,
            "p90": self.p90,
        }


@dataclass(frozen=True)
class SimulationInputsSummary:
    """The historical statistics a simulation ran with, in display units."""

    fixed_monthly_usd: float
    variable_monthly_usd: float
    volatility_pct: float
    growth_rate_pct: float
    stream_count: int
    fixed_stream_count: int
    variable_stream_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "fixed_monthly_usd": self.fixed_monthly_usd,
            "variable_monthly_usd": self.variable_monthly_usd,
            "volatility_pct": self.volatility_pct,
            "growth_rate_pct": self.growth_rate_pct,
            "stream_count": self.stream_count,
            "fixed_stream_count": self.fixed_stream_count,
            "variable_stream_count": self.variable_stream_count,
        }


@dataclass(frozen=True)
class MonteCarloReport:
    """Summary of a Monte Carlo run."""

    simulation_count: int
    months_ahead: int
    goal_amount: float | None
    goal_probability: float
    percentiles: PercentileSummary
    distribution: list[HistogramBucket] = field(default_factory=list)
    monthly_projections: list[MonthlyPercentiles] = field(default_factory=list)
    inputs: SimulationInputsSummary | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "simulation_count": self.simulation_count,
            "months_ahead": self.months_ahead,
            "goal_amount": self.goal_amount,
            "goal_probability": self.goal_probability,
            "percentiles": self.percentiles.to_dict(),
            "distribution": [b.to_dict() for b in self.distribution],
            "monthly_projections": [m.to_dict() for m in self.monthly_projections],
            "inputs": self.inputs.to_dict() if self.inputs else None,
        }


def effective_stdev(inputs: ForecastInputs, params: ModelParameters | None = None) -> float:
    """
    Variable volatility with the floor applied.

    max(variable stdev, floor ratio x total monthly); when that is still
    zero, the configured minimum volatility.
    """
    params = params or ModelParameters()
    floor = params.volatility_floor_ratio * inputs.total_monthly
    stdev = max(inputs.variable_stdev, floor)
    if stdev == 0:
        stdev = params.minimum_volatility
    return stdev


class MonteCarloSimulator:
    """
    Seedable Monte Carlo path generator.

    Paths are generated in batches; the cancellation token is checked between
    batches so a cancelled run stops without producing a partial result.
    """

    def __init__(
        self,
        rng: np.random.Generator | None = None,
        params: ModelParameters | None = None,
        batch_size: int = 1000,
    ):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.params = params or ModelParameters()
        self.batch_size = require_positive("batch_size", batch_size)

    @classmethod
    def seeded(cls, seed: int, **kwargs: Any) -> "MonteCarloSimulator":
        """Simulator with a reproducible random source."""
        return cls(rng=np.random.default_rng(seed), **kwargs)

    def standard_normal(self, shape: tuple[int, ...]) -> np.ndarray:
        """
        Standard-normal variates via the Box-Muller transform.

        u1 is drawn from (0, 1] so log(u1) is always finite.
        """
        u1 = 1.0 - self.rng.random(shape)
        u2 = 1.0 - self.rng.random(shape)
        return np.sqrt(-2.0 * np.log(u1)) * np.sin(2.0 * math.pi * u2)

    def _simulate_batch(self, inputs: ForecastInputs, paths: int, months_ahead: int, stdev: float) -> np.ndarray:
        # Axis 2 holds (z_fixed, z_variable) for each path-month
        z = self.standard_normal((paths, months_ahead, 2))
        growth = (1 + inputs.growth_rate) ** np.arange(1, months_ahead + 1)

        fixed = np.maximum(0.0, inputs.fixed_monthly * (1 + self.params.fixed_income_noise * z[:, :, 0]))
        variable = np.maximum(0.0, inputs.variable_monthly * growth + stdev * growth * z[:, :, 1])
        return np.cumsum(fixed + variable, axis=1)

    def simulate(
        self,
        inputs: ForecastInputs,
        simulations: int,
        months_ahead: int,
        cancellation: CancellationToken | None = None,
    ) -> np.ndarray:
        """
        Generate cumulative trajectories.

        Args:
            inputs: Historical statistics shared with the forecast model
            simulations: Number of paths S
            months_ahead: Horizon length M
            cancellation: Checked before each batch

        Returns:
            Array of shape (S, M); row i is path i's cumulative series

        Raises:
            InvalidParameterError: If simulations or months_ahead is not positive
            OperationCancelled: If the token is cancelled during the run
        """
        require_positive("simulations", simulations)
        require_positive("months_ahead", months_ahead)
        stdev = effective_stdev(inputs, self.params)

        batches = []
        remaining = simulations
        while remaining > 0:
            if cancellation is not None:
                cancellation.raise_if_cancelled()
            size = min(self.batch_size, remaining)
            batches.append(self._simulate_batch(inputs, size, months_ahead, stdev))
            remaining -= size
            logger.debug(f"Simulated batch of {size} paths, {remaining} remaining")

        return np.vstack(batches)


def percentile_summary(final_outcomes: np.ndarray) -> PercentileSummary:
    """Percentiles of the final-month distribution plus mean and population stdev."""
    if len(final_outcomes) == 0:
        return PercentileSummary(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    ordered = np.sort(final_outcomes)
    p10, p25, p50, p75, p90 = (round_usd(percentile(ordered, p)) for p in PERCENTILE_LEVELS)
    return PercentileSummary(
        p10=p10,
        p25=p25,
        p50=p50,
        p75=p75,
        p90=p90,
        mean=round_usd(float(np.mean(ordered))),
        stdev=round_usd(float(np.std(ordered))),
    )


def monthly_percentiles(paths: np.ndarray, start_month: date) -> list[MonthlyPercentiles]:
    """
    Percentile envelope per horizon month.

    Each month's cross-path values are sorted independently. Month index m
    (0-based) is labelled start_month + m + 1.
    """
    if paths.size == 0:
        return []

    start_month = month_start(start_month)
    ordered = np.sort(paths, axis=0)
    envelopes = []
    for m in range(ordered.shape[1]):
        column = ordered[:, m]
        p10, p25, p50, p75, p90 = (round_usd(percentile(column, p)) for p in PERCENTILE_LEVELS)
        envelopes.append(
            MonthlyPercentiles(month=add_months(start_month, m + 1), p10=p10, p25=p25, p50=p50, p75=p75, p90=p90)
        )
    return envelopes


def goal_probability(final_outcomes: np.ndarray, goal_amount: float | None) -> float:
    """Percentage of paths whose final value reaches the goal; 0 when no goal is set."""
    if goal_amount is None or goal_amount <= 0 or len(final_outcomes) == 0:
        return 0.0
    reached = int(np.count_nonzero(final_outcomes >= goal_amount))
    return round_pct(reached / len(final_outcomes) * 100, 1)


def histogram(final_outcomes: np.ndarray, bucket_count: int = 10) -> list[HistogramBucket]:
    """
    Equal-width histogram spanning [min, max] of the final outcomes.

    Buckets are half-open except the last, which includes the maximum.
    A zero range uses a bucket width of 1.
    """
    total = len(final_outcomes)
    if total == 0:
        return []

    low = float(np.min(final_outcomes))
    high = float(np.max(final_outcomes))
    width = (high - low) / bucket_count
    if width == 0:
        width = 1.0

    buckets = []
    for i in range(bucket_count):
        range_start = low + width * i
        range_end = low + width * (i + 1)
        if i == bucket_count - 1:
            in_bucket = (final_outcomes >= range_start) & (final_outcomes <= range_end)
        else:
            in_bucket = (final_outcomes >= range_start) & (final_outcomes < range_end)
        count = int(np.count_nonzero(in_bucket))
        buckets.append(
            HistogramBucket(
                range_start=float(round(range_start)),
                range_end=float(round(range_end)),
                label=f"{format_thousands(range_start)}-{format_thousands(range_end)}",
                count=count,
                percentage=round_pct(count / total * 100, 1),
            )
        )
    return buckets


def summarize_inputs(inputs: ForecastInputs, params: ModelParameters | None = None) -> SimulationInputsSummary:
    """Display summary of the statistics a run was based on."""
    params = params or ModelParameters()
    total = inputs.total_monthly
    if total > 0:
        volatility_pct = round_pct(effective_stdev(inputs, params) / total * 100, 1)
    else:
        volatility_pct = round_pct(params.volatility_floor_ratio * 100, 1)

    return SimulationInputsSummary(
        fixed_monthly_usd=round_usd(inputs.fixed_monthly),
        variable_monthly_usd=round_usd(inputs.variable_monthly),
        volatility_pct=volatility_pct,
        growth_rate_pct=round_pct(inputs.growth_rate * 100, 2),
        stream_count=inputs.stream_count,
        fixed_stream_count=inputs.fixed_stream_count,
        variable_stream_count=inputs.variable_stream_count,
    )


def run_monte_carlo(
    simulator: MonteCarloSimulator,
    inputs: ForecastInputs,
    simulations: int,
    months_ahead: int,
    goal_amount: float | None,
    start_month: date,
    cancellation: CancellationToken | None = None,
) -> MonteCarloReport:
    """
    Simulate and summarize in one step.

    Args:
        simulator: Path generator carrying the random source and constants
        inputs: Historical statistics
        simulations: Number of paths
        months_ahead: Horizon length
        goal_amount: Target cumulative amount; None or <= 0 disables goal probability
        start_month: Current month; projections are labelled from the next month
        cancellation: Checked between simulation batches

    Returns:
        MonteCarloReport with all output values rounded
    """
    paths = simulator.simulate(inputs, simulations, months_ahead, cancellation)
    final_outcomes = paths[:, -1]

    report = MonteCarloReport(
        simulation_count=simulations,
        months_ahead=months_ahead,
        goal_amount=round_usd(goal_amount) if goal_amount is not None else None,
        goal_probability=goal_probability(final_outcomes, goal_amount),
        percentiles=percentile_summary(final_outcomes),
        distribution=histogram(final_outcomes, simulator.params.histogram_buckets),
        monthly_projections=monthly_percentiles(paths, start_month),
        inputs=summarize_inputs(inputs, simulator.params),
    )
    logger.info(
        f"Monte Carlo: {simulations} paths over {months_ahead} months, "
        f"median final {report.percentiles.p50:,.2f}, goal probability {report.goal_probability}%"
    )
    return report
