#!/usr/bin/env python3
"""
Deterministic Forecast Model

Projects monthly flow as a fixed component plus a growing variable
component, with a confidence band that widens 10% per month ahead.

Fixed component:
    Sum over fixed streams of latest snapshot amount times the monthly
    multiplier of the stream's period (Daily x30, Weekly x4.33, ...).

Variable component:
    Mean and population stdev of variable-stream totals per calendar month.

The same ForecastInputs feed the Monte Carlo simulator.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from ..core.config import ModelParameters
from ..core.currency import round_pct, round_usd, safe_divide
from ..core.dates import add_months, month_start
from ..core.models import Stream, flatten_streams
from .grouping import group_records
from .parameters import Granularity, require_positive
from .statistics import dampened_growth_rate, mean, population_stdev

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForecastInputs:
    """Historical statistics the forecast and simulation models start from."""

    fixed_monthly: float
    variable_monthly: float
    variable_stdev: float
    growth_rate: float
    stream_count: int
    fixed_stream_count: int
    variable_stream_count: int
    data_quality: float

    @property
    def total_monthly(self) -> float:
        """Fixed plus variable monthly amount."""
        return self.fixed_monthly + self.variable_monthly


@dataclass(frozen=True)
class ProjectedMonth:
    """Unrounded projection for one month ahead."""

    month: date
    horizon: int
    projected: float
    lower_bound: float
    upper_bound: float
    growth_multiplier: float


def fixed_monthly_amount(streams: list[Stream], params: ModelParameters | None = None) -> float:
    """Monthly-equivalent amount of all fixed streams, from each one's latest snapshot."""
    params = params or ModelParameters()
    total = 0.0
    for stream in streams:
        if not stream.is_fixed:
            continue
        latest = stream.latest_snapshot
        if latest is None:
            continue
        period_label = stream.fixed_period.value if stream.fixed_period else None
        total += latest.usd_amount * params.period_multiplier(period_label)
    return total


def monthly_totals(streams: list[Stream]) -> list[float]:
    """Plain per-calendar-month totals of the streams' snapshots, oldest first."""
    records = flatten_streams(streams)
    # Streams reaching this point are already direction-filtered, so sum plainly.
    return [b.income + b.outcome for b in group_records(records, Granularity.MONTHLY)]


def variable_monthly_stats(streams: list[Stream]) -> tuple[float, float]:
    """
    Mean and population stdev of variable-stream monthly totals.

    Returns:
        (mean, stdev); (0, 0) when there are no variable snapshots
    """
    totals = monthly_totals([s for s in streams if not s.is_fixed])
    if not totals:
        return 0.0, 0.0
    return mean(totals), population_stdev(totals)


def monthly_growth_rate(streams: list[Stream], params: ModelParameters | None = None) -> float:
    """Dampened growth rate of combined monthly totals across all streams."""
    return dampened_growth_rate(monthly_totals(streams), params)


def data_quality(streams: list[Stream], params: ModelParameters | None = None) -> float:
    """Fraction of streams with enough snapshots to trust."""
    params = params or ModelParameters()
    if not streams:
        return 0.0
    qualified = sum(1 for s in streams if len(s.snapshots) >= params.min_snapshots_for_quality)
    return qualified / len(streams)


def build_forecast_inputs(streams: list[Stream], params: ModelParameters | None = None) -> ForecastInputs:
    """Compute the historical statistics shared by forecast and simulation."""
    params = params or ModelParameters()
    variable_monthly, variable_stdev = variable_monthly_stats(streams)
    inputs = ForecastInputs(
        fixed_monthly=fixed_monthly_amount(streams, params),
        variable_monthly=variable_monthly,
        variable_stdev=variable_stdev,
        growth_rate=monthly_growth_rate(streams, params),
        stream_count=len(streams),
        fixed_stream_count=sum(1 for s in streams if s.is_fixed),
        variable_stream_count=sum(1 for s in streams if not s.is_fixed),
        data_quality=data_quality(streams, params),
    )
    logger.debug(f"Forecast inputs: {inputs}")
    return inputs


def confidence_score(inputs: ForecastInputs) -> float:
    """
    Confidence of the projection in [0, 1].

    0.5 x fixed ratio + 0.3 x (1 - min(variability penalty, 1)) + 0.2 x data quality
    """
    total = inputs.total_monthly
    if total == 0:
        return 0.0

    fixed_ratio = inputs.fixed_monthly / total
    variability_penalty = min(safe_divide(inputs.variable_stdev, inputs.variable_monthly), 1.0)
    confidence = 0.5 * fixed_ratio + 0.3 * (1 - variability_penalty) + 0.2 * inputs.data_quality
    return min(max(confidence, 0.0), 1.0)


def project(
    inputs: ForecastInputs,
    months_ahead: int,
    start_month: date,
    params: ModelParameters | None = None,
) -> list[ProjectedMonth]:
    """
    Project each month of the horizon with its confidence band.

    Args:
        inputs: Historical statistics
        months_ahead: Horizon length N
        start_month: Current month; month i of the horizon is start_month + i
        params: Band width and widening constants

    Returns:
        One ProjectedMonth per horizon month 1..N
    """
    params = params or ModelParameters()
    start_month = month_start(start_month)
    projections = []

    for i in range(1, months_ahead + 1):
        growth_multiplier = (1 + inputs.growth_rate) ** i
        projected_variable = inputs.variable_monthly * growth_multiplier
        uncertainty_multiplier = 1 + params.band_widening_per_month * i
        adjusted_stdev = inputs.variable_stdev * uncertainty_multiplier * growth_multiplier
        band = params.band_sigmas * adjusted_stdev

        projections.append(
            ProjectedMonth(
                month=add_months(start_month, i),
                horizon=i,
                projected=inputs.fixed_monthly + projected_variable,
                lower_bound=inputs.fixed_monthly + max(0.0, projected_variable - band),
                upper_bound=inputs.fixed_monthly + projected_variable + band,
                growth_multiplier=growth_multiplier,
            )
        )

    return projections


@dataclass(frozen=True)
class ProjectedPoint:
    """Rounded projection for one month, as reported."""

    month: date
    projected_usd: float
    lower_bound_usd: float
    upper_bound_usd: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "month": self.month.isoformat(),
            "projected_usd": self.projected_usd,
            "lower_bound_usd": self.lower_bound_usd,
            "upper_bound_usd": self.upper_bound_usd,
        }


@dataclass(frozen=True)
class ProjectionReport:
    """Deterministic projection with its fixed/variable breakdown."""

    projected_monthly_usd: float
    projected_annual_usd: float
    projected_6_month_total_usd: float
    fixed_component_usd: float
    variable_component_usd: float
    growth_rate_pct: float
    confidence_score: float
    monthly_projections: list[ProjectedPoint] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "projected_monthly_usd": self.projected_monthly_usd,
            "projected_annual_usd": self.projected_annual_usd,
            "projected_6_month_total_usd": self.projected_6_month_total_usd,
            "fixed_component_usd": self.fixed_component_usd,
            "variable_component_usd": self.variable_component_usd,
            "growth_rate_pct": self.growth_rate_pct,
            "confidence_score": self.confidence_score,
            "monthly_projections": [p.to_dict() for p in self.monthly_projections],
        }


def build_projection_report(
    inputs: ForecastInputs,
    months_ahead: int,
    start_month: date,
    params: ModelParameters | None = None,
) -> ProjectionReport:
    """
    Project the horizon and round everything for output.

    The headline monthly figure is the current run rate (fixed + variable);
    annual is twelve times that. The 6-month total sums the first six
    grown projections.
    """
    require_positive("months_ahead", months_ahead)
    months = project(inputs, months_ahead, start_month, params)
    points = [
        ProjectedPoint(
            month=m.month,
            projected_usd=round_usd(m.projected),
            lower_bound_usd=round_usd(m.lower_bound),
            upper_bound_usd=round_usd(m.upper_bound),
        )
        for m in months
    ]
    run_rate = inputs.total_monthly

    return ProjectionReport(
        projected_monthly_usd=round_usd(run_rate),
        projected_annual_usd=round_usd(run_rate * 12),
        projected_6_month_total_usd=round_usd(sum(p.projected_usd for p in points[:6])),
        fixed_component_usd=round_usd(inputs.fixed_monthly),
        variable_component_usd=round_usd(inputs.variable_monthly),
        growth_rate_pct=round_pct(inputs.growth_rate * 100, 2),
        confidence_score=round_pct(confidence_score(inputs), 2),
        monthly_projections=points,
    )
