#!/usr/bin/env python3
"""
Analytics Engine

One operation per report type. Each operation fetches streams from the
repository, parses its parameters at the boundary, runs the pure analysis
functions and returns a ReportResult.

Failures:
- UpstreamFailure from the repository is returned verbatim
- InvalidParameterError for non-positive counts or unknown stream types
- OperationCancelled when the caller's token is set

Unrecognized granularity, group-by and comparison strings fall back to
their defaults with a warning instead of failing.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Any, TypeVar

import numpy as np

from ..core.cancellation import CancellationToken
from ..core.config import Config, ModelParameters, SimulationConfig
from ..core.datastore import StreamRepository
from ..core.dates import month_start
from ..core.models import Provider, Stream, StreamType
from ..core.results import AnalyticsError, InvalidParameterError, ReportResult, UpstreamFailure
from .aggregation import (
    DailyRateReport,
    DistributionReport,
    PortfolioSummary,
    TopPerformersReport,
    daily_rate,
    distribution,
    portfolio_summary,
    top_performers,
)
from .forecast import ProjectionReport, build_forecast_inputs, build_projection_report
from .monte_carlo import MonteCarloReport, MonteCarloSimulator, run_monte_carlo
from .parameters import ComparisonType, Granularity, GroupBy, PeriodMode
from .periods import resolve_period_bounds
from .seasonality import SeasonalityReport, seasonality
from .timeseries import StackedTimeSeriesReport, TimeSeriesReport, stacked_time_series, time_series
from .trends import PeriodComparisonReport, StreamTrendsReport, TrendReport, compare_periods, stream_trends, trend

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class DashboardSummary:
    """Portfolio summary plus the month-over-month comparison."""

    portfolio: PortfolioSummary
    month_over_month: PeriodComparisonReport | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "portfolio": self.portfolio.to_dict(),
            "month_over_month": self.month_over_month.to_dict() if self.month_over_month else None,
        }


def _parse_stream_type(value: "str | int | StreamType | None") -> StreamType | None:
    try:
        return StreamType.parse(value)
    except ValueError as e:
        raise InvalidParameterError(str(e)) from e


def _select(streams: list[Stream], stream_id: str | None = None, category: str | None = None) -> list[Stream]:
    return [
        s for s in streams if (stream_id is None or s.id == stream_id) and (category is None or s.category == category)
    ]


class AnalyticsEngine:
    """
    Stateless report facade over a stream repository.

    The engine holds only configuration, the clock and the random source;
    calls do not share mutable state and may run concurrently.
    """

    def __init__(
        self,
        repository: StreamRepository,
        params: ModelParameters | None = None,
        simulation: SimulationConfig | None = None,
        rng: np.random.Generator | None = None,
        clock: Callable[[], date] | None = None,
    ):
        """
        Initialize the engine.

        Args:
            repository: Upstream stream/provider collaborator
            params: Model constants (defaults reproduce the production model)
            simulation: Monte Carlo defaults; its seed seeds the random source
            rng: Explicit random source, overriding the configured seed
            clock: Returns "today" (default: date.today)
        """
        self.repository = repository
        self.params = params or ModelParameters()
        self.simulation = simulation or SimulationConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.simulation.seed)
        self.clock = clock or date.today
        self._rng_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: Config, repository: StreamRepository) -> "AnalyticsEngine":
        """Engine wired with the configured model and simulation settings."""
        return cls(repository, params=config.model, simulation=config.simulation)

    # Plumbing

    def _run(self, report_name: str, compute: Callable[[], T]) -> ReportResult[T]:
        try:
            return ReportResult.ok(compute())
        except AnalyticsError as e:
            if isinstance(e, UpstreamFailure):
                logger.error(f"{report_name} failed: upstream data unavailable: {e}")
            else:
                logger.warning(f"{report_name} failed: {e}")
            return ReportResult.fail(e)

    def _fetch_streams(self, stream_type: StreamType | None = None, provider_id: str | None = None) -> list[Stream]:
        try:
            return self.repository.fetch_streams(stream_type=stream_type, provider_id=provider_id)
        except AnalyticsError:
            raise
        except Exception as e:
            raise UpstreamFailure(str(e)) from e

    def _fetch_providers(self) -> list[Provider]:
        try:
            return self.repository.fetch_providers()
        except AnalyticsError:
            raise
        except Exception as e:
            raise UpstreamFailure(str(e)) from e

    def _today(self, today: date | None) -> date:
        return today or self.clock()

    @staticmethod
    def _checkpoint(cancellation: CancellationToken | None) -> None:
        if cancellation is not None:
            cancellation.raise_if_cancelled()

    def _next_rng(self, seed: int | None) -> np.random.Generator:
        if seed is not None:
            return np.random.default_rng(seed)
        with self._rng_lock:
            return self.rng.spawn(1)[0]

    # Reports

    def daily_rate(
        self,
        days_back: int = 30,
        stream_type: "str | StreamType | None" = None,
        provider_id: str | None = None,
        today: date | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ReportResult[DailyRateReport]:
        """Average, median and spread of daily flow over the last days_back days."""

        def compute() -> DailyRateReport:
            direction = _parse_stream_type(stream_type)
            streams = self._fetch_streams(direction, provider_id)
            self._checkpoint(cancellation)
            return daily_rate(streams, days_back, self._today(today), direction)

        return self._run("Daily rate", compute)

    def period_comparison(
        self,
        comparison_type: "str | ComparisonType" = ComparisonType.MOM,
        reference_date: date | None = None,
        mode: "str | PeriodMode" = PeriodMode.AUTO,
        stream_type: "str | StreamType | None" = None,
        provider_id: str | None = None,
        today: date | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ReportResult[PeriodComparisonReport]:
        """Current period against the previous one (MoM, WoW, QoQ or YoY)."""

        def compute() -> PeriodComparisonReport:
            direction = _parse_stream_type(stream_type)
            bounds = resolve_period_bounds(
                ComparisonType.parse(comparison_type), reference_date, self._today(today), PeriodMode.parse(mode)
            )
            streams = self._fetch_streams(direction, provider_id)
            self._checkpoint(cancellation)
            return compare_periods(streams, bounds, direction)

        return self._run("Period comparison", compute)

    def distribution(
        self,
        group_by: "str | GroupBy" = GroupBy.CATEGORY,
        start: date | None = None,
        end: date | None = None,
        stream_type: "str | StreamType | None" = None,
        provider_id: str | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ReportResult[DistributionReport]:
        """Share of flow per category, provider, stream or currency."""

        def compute() -> DistributionReport:
            direction = _parse_stream_type(stream_type)
            key = GroupBy.parse(group_by)
            streams = self._fetch_streams(direction, provider_id)
            providers = self._fetch_providers() if key == GroupBy.PROVIDER else []
            self._checkpoint(cancellation)
            return distribution(streams, key, providers, start, end, direction)

        return self._run("Distribution", compute)

    def top_performers(
        self,
        top_n: int = 10,
        start: date | None = None,
        end: date | None = None,
        stream_type: "str | StreamType | None" = None,
        cancellation: CancellationToken | None = None,
    ) -> ReportResult[TopPerformersReport]:
        """The top_n streams by total over an optional window."""

        def compute() -> TopPerformersReport:
            streams = self._fetch_streams(_parse_stream_type(stream_type))
            providers = self._fetch_providers()
            self._checkpoint(cancellation)
            return top_performers(streams, top_n, providers, start, end)

        return self._run("Top performers", compute)

    def trend(
        self,
        period: "str | Granularity" = Granularity.MONTHLY,
        periods_back: int = 12,
        stream_id: str | None = None,
        category: str | None = None,
        stream_type: "str | StreamType | None" = None,
        provider_id: str | None = None,
        today: date | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ReportResult[TrendReport]:
        """Bucketed trend line over the last periods_back periods."""

        def compute() -> TrendReport:
            direction = _parse_stream_type(stream_type)
            granularity = Granularity.parse(period)
            streams = _select(self._fetch_streams(direction, provider_id), stream_id, category)
            self._checkpoint(cancellation)
            return trend(streams, granularity, periods_back, self._today(today), direction, self.params, cancellation)

        return self._run("Trend", compute)

    def stream_trends(
        self,
        comparison_type: "str | ComparisonType" = ComparisonType.MOM,
        stream_type: "str | StreamType | None" = None,
        provider_id: str | None = None,
        today: date | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ReportResult[StreamTrendsReport]:
        """Growing/declining/stable classification of every stream."""

        def compute() -> StreamTrendsReport:
            direction = _parse_stream_type(stream_type)
            now = self._today(today)
            bounds = resolve_period_bounds(ComparisonType.parse(comparison_type), now, now)
            streams = self._fetch_streams(direction, provider_id)
            providers = self._fetch_providers()
            self._checkpoint(cancellation)
            return stream_trends(streams, bounds, providers, self.params)

        return self._run("Stream trends", compute)

    def seasonality(
        self,
        months_back: int = 12,
        stream_type: "str | StreamType | None" = None,
        provider_id: str | None = None,
        today: date | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ReportResult[SeasonalityReport]:
        """Weekday and month-of-year patterns over the last months_back months."""

        def compute() -> SeasonalityReport:
            direction = _parse_stream_type(stream_type)
            streams = self._fetch_streams(direction, provider_id)
            self._checkpoint(cancellation)
            return seasonality(streams, months_back, self._today(today), direction)

        return self._run("Seasonality", compute)

    def projection(
        self,
        months_ahead: int = 12,
        stream_type: "str | StreamType | None" = StreamType.INCOME,
        provider_id: str | None = None,
        today: date | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ReportResult[ProjectionReport]:
        """Deterministic fixed + variable projection with confidence bands."""

        def compute() -> ProjectionReport:
            direction = _parse_stream_type(stream_type) or StreamType.INCOME
            streams = self._fetch_streams(direction, provider_id)
            self._checkpoint(cancellation)
            inputs = build_forecast_inputs(streams, self.params)
            return build_projection_report(inputs, months_ahead, month_start(self._today(today)), self.params)

        return self._run("Projection", compute)

    def monte_carlo(
        self,
        simulations: int | None = None,
        months_ahead: int | None = None,
        goal_amount: float | None = None,
        stream_type: "str | StreamType | None" = StreamType.INCOME,
        provider_id: str | None = None,
        seed: int | None = None,
        today: date | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ReportResult[MonteCarloReport]:
        """
        Probabilistic projection of cumulative flow.

        Args:
            simulations: Path count (default from configuration)
            months_ahead: Horizon (default from configuration)
            goal_amount: Cumulative target for the goal probability; None (no goal) or <= 0 disables it
            stream_type: Flow direction to simulate (default: income)
            provider_id: Restrict to one provider's streams
            seed: Per-call seed; otherwise a child of the engine's random source
            today: Clock override; projections start the month after today's
            cancellation: Checked between simulation batches
        """

        def compute() -> MonteCarloReport:
            direction = _parse_stream_type(stream_type) or StreamType.INCOME
            streams = self._fetch_streams(direction, provider_id)
            self._checkpoint(cancellation)
            inputs = build_forecast_inputs(streams, self.params)
            simulator = MonteCarloSimulator(
                rng=self._next_rng(seed), params=self.params, batch_size=self.simulation.batch_size
            )
            return run_monte_carlo(
                simulator,
                inputs,
                simulations if simulations is not None else self.simulation.default_simulations,
                months_ahead if months_ahead is not None else self.simulation.default_months_ahead,
                goal_amount,
                month_start(self._today(today)),
                cancellation,
            )

        return self._run("Monte Carlo", compute)

    def time_series(
        self,
        start: date,
        end: date,
        granularity: "str | Granularity" = Granularity.DAILY,
        stream_id: str | None = None,
        provider_id: str | None = None,
        category: str | None = None,
        stream_type: "str | StreamType | None" = None,
        cancellation: CancellationToken | None = None,
    ) -> ReportResult[TimeSeriesReport]:
        """Bucketed totals between start and end, inclusive."""

        def compute() -> TimeSeriesReport:
            if start > end:
                raise InvalidParameterError(f"start {start.isoformat()} is after end {end.isoformat()}")
            direction = _parse_stream_type(stream_type)
            bucket = Granularity.parse(granularity, default=Granularity.DAILY)
            streams = _select(self._fetch_streams(direction, provider_id), stream_id, category)
            self._checkpoint(cancellation)
            return time_series(streams, start, end, bucket, direction)

        return self._run("Time series", compute)

    def stacked_time_series(
        self,
        granularity: "str | Granularity" = Granularity.MONTHLY,
        periods_back: int = 12,
        stream_type: "str | StreamType | None" = None,
        provider_id: str | None = None,
        today: date | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ReportResult[StackedTimeSeriesReport]:
        """Per-bucket totals split by stream over the last periods_back periods."""

        def compute() -> StackedTimeSeriesReport:
            direction = _parse_stream_type(stream_type)
            bucket = Granularity.parse(granularity)
            streams = self._fetch_streams(direction, provider_id)
            self._checkpoint(cancellation)
            return stacked_time_series(streams, bucket, periods_back, self._today(today), direction)

        return self._run("Stacked time series", compute)

    def portfolio_summary(
        self,
        start: date | None = None,
        end: date | None = None,
        stream_type: "str | StreamType | None" = None,
        provider_id: str | None = None,
        today: date | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ReportResult[PortfolioSummary]:
        """Headline totals and counts across the portfolio."""

        def compute() -> PortfolioSummary:
            direction = _parse_stream_type(stream_type)
            streams = self._fetch_streams(direction, provider_id)
            providers = self._fetch_providers()
            self._checkpoint(cancellation)
            return portfolio_summary(streams, providers, self._today(today), start, end, direction, self.params)

        return self._run("Portfolio summary", compute)

    def dashboard_summary(
        self,
        stream_type: "str | StreamType | None" = None,
        today: date | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ReportResult[DashboardSummary]:
        """
        Portfolio summary with the month-over-month comparison.

        A failed comparison leaves month_over_month empty; only a failed
        portfolio summary fails the dashboard.
        """
        now = self._today(today)
        summary = self.portfolio_summary(stream_type=stream_type, today=now, cancellation=cancellation)
        if summary.is_failed:
            return ReportResult(success=False, error_kind=summary.error_kind, error_message=summary.error_message)

        comparison = self.period_comparison(
            ComparisonType.MOM, stream_type=stream_type, today=now, cancellation=cancellation
        )
        return ReportResult.ok(
            DashboardSummary(portfolio=summary.unwrap(), month_over_month=comparison.value if comparison.success else None)
        )
