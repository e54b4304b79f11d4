#!/usr/bin/env python3
"""
Trend Analysis

Period-over-period comparison, bucketed trend lines and per-stream health
classification. Directions use a symmetric percentage threshold (5% by
default): above it is Upward, below its negative is Downward, otherwise
Stable.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from ..core.cancellation import CancellationToken
from ..core.config import ModelParameters
from ..core.currency import round_pct, round_usd
from ..core.models import Provider, Stream, StreamType, flatten_streams
from .grouping import group_records, lookback_start, net_total
from .parameters import ChangeTrend, Granularity, TrendDirection, require_positive
from .periods import PeriodBounds
from .statistics import change_percentage, mean

logger = logging.getLogger(__name__)


def classify_direction(change_pct: float, threshold_pct: float = 5.0) -> TrendDirection:
    """
    Classify a percentage change.

    Example:
        classify_direction(5.01) -> TrendDirection.UPWARD
        classify_direction(-5.0) -> TrendDirection.STABLE
    """
    if change_pct > threshold_pct:
        return TrendDirection.UPWARD
    if change_pct < -threshold_pct:
        return TrendDirection.DOWNWARD
    return TrendDirection.STABLE


@dataclass(frozen=True)
class PeriodData:
    """Total of one comparison window."""

    start_date: date
    end_date: date
    total_usd: float
    snapshot_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "total_usd": self.total_usd,
            "snapshot_count": self.snapshot_count,
        }


@dataclass(frozen=True)
class PeriodComparisonReport:
    """Current window against the previous one."""

    comparison_type: str
    mode: str
    current_period: PeriodData
    previous_period: PeriodData
    change_usd: float
    change_pct: float
    trend: ChangeTrend

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "comparison_type": self.comparison_type,
            "mode": self.mode,
            "current_period": self.current_period.to_dict(),
            "previous_period": self.previous_period.to_dict(),
            "change_usd": self.change_usd,
            "change_pct": self.change_pct,
            "trend": self.trend.value,
        }


def compare_periods(
    streams: list[Stream],
    bounds: PeriodBounds,
    stream_type: StreamType | None = None,
) -> PeriodComparisonReport:
    """
    Compare totals of the two windows of resolved period bounds.

    The change percentage is 0 when the previous total is 0. The trend is
    the sign of the absolute change.
    """
    current = flatten_streams(streams, bounds.current_start, bounds.current_end)
    previous = flatten_streams(streams, bounds.previous_start, bounds.previous_end)
    current_total = net_total(current, stream_type)
    previous_total = net_total(previous, stream_type)

    change = current_total - previous_total
    change_pct = change / previous_total * 100 if previous_total != 0 else 0.0
    if change > 0:
        trend = ChangeTrend.UP
    elif change < 0:
        trend = ChangeTrend.DOWN
    else:
        trend = ChangeTrend.FLAT

    return PeriodComparisonReport(
        comparison_type=bounds.comparison_type.value,
        mode=bounds.mode.value,
        current_period=PeriodData(bounds.current_start, bounds.current_end, round_usd(current_total), len(current)),
        previous_period=PeriodData(
            bounds.previous_start, bounds.previous_end, round_usd(previous_total), len(previous)
        ),
        change_usd=round_usd(change),
        change_pct=round_pct(change_pct, 2),
        trend=trend,
    )


@dataclass(frozen=True)
class TrendPoint:
    """One bucket of a trend line."""

    date: date
    amount_usd: float
    cumulative_usd: float
    growth_from_previous_usd: float
    growth_from_previous_pct: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "date": self.date.isoformat(),
            "amount_usd": self.amount_usd,
            "cumulative_usd": self.cumulative_usd,
            "growth_from_previous_usd": self.growth_from_previous_usd,
            "growth_from_previous_pct": self.growth_from_previous_pct,
        }


@dataclass(frozen=True)
class TrendReport:
    """Bucketed trend line with overall growth and direction."""

    period: Granularity
    growth_rate_pct: float
    direction: TrendDirection
    average_growth_per_period_usd: float
    points: list[TrendPoint] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "period": self.period.value,
            "growth_rate_pct": self.growth_rate_pct,
            "direction": self.direction.value,
            "average_growth_per_period_usd": self.average_growth_per_period_usd,
            "points": [p.to_dict() for p in self.points],
        }


def trend(
    streams: list[Stream],
    period: Granularity,
    periods_back: int,
    today: date,
    stream_type: StreamType | None = None,
    params: ModelParameters | None = None,
    cancellation: CancellationToken | None = None,
) -> TrendReport:
    """
    Trend line over the last periods_back buckets.

    Buckets whose start is before the lookback date are dropped. Growth from
    the previous bucket is 0 for the first point; overall growth compares the
    last bucket with the first.
    """
    require_positive("periods_back", periods_back)
    params = params or ModelParameters()

    buckets = group_records(flatten_streams(streams), period, stream_type)
    if cancellation is not None:
        cancellation.raise_if_cancelled()
    since = lookback_start(period, periods_back, today)
    buckets = [b for b in buckets if b.key >= since]

    points = []
    cumulative = 0.0
    previous_amount = 0.0
    growths = []
    for index, bucket in enumerate(buckets):
        cumulative += bucket.amount
        if index == 0:
            growth_usd, growth_pct = 0.0, 0.0
        else:
            growth_usd = bucket.amount - previous_amount
            growth_pct = growth_usd / previous_amount * 100 if previous_amount != 0 else 0.0
            growths.append(growth_usd)
        points.append(
            TrendPoint(
                date=bucket.key,
                amount_usd=round_usd(bucket.amount),
                cumulative_usd=round_usd(cumulative),
                growth_from_previous_usd=round_usd(growth_usd),
                growth_from_previous_pct=round_pct(growth_pct, 2),
            )
        )
        previous_amount = bucket.amount

    overall_growth = 0.0
    if len(buckets) >= 2 and buckets[0].amount != 0:
        overall_growth = (buckets[-1].amount - buckets[0].amount) / buckets[0].amount * 100

    return TrendReport(
        period=period,
        growth_rate_pct=round_pct(overall_growth, 2),
        direction=classify_direction(overall_growth, params.trend_threshold_pct),
        average_growth_per_period_usd=round_usd(mean(growths)),
        points=points,
    )


@dataclass(frozen=True)
class StreamTrendItem:
    """Health of one stream between two windows."""

    stream_id: str
    stream_name: str
    category: str
    provider_name: str
    current_period_usd: float
    previous_period_usd: float
    change_usd: float
    change_pct: float
    direction: TrendDirection

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "stream_id": self.stream_id,
            "stream_name": self.stream_name,
            "category": self.category,
            "provider_name": self.provider_name,
            "current_period_usd": self.current_period_usd,
            "previous_period_usd": self.previous_period_usd,
            "change_usd": self.change_usd,
            "change_pct": self.change_pct,
            "direction": self.direction.value,
        }


@dataclass(frozen=True)
class StreamTrendsReport:
    """Per-stream health, largest movers first."""

    streams: list[StreamTrendItem] = field(default_factory=list)
    growing_count: int = 0
    declining_count: int = 0
    stable_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "streams": [s.to_dict() for s in self.streams],
            "growing_count": self.growing_count,
            "declining_count": self.declining_count,
            "stable_count": self.stable_count,
        }


def stream_trends(
    streams: list[Stream],
    bounds: PeriodBounds,
    providers: list[Provider] | None = None,
    params: ModelParameters | None = None,
) -> StreamTrendsReport:
    """
    Classify every stream as growing, declining or stable.

    A stream with no previous-window total but a positive current total
    counts as +100%. Items are ordered by absolute change percentage.
    """
    params = params or ModelParameters()
    provider_names = {p.id: p.name for p in providers or []}

    items = []
    for stream in streams:
        current_total = sum(s.usd_amount for s in stream.snapshots_between(bounds.current_start, bounds.current_end))
        previous_total = sum(
            s.usd_amount for s in stream.snapshots_between(bounds.previous_start, bounds.previous_end)
        )
        change_pct = change_percentage(current_total, previous_total)
        items.append(
            StreamTrendItem(
                stream_id=stream.id,
                stream_name=stream.name,
                category=stream.category,
                provider_name=provider_names.get(stream.provider_id, "Unknown"),
                current_period_usd=round_usd(current_total),
                previous_period_usd=round_usd(previous_total),
                change_usd=round_usd(current_total - previous_total),
                change_pct=round_pct(change_pct, 2),
                direction=classify_direction(change_pct, params.trend_threshold_pct),
            )
        )

    items.sort(key=lambda item: abs(item.change_pct), reverse=True)
    return StreamTrendsReport(
        streams=items,
        growing_count=sum(1 for i in items if i.direction == TrendDirection.UPWARD),
        declining_count=sum(1 for i in items if i.direction == TrendDirection.DOWNWARD),
        stable_count=sum(1 for i in items if i.direction == TrendDirection.STABLE),
    )
