#!/usr/bin/env python3
"""
Time Series Views

Bucketed totals over an explicit date range, and the same buckets broken
down by contributing stream for stacked charts.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from ..core.currency import round_usd
from ..core.models import FlowRecord, Stream, StreamType, flatten_streams
from .grouping import group_by_period, group_records, lookback_start, record_amount
from .parameters import Granularity, require_positive


@dataclass(frozen=True)
class TimeSeriesPoint:
    """One bucket of a time series."""

    date: date
    amount_usd: float
    snapshot_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"date": self.date.isoformat(), "amount_usd": self.amount_usd, "snapshot_count": self.snapshot_count}


@dataclass(frozen=True)
class TimeSeriesReport:
    """Bucketed totals between two dates."""

    granularity: Granularity
    start_date: date
    end_date: date
    points: list[TimeSeriesPoint] = field(default_factory=list)
    total_usd: float = 0.0
    average_usd: float = 0.0
    min_usd: float = 0.0
    max_usd: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "granularity": self.granularity.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "points": [p.to_dict() for p in self.points],
            "total_usd": self.total_usd,
            "average_usd": self.average_usd,
            "min_usd": self.min_usd,
            "max_usd": self.max_usd,
        }


def time_series(
    streams: list[Stream],
    start: date,
    end: date,
    granularity: Granularity,
    stream_type: StreamType | None = None,
) -> TimeSeriesReport:
    """Group the snapshots between start and end (inclusive) into buckets."""
    buckets = group_records(flatten_streams(streams, start, end), granularity, stream_type)
    points = [TimeSeriesPoint(b.key, round_usd(b.amount), b.count) for b in buckets]
    amounts = [b.amount for b in buckets]
    total = sum(amounts)

    return TimeSeriesReport(
        granularity=granularity,
        start_date=start,
        end_date=end,
        points=points,
        total_usd=round_usd(total),
        average_usd=round_usd(total / len(amounts)) if amounts else 0.0,
        min_usd=round_usd(min(amounts)) if amounts else 0.0,
        max_usd=round_usd(max(amounts)) if amounts else 0.0,
    )


@dataclass(frozen=True)
class StreamContribution:
    """One stream's share of a stacked bucket."""

    stream_id: str
    stream_name: str
    category: str
    amount_usd: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "stream_id": self.stream_id,
            "stream_name": self.stream_name,
            "category": self.category,
            "amount_usd": self.amount_usd,
        }


@dataclass(frozen=True)
class StackedPoint:
    """A bucket total with its per-stream breakdown."""

    date: date
    total_usd: float
    streams: list[StreamContribution] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "date": self.date.isoformat(),
            "total_usd": self.total_usd,
            "streams": [s.to_dict() for s in self.streams],
        }


@dataclass(frozen=True)
class StackedTimeSeriesReport:
    """Per-bucket totals broken down by stream."""

    start_date: date
    end_date: date
    points: list[StackedPoint] = field(default_factory=list)
    stream_names: list[str] = field(default_factory=list)
    total_usd: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "points": [p.to_dict() for p in self.points],
            "stream_names": list(self.stream_names),
            "total_usd": self.total_usd,
        }


def _contributions(
    records: list[FlowRecord], stream_type: StreamType | None
) -> tuple[list[StreamContribution], float]:
    """Per-stream contributions sorted descending, and the unrounded bucket total."""
    amounts: dict[str, float] = {}
    owners: dict[str, Stream] = {}
    for record in records:
        amounts[record.stream.id] = amounts.get(record.stream.id, 0.0) + record_amount(record, stream_type)
        owners.setdefault(record.stream.id, record.stream)

    contributions = [
        StreamContribution(
            stream_id=stream_id,
            stream_name=owners[stream_id].name,
            category=owners[stream_id].category,
            amount_usd=round_usd(amount),
        )
        for stream_id, amount in amounts.items()
    ]
    contributions.sort(key=lambda c: c.amount_usd, reverse=True)
    return contributions, sum(amounts.values())


def stacked_time_series(
    streams: list[Stream],
    granularity: Granularity,
    periods_back: int,
    today: date,
    stream_type: StreamType | None = None,
) -> StackedTimeSeriesReport:
    """
    Bucket the last periods_back periods and split each bucket by stream.

    Start and end are the first and last bucket keys when any exist,
    otherwise the lookback date and today.
    """
    require_positive("periods_back", periods_back)
    since = lookback_start(granularity, periods_back, today)
    records = flatten_streams(streams, start=since)

    points = []
    total = 0.0
    for key, bucket_records in group_by_period(records, granularity, lambda r: r.date).items():
        contributions, bucket_total = _contributions(bucket_records, stream_type)
        points.append(StackedPoint(key, round_usd(bucket_total), contributions))
        total += bucket_total

    stream_names = list(dict.fromkeys(s.name for s in streams))
    return StackedTimeSeriesReport(
        start_date=points[0].date if points else since,
        end_date=points[-1].date if points else today,
        points=points,
        stream_names=stream_names,
        total_usd=round_usd(total),
    )
