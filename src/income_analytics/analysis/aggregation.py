#!/usr/bin/env python3
"""
Cross-sectional Aggregators

Daily rate, distribution, top performers and portfolio summary. Each
function is a pure computation over already-fetched streams; the engine
handles fetching, filtering and error translation.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from ..core.config import ModelParameters
from ..core.currency import round_pct, round_usd, safe_divide
from ..core.dates import add_months, date_range, month_end, month_start
from ..core.models import FlowRecord, Provider, Stream, StreamType, flatten_streams
from .forecast import fixed_monthly_amount
from .grouping import net_total, record_amount
from .parameters import GroupBy, require_positive
from .statistics import coefficient_of_variation, median, population_stdev

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyRateReport:
    """Average daily flow over a trailing window of calendar days."""

    average_daily_usd: float
    median_daily_usd: float
    days_analyzed: int
    days_with_data: int
    total_usd: float
    stdev_usd: float
    coefficient_of_variation: float
    from_date: date
    to_date: date

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "average_daily_usd": self.average_daily_usd,
            "median_daily_usd": self.median_daily_usd,
            "days_analyzed": self.days_analyzed,
            "days_with_data": self.days_with_data,
            "total_usd": self.total_usd,
            "stdev_usd": self.stdev_usd,
            "coefficient_of_variation": self.coefficient_of_variation,
            "from_date": self.from_date.isoformat(),
            "to_date": self.to_date.isoformat(),
        }


def daily_rate(
    streams: list[Stream],
    days_back: int,
    today: date,
    stream_type: StreamType | None = None,
) -> DailyRateReport:
    """
    Daily flow statistics over the days_back calendar days ending today.

    Days without snapshots count as zero, so the average is the window total
    divided by days_back and the median/stdev describe the full window.

    Example:
        Income 100 on Jan 5/15/25 and outcome 40 on Jan 10/20, 30 days
        ending Jan 30 -> total 220, average 7.33
    """
    require_positive("days_back", days_back)
    from_date = today - timedelta(days=days_back - 1)
    records = flatten_streams(streams, from_date, today)

    per_day: dict[date, float] = {}
    for record in records:
        per_day[record.date] = per_day.get(record.date, 0.0) + record_amount(record, stream_type)

    daily_totals = [per_day.get(day, 0.0) for day in date_range(from_date, today)]
    total = sum(daily_totals)

    return DailyRateReport(
        average_daily_usd=round_usd(total / days_back),
        median_daily_usd=round_usd(median(daily_totals)),
        days_analyzed=days_back,
        days_with_data=len(per_day),
        total_usd=round_usd(total),
        stdev_usd=round_usd(population_stdev(daily_totals)),
        coefficient_of_variation=round_pct(coefficient_of_variation(daily_totals), 2),
        from_date=from_date,
        to_date=today,
    )


@dataclass(frozen=True)
class DistributionItem:
    """One group of a distribution breakdown."""

    key: str
    label: str
    amount_usd: float
    percentage: float
    snapshot_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "key": self.key,
            "label": self.label,
            "amount_usd": self.amount_usd,
            "percentage": self.percentage,
            "snapshot_count": self.snapshot_count,
        }


@dataclass(frozen=True)
class DistributionReport:
    """Share of flow per category, provider, stream or currency."""

    group_by: GroupBy
    items: list[DistributionItem] = field(default_factory=list)
    total_usd: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "group_by": self.group_by.value,
            "items": [i.to_dict() for i in self.items],
            "total_usd": self.total_usd,
        }


def _distribution_key(record: FlowRecord, group_by: GroupBy, provider_names: dict[str, str]) -> tuple[str, str]:
    if group_by == GroupBy.PROVIDER:
        provider_id = record.stream.provider_id
        return provider_id, provider_names.get(provider_id, provider_id)
    if group_by == GroupBy.STREAM:
        return record.stream.id, record.stream.name
    if group_by == GroupBy.CURRENCY:
        currency = record.snapshot.original_currency
        return currency, currency
    return record.stream.category, record.stream.category


def distribution(
    streams: list[Stream],
    group_by: GroupBy,
    providers: list[Provider] | None = None,
    start: date | None = None,
    end: date | None = None,
    stream_type: StreamType | None = None,
) -> DistributionReport:
    """
    Group snapshots by a key and report each group's share of the total.

    Percentages are only computed when the total is positive; items are
    sorted by amount, largest first.

    Without a stream_type filter amounts are net (outcomes negative), so
    shares are signed: income groups can exceed 100% and outcome groups
    fall below 0%, while the shares still sum to 100%.
    """
    provider_names = {p.id: p.name for p in providers or []}
    records = flatten_streams(streams, start, end)

    amounts: dict[str, float] = {}
    counts: dict[str, int] = {}
    labels: dict[str, str] = {}
    for record in records:
        key, label = _distribution_key(record, group_by, provider_names)
        amounts[key] = amounts.get(key, 0.0) + record_amount(record, stream_type)
        counts[key] = counts.get(key, 0) + 1
        labels.setdefault(key, label)

    total = sum(amounts.values())
    items = [
        DistributionItem(
            key=key,
            label=labels[key],
            amount_usd=round_usd(amount),
            percentage=round_pct(amount / total * 100, 2) if total > 0 else 0.0,
            snapshot_count=counts[key],
        )
        for key, amount in sorted(amounts.items(), key=lambda kv: kv[1], reverse=True)
    ]

    logger.debug(f"Distribution by {group_by.value}: {len(items)} groups, total {total:,.2f}")
    return DistributionReport(group_by=group_by, items=items, total_usd=round_usd(total))


@dataclass(frozen=True)
class TopPerformerItem:
    """A ranked stream."""

    rank: int
    stream_id: str
    stream_name: str
    provider_id: str
    provider_name: str
    category: str
    total_usd: float
    percentage: float
    average_per_snapshot_usd: float
    snapshot_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "rank": self.rank,
            "stream_id": self.stream_id,
            "stream_name": self.stream_name,
            "provider_id": self.provider_id,
            "provider_name": self.provider_name,
            "category": self.category,
            "total_usd": self.total_usd,
            "percentage": self.percentage,
            "average_per_snapshot_usd": self.average_per_snapshot_usd,
            "snapshot_count": self.snapshot_count,
        }


@dataclass(frozen=True)
class TopPerformersReport:
    """The highest-earning streams over a window."""

    items: list[TopPerformerItem] = field(default_factory=list)
    total_usd: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"items": [i.to_dict() for i in self.items], "total_usd": self.total_usd}


def top_performers(
    streams: list[Stream],
    top_n: int,
    providers: list[Provider] | None = None,
    start: date | None = None,
    end: date | None = None,
) -> TopPerformersReport:
    """
    Rank streams by their total over an optional window.

    Streams without a snapshot in the window are excluded. Percentages are
    shares of the selected top-N total, not of all streams.
    """
    require_positive("top_n", top_n)
    provider_names = {p.id: p.name for p in providers or []}

    candidates = []
    for stream in streams:
        snapshots = stream.snapshots_between(start, end)
        if snapshots:
            candidates.append((stream, sum(s.usd_amount for s in snapshots), len(snapshots)))

    selected = sorted(candidates, key=lambda c: c[1], reverse=True)[:top_n]
    total = sum(amount for _, amount, _ in selected)

    items = [
        TopPerformerItem(
            rank=rank,
            stream_id=stream.id,
            stream_name=stream.name,
            provider_id=stream.provider_id,
            provider_name=provider_names.get(stream.provider_id, stream.provider_id),
            category=stream.category,
            total_usd=round_usd(amount),
            percentage=round_pct(amount / total * 100, 2) if total > 0 else 0.0,
            average_per_snapshot_usd=round_usd(amount / count),
            snapshot_count=count,
        )
        for rank, (stream, amount, count) in enumerate(selected, start=1)
    ]
    return TopPerformersReport(items=items, total_usd=round_usd(total))


@dataclass(frozen=True)
class PortfolioSummary:
    """Headline figures across all streams."""

    total_usd: float
    stream_count: int
    active_stream_count: int
    provider_count: int
    average_per_stream_usd: float
    fixed_monthly_usd: float
    variable_monthly_usd: float
    earliest_snapshot_date: date
    latest_snapshot_date: date

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_usd": self.total_usd,
            "stream_count": self.stream_count,
            "active_stream_count": self.active_stream_count,
            "provider_count": self.provider_count,
            "average_per_stream_usd": self.average_per_stream_usd,
            "fixed_monthly_usd": self.fixed_monthly_usd,
            "variable_monthly_usd": self.variable_monthly_usd,
            "earliest_snapshot_date": self.earliest_snapshot_date.isoformat(),
            "latest_snapshot_date": self.latest_snapshot_date.isoformat(),
        }


def last_full_month(today: date) -> tuple[date, date]:
    """First and last day of the calendar month before today's month."""
    start = add_months(month_start(today), -1)
    return start, month_end(start)


def portfolio_summary(
    streams: list[Stream],
    providers: list[Provider],
    today: date,
    start: date | None = None,
    end: date | None = None,
    stream_type: StreamType | None = None,
    params: ModelParameters | None = None,
) -> PortfolioSummary:
    """
    Summarize the portfolio.

    Variable monthly is the variable streams' total over the last full
    calendar month. With no snapshots in range both snapshot dates are today.
    """
    records = flatten_streams(streams, start, end)
    stream_count = len(streams)
    active_count = sum(1 for s in streams if s.is_active)

    if not records:
        return PortfolioSummary(
            total_usd=0.0,
            stream_count=stream_count,
            active_stream_count=active_count,
            provider_count=len(providers),
            average_per_stream_usd=0.0,
            fixed_monthly_usd=0.0,
            variable_monthly_usd=0.0,
            earliest_snapshot_date=today,
            latest_snapshot_date=today,
        )

    total = net_total(records, stream_type)
    last_start, last_end = last_full_month(today)
    variable_records = flatten_streams([s for s in streams if not s.is_fixed], last_start, last_end)

    return PortfolioSummary(
        total_usd=round_usd(total),
        stream_count=stream_count,
        active_stream_count=active_count,
        provider_count=len(providers),
        average_per_stream_usd=round_usd(safe_divide(total, stream_count)),
        fixed_monthly_usd=round_usd(fixed_monthly_amount(streams, params)),
        variable_monthly_usd=round_usd(net_total(variable_records, stream_type)),
        earliest_snapshot_date=min(r.date for r in records),
        latest_snapshot_date=max(r.date for r in records),
    )
