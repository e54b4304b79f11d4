#!/usr/bin/env python3
"""
Seasonality Analysis

Day-of-week and month-of-year patterns over a lookback window. Averages are
means of daily totals (one total per calendar date that has snapshots),
compared with the overall mean daily total.

All seven weekdays are always reported, Sunday first. Months are reported
only when they have data.
"""

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

import pandas as pd

from ..core.currency import round_pct, round_usd
from ..core.dates import add_months, day_of_week
from ..core.models import Stream, StreamType, flatten_streams
from .grouping import record_amount
from .parameters import require_positive

logger = logging.getLogger(__name__)

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class PeriodStats:
    """Statistics for one weekday or one calendar month."""

    index: int
    name: str
    average_usd: float
    total_usd: float
    snapshot_count: int
    pct_vs_average: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "index": self.index,
            "name": self.name,
            "average_usd": self.average_usd,
            "total_usd": self.total_usd,
            "snapshot_count": self.snapshot_count,
            "pct_vs_average": self.pct_vs_average,
        }


@dataclass(frozen=True)
class SeasonalityInsight:
    """Best or worst weekday/month."""

    name: str
    average_usd: float
    pct_vs_average: float

    @classmethod
    def empty(cls) -> "SeasonalityInsight":
        """Placeholder insight for an empty dataset."""
        return cls(NOT_AVAILABLE, 0.0, 0.0)

    @classmethod
    def from_stats(cls, stats: PeriodStats) -> "SeasonalityInsight":
        """Insight describing one weekday or month."""
        return cls(stats.name, stats.average_usd, stats.pct_vs_average)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"name": self.name, "average_usd": self.average_usd, "pct_vs_average": self.pct_vs_average}


@dataclass(frozen=True)
class SeasonalityReport:
    """Weekday and month patterns with their extremes."""

    day_of_week: list[PeriodStats] = field(default_factory=list)
    month_of_year: list[PeriodStats] = field(default_factory=list)
    best_day: SeasonalityInsight = field(default_factory=SeasonalityInsight.empty)
    worst_day: SeasonalityInsight = field(default_factory=SeasonalityInsight.empty)
    best_month: SeasonalityInsight = field(default_factory=SeasonalityInsight.empty)
    worst_month: SeasonalityInsight = field(default_factory=SeasonalityInsight.empty)
    total_days_analyzed: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "day_of_week": [d.to_dict() for d in self.day_of_week],
            "month_of_year": [m.to_dict() for m in self.month_of_year],
            "best_day": self.best_day.to_dict(),
            "worst_day": self.worst_day.to_dict(),
            "best_month": self.best_month.to_dict(),
            "worst_month": self.worst_month.to_dict(),
            "total_days_analyzed": self.total_days_analyzed,
        }


def _empty_weekdays() -> list[PeriodStats]:
    return [PeriodStats(i, DAY_NAMES[i], 0.0, 0.0, 0, 0.0) for i in range(7)]


def _pct_vs(average: float, overall_average: float) -> float:
    if overall_average <= 0:
        return 0.0
    return (average - overall_average) / overall_average * 100


def _period_stats(daily: pd.DataFrame, column: str, overall_average: float, names: dict[int, str]) -> list[PeriodStats]:
    grouped = daily.groupby(column, sort=True).agg(
        average=("amount", "mean"),
        total=("amount", "sum"),
        snapshots=("snapshots", "sum"),
    )
    return [
        PeriodStats(
            index=int(index),
            name=names[int(index)],
            average_usd=round_usd(float(row["average"])),
            total_usd=round_usd(float(row["total"])),
            snapshot_count=int(row["snapshots"]),
            pct_vs_average=round_pct(_pct_vs(float(row["average"]), overall_average), 1),
        )
        for index, row in grouped.iterrows()
    ]


def seasonality(
    streams: list[Stream],
    months_back: int,
    today: date,
    stream_type: StreamType | None = None,
) -> SeasonalityReport:
    """
    Analyze weekday and month patterns over the last months_back months.

    Returns:
        SeasonalityReport; an empty window yields seven zeroed weekdays,
        no months and "N/A" insights
    """
    require_positive("months_back", months_back)
    records = flatten_streams(streams, add_months(today, -months_back), today)
    if not records:
        return SeasonalityReport(day_of_week=_empty_weekdays())

    frame = pd.DataFrame(
        {
            "date": [r.date for r in records],
            "amount": [record_amount(r, stream_type) for r in records],
        }
    )
    daily = frame.groupby("date", sort=True).agg(amount=("amount", "sum"), snapshots=("amount", "size"))
    daily["weekday"] = [day_of_week(d) for d in daily.index]
    daily["month"] = [d.month for d in daily.index]
    overall_average = float(daily["amount"].mean())

    present_days = {s.index: s for s in _period_stats(daily, "weekday", overall_average, dict(enumerate(DAY_NAMES)))}
    weekdays = [present_days.get(i, PeriodStats(i, DAY_NAMES[i], 0.0, 0.0, 0, 0.0)) for i in range(7)]
    months = _period_stats(daily, "month", overall_average, {m: calendar.month_name[m] for m in range(1, 13)})

    best_day = max(weekdays, key=lambda s: s.average_usd)
    worst_day = min(weekdays, key=lambda s: s.average_usd)
    best_month = max(months, key=lambda s: s.average_usd)
    worst_month = min(months, key=lambda s: s.average_usd)

    logger.debug(f"Seasonality over {len(daily)} days: best day {best_day.name}, best month {best_month.name}")
    return SeasonalityReport(
        day_of_week=weekdays,
        month_of_year=months,
        best_day=SeasonalityInsight.from_stats(best_day),
        worst_day=SeasonalityInsight.from_stats(worst_day),
        best_month=SeasonalityInsight.from_stats(best_month),
        worst_month=SeasonalityInsight.from_stats(worst_month),
        total_days_analyzed=len(daily),
    )
