#!/usr/bin/env python3
"""
Granularity Grouper

Buckets flow records into daily/weekly/monthly/quarterly/yearly groups.

Bucket keys:
- daily: the date itself
- weekly: the Sunday on or before the date
- monthly: first of month
- quarterly: first of quarter
- yearly: January 1

Within a bucket the amount is the plain sum when a stream-type filter was
applied, and net flow (income minus outcome) otherwise.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, TypeVar

import pandas as pd

from ..core.dates import add_months, add_years, month_start, quarter_start, week_start, year_start
from ..core.models import FlowRecord, StreamType
from .parameters import Granularity

logger = logging.getLogger(__name__)

T = TypeVar("T")

_BUCKET_KEYS: dict[Granularity, Callable[[date], date]] = {
    Granularity.DAILY: lambda d: d,
    Granularity.WEEKLY: week_start,
    Granularity.MONTHLY: month_start,
    Granularity.QUARTERLY: quarter_start,
    Granularity.YEARLY: year_start,
}


def bucket_key(value: date, granularity: Granularity) -> date:
    """Bucket start date for a date at the given granularity."""
    return _BUCKET_KEYS[granularity](value)


def lookback_start(granularity: Granularity, periods_back: int, today: date) -> date:
    """
    Earliest date covered by looking back a number of periods from today.

    Example:
        lookback_start(Granularity.WEEKLY, 4, date(2024, 3, 29)) -> date(2024, 3, 1)
    """
    if granularity == Granularity.DAILY:
        return today - timedelta(days=periods_back)
    if granularity == Granularity.WEEKLY:
        return today - timedelta(days=periods_back * 7)
    if granularity == Granularity.QUARTERLY:
        return add_months(today, -periods_back * 3)
    if granularity == Granularity.YEARLY:
        return add_years(today, -periods_back)
    return add_months(today, -periods_back)


@dataclass(frozen=True)
class Bucket:
    """One time bucket of aggregated flow."""

    key: date
    amount: float
    count: int
    income: float = 0.0
    outcome: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "key": self.key.isoformat(),
            "amount": self.amount,
            "count": self.count,
            "income": self.income,
            "outcome": self.outcome,
        }


def record_amount(record: FlowRecord, stream_type: StreamType | None = None) -> float:
    """Contribution of one record: its amount under a filter, its signed amount in net-flow mode."""
    return record.usd_amount if stream_type is not None else record.signed_amount


def net_total(records: Iterable[FlowRecord], stream_type: StreamType | None = None) -> float:
    """
    Aggregate amount of a set of records.

    Plain sum when a stream-type filter applies; income minus outcome when
    it does not.
    """
    return sum(record_amount(r, stream_type) for r in records)


def group_records(
    records: list[FlowRecord],
    granularity: Granularity,
    stream_type: StreamType | None = None,
) -> list[Bucket]:
    """
    Group flow records into ordered time buckets.

    Args:
        records: Flattened snapshots
        granularity: Bucket size
        stream_type: Filter that was applied upstream; None selects net-flow mode

    Returns:
        Buckets ordered by key; each keeps its contributing record count
    """
    if not records:
        return []

    frame = pd.DataFrame(
        {
            "key": [bucket_key(r.date, granularity) for r in records],
            "income": [r.usd_amount if r.stream_type == StreamType.INCOME else 0.0 for r in records],
            "outcome": [r.usd_amount if r.stream_type == StreamType.OUTCOME else 0.0 for r in records],
        }
    )
    grouped = frame.groupby("key", sort=True).agg(
        income=("income", "sum"),
        outcome=("outcome", "sum"),
        count=("key", "size"),
    )

    buckets = []
    for key, row in grouped.iterrows():
        income = float(row["income"])
        outcome = float(row["outcome"])
        if stream_type is None:
            amount = income - outcome
        else:
            amount = income + outcome
        buckets.append(Bucket(key=key, amount=amount, count=int(row["count"]), income=income, outcome=outcome))

    logger.debug(f"Grouped {len(records)} records into {len(buckets)} {granularity.value} buckets")
    return buckets


def group_by_period(
    items: list[T],
    granularity: Granularity,
    get_date: Callable[[T], date],
) -> dict[date, list[T]]:
    """
    Group arbitrary items by time bucket using an explicit date accessor.

    Args:
        items: Items to group
        granularity: Bucket size
        get_date: Returns the date of an item

    Returns:
        Mapping of bucket key to items, in ascending key order
    """
    groups: dict[date, list[T]] = {}
    for item in items:
        groups.setdefault(bucket_key(get_date(item), granularity), []).append(item)
    return dict(sorted(groups.items()))
