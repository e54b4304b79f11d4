#!/usr/bin/env python3
"""Tests for granularity bucketing."""

from datetime import date

import pytest

from income_analytics.analysis.grouping import (
    bucket_key,
    group_by_period,
    group_records,
    lookback_start,
    net_total,
)
from income_analytics.analysis.parameters import Granularity
from income_analytics.core.models import StreamType, flatten_streams


@pytest.mark.unit
class TestBucketKeys:
    """Test bucket_key and lookback_start."""

    @pytest.mark.parametrize(
        "granularity,expected",
        [
            (Granularity.DAILY, date(2024, 5, 15)),
            (Granularity.WEEKLY, date(2024, 5, 12)),
            (Granularity.MONTHLY, date(2024, 5, 1)),
            (Granularity.QUARTERLY, date(2024, 4, 1)),
            (Granularity.YEARLY, date(2024, 1, 1)),
        ],
    )
    def test_bucket_key(self, granularity, expected):
        assert bucket_key(date(2024, 5, 15), granularity) == expected

    @pytest.mark.parametrize(
        "granularity,periods,expected",
        [
            (Granularity.DAILY, 10, date(2024, 3, 19)),
            (Granularity.WEEKLY, 4, date(2024, 3, 1)),
            (Granularity.MONTHLY, 1, date(2024, 2, 29)),
            (Granularity.QUARTERLY, 1, date(2023, 12, 29)),
            (Granularity.YEARLY, 1, date(2023, 3, 29)),
        ],
    )
    def test_lookback_start(self, granularity, periods, expected):
        assert lookback_start(granularity, periods, date(2024, 3, 29)) == expected


@pytest.mark.unit
class TestGroupRecords:
    """Test group_records in net-flow and filtered modes."""

    def test_net_flow_monthly(self, net_flow_streams):
        """Test unfiltered buckets hold income minus outcome."""
        buckets = group_records(flatten_streams(net_flow_streams), Granularity.MONTHLY)

        assert len(buckets) == 1
        bucket = buckets[0]
        assert bucket.key == date(2024, 1, 1)
        assert bucket.amount == pytest.approx(220.0)
        assert bucket.income == pytest.approx(300.0)
        assert bucket.outcome == pytest.approx(80.0)
        assert bucket.count == 5

    def test_filtered_mode_sums_plainly(self, net_flow_streams):
        rent = [s for s in net_flow_streams if s.stream_type == StreamType.OUTCOME]

        buckets = group_records(flatten_streams(rent), Granularity.MONTHLY, StreamType.OUTCOME)

        assert buckets[0].amount == pytest.approx(80.0)

    def test_weekly_buckets_start_on_sunday(self, net_flow_streams):
        buckets = group_records(flatten_streams(net_flow_streams), Granularity.WEEKLY)

        assert [(b.key, b.amount) for b in buckets] == [
            (date(2023, 12, 31), 100.0),
            (date(2024, 1, 7), -40.0),
            (date(2024, 1, 14), 60.0),
            (date(2024, 1, 21), 100.0),
        ]

    def test_empty_records(self):
        assert group_records([], Granularity.DAILY) == []

    def test_net_total(self, net_flow_streams):
        records = flatten_streams(net_flow_streams)

        assert net_total(records) == pytest.approx(220.0)
        assert net_total(records, StreamType.INCOME) == pytest.approx(380.0)


@pytest.mark.unit
class TestGroupByPeriod:
    def test_groups_in_ascending_key_order(self):
        """Test arbitrary items are grouped through the date accessor."""
        items = [("c", date(2024, 3, 2)), ("a", date(2024, 1, 9)), ("b", date(2024, 1, 20))]

        groups = group_by_period(items, Granularity.MONTHLY, lambda item: item[1])

        assert list(groups) == [date(2024, 1, 1), date(2024, 3, 1)]
        assert [name for name, _ in groups[date(2024, 1, 1)]] == ["a", "b"]
