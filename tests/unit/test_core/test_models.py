#!/usr/bin/env python3
"""Tests for stream, snapshot and provider models."""

from datetime import date

import pytest

from income_analytics.core.models import (
    FixedPeriod,
    FlowRecord,
    Provider,
    Snapshot,
    Stream,
    StreamType,
    flatten_streams,
)

from tests.fixtures.synthetic_data import make_stream


@pytest.mark.unit
class TestStreamTypeParsing:
    """Test StreamType.parse."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, None),
            (StreamType.OUTCOME, StreamType.OUTCOME),
            ("Income", StreamType.INCOME),
            ("income", StreamType.INCOME),
            ("OUTCOME", StreamType.OUTCOME),
            ("expense", StreamType.OUTCOME),
            (0, StreamType.INCOME),
            (1, StreamType.OUTCOME),
        ],
        ids=["none", "enum", "value", "lowercase", "name", "expense_alias", "code_0", "code_1"],
    )
    def test_parse_recognized_values(self, value, expected):
        """Test every accepted spelling of a stream type."""
        assert StreamType.parse(value) == expected

    @pytest.mark.parametrize("value", ["transfer", 2, ""])
    def test_parse_rejects_unknown_values(self, value):
        """Test unknown stream types raise ValueError."""
        with pytest.raises(ValueError):
            StreamType.parse(value)


@pytest.mark.unit
class TestFixedPeriodParsing:
    """Test FixedPeriod.parse."""

    def test_parse_is_case_insensitive(self):
        assert FixedPeriod.parse("biweekly") == FixedPeriod.BIWEEKLY
        assert FixedPeriod.parse("Annually") == FixedPeriod.ANNUALLY

    def test_unknown_period_is_none(self):
        """Test unknown labels parse to None instead of raising."""
        assert FixedPeriod.parse("fortnightly-ish") is None
        assert FixedPeriod.parse(None) is None


@pytest.mark.unit
class TestStream:
    """Test Stream construction invariants."""

    def test_snapshots_are_sorted_by_date(self):
        """Test snapshots are stored oldest first regardless of input order."""
        stream = make_stream("s", [(date(2024, 3, 1), 3.0), (date(2024, 1, 1), 1.0), (date(2024, 2, 1), 2.0)])

        assert [s.date for s in stream.snapshots] == [date(2024, 1, 1), date(2024, 2, 1), date(2024, 3, 1)]
        assert stream.latest_snapshot.usd_amount == 3.0

    def test_duplicate_snapshot_dates_are_rejected(self):
        """Test at most one snapshot per stream per date."""
        with pytest.raises(ValueError, match="more than one snapshot"):
            make_stream("s", [(date(2024, 1, 1), 1.0), (date(2024, 1, 1), 2.0)])

    def test_stream_without_snapshots(self):
        stream = make_stream("empty", [])
        assert stream.latest_snapshot is None
        assert stream.snapshots_between() == []

    def test_snapshots_between_is_inclusive(self):
        """Test both window bounds are inclusive and open bounds are unbounded."""
        stream = make_stream("s", [(date(2024, 1, d), float(d)) for d in (1, 10, 20, 31)])

        assert [s.date.day for s in stream.snapshots_between(date(2024, 1, 10), date(2024, 1, 20))] == [10, 20]
        assert [s.date.day for s in stream.snapshots_between(start=date(2024, 1, 20))] == [20, 31]
        assert [s.date.day for s in stream.snapshots_between(end=date(2024, 1, 1))] == [1]

    def test_is_active_uses_sync_state(self):
        assert make_stream("a", [], sync_state="Active").is_active
        assert not make_stream("b", [], sync_state="Paused").is_active


@pytest.mark.unit
class TestSerialization:
    """Test to_dict/from_dict on the models."""

    def test_snapshot_from_dict_defaults(self):
        """Test optional snapshot fields default to an identity USD conversion."""
        snapshot = Snapshot.from_dict({"date": "2024-01-05", "usd_amount": "12.5"})

        assert snapshot.date == date(2024, 1, 5)
        assert snapshot.usd_amount == 12.5
        assert snapshot.original_amount == 12.5
        assert snapshot.original_currency == "USD"
        assert snapshot.exchange_rate == 1.0

    def test_stream_from_dict_parses_enums(self):
        stream = Stream.from_dict(
            {
                "id": "rent",
                "provider_id": "landlord",
                "name": "Rent",
                "category": "Housing",
                "stream_type": "Outcome",
                "is_fixed": True,
                "fixed_period": "Monthly",
                "snapshots": [{"date": "2024-01-01", "usd_amount": 1200}],
            }
        )

        assert stream.stream_type == StreamType.OUTCOME
        assert stream.fixed_period == FixedPeriod.MONTHLY
        assert stream.is_fixed
        assert stream.snapshots[0].usd_amount == 1200.0

    def test_stream_dict_keeps_snapshot_metadata(self, sample_snapshot):
        """Test a stream's dictionary form carries its snapshots' conversion metadata."""
        stream = Stream(id="s", provider_id="p", name="S", category="C", snapshots=(sample_snapshot,))
        data = stream.to_dict()

        assert data["stream_type"] == "Income"
        assert data["snapshots"][0]["original_currency"] == "EUR"
        assert data["snapshots"][0]["exchange_rate"] == 1.085
        assert Stream.from_dict(data) == stream

    def test_provider_from_dict_defaults_name_to_id(self):
        assert Provider.from_dict({"id": "p-1"}).name == "p-1"


@pytest.mark.unit
class TestFlowRecords:
    """Test flattening streams into flow records."""

    def test_signed_amount_negates_outcome(self, net_flow_streams):
        records = flatten_streams(net_flow_streams)
        signed = sorted(r.signed_amount for r in records)

        assert signed == [-40.0, -40.0, 100.0, 100.0, 100.0]

    def test_flatten_respects_date_bounds(self, net_flow_streams):
        records = flatten_streams(net_flow_streams, date(2024, 1, 10), date(2024, 1, 20))

        assert sorted(r.date.day for r in records) == [10, 15, 20]
        assert all(isinstance(r, FlowRecord) for r in records)

    def test_record_carries_owning_stream(self, net_flow_streams):
        records = flatten_streams(net_flow_streams)
        assert {r.stream.id for r in records} == {"salary", "rent"}
