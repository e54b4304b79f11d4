#!/usr/bin/env python3
"""Tests for the in-memory and JSON stream stores."""

import json
from datetime import date

import pytest

from income_analytics.core.datastore import InMemoryStreamStore, JsonStreamStore
from income_analytics.core.models import StreamType
from income_analytics.core.results import UpstreamFailure

from tests.fixtures.synthetic_data import make_stream, synthetic_providers, write_streams_file


@pytest.mark.unit
class TestInMemoryStreamStore:
    """Test filtering in InMemoryStreamStore."""

    def test_fetch_all(self, net_flow_store):
        assert {s.id for s in net_flow_store.fetch_streams()} == {"salary", "rent"}

    def test_filter_by_stream_type(self, net_flow_store):
        assert [s.id for s in net_flow_store.fetch_streams(StreamType.OUTCOME)] == ["rent"]

    def test_filter_by_provider(self):
        store = InMemoryStreamStore(
            [
                make_stream("a", [], provider_id="p1"),
                make_stream("b", [], provider_id="p2"),
            ]
        )
        assert [s.id for s in store.fetch_streams(provider_id="p2")] == ["b"]
        assert store.fetch_streams(provider_id="missing") == []

    def test_fetch_providers_returns_copy(self, net_flow_store):
        providers = net_flow_store.fetch_providers()
        providers.clear()
        assert len(net_flow_store.fetch_providers()) == 2


@pytest.mark.unit
class TestJsonStreamStore:
    """Test JsonStreamStore reads and writes."""

    def test_missing_file_is_upstream_failure(self, temp_dir):
        """Test a missing data file surfaces as UpstreamFailure."""
        store = JsonStreamStore(temp_dir / "missing.json")

        assert not store.exists()
        assert store.last_modified() is None
        with pytest.raises(UpstreamFailure, match="not found"):
            store.fetch_streams()

    def test_save_and_fetch(self, temp_dir, net_flow_streams, sample_providers):
        store = JsonStreamStore(temp_dir / "data" / "streams.json")
        store.save(net_flow_streams, sample_providers)

        assert store.exists()
        assert store.last_modified() is not None
        assert store.fetch_streams() == net_flow_streams
        assert store.fetch_providers() == sample_providers

    def test_filters_apply_after_loading(self, temp_dir, net_flow_streams):
        path = write_streams_file(temp_dir / "streams.json", net_flow_streams, synthetic_providers())
        store = JsonStreamStore(path)

        income = store.fetch_streams(stream_type=StreamType.INCOME)

        assert [s.id for s in income] == ["salary"]
        assert income[0].snapshots[0].date == date(2024, 1, 5)

    def test_bare_list_document(self, temp_dir):
        """Test a document that is just a list of streams."""
        path = temp_dir / "streams.json"
        path.write_text(json.dumps([{"id": "s", "snapshots": [{"date": "2024-01-01", "usd_amount": 5}]}]))

        store = JsonStreamStore(path)

        assert store.fetch_streams()[0].name == "s"
        assert store.fetch_providers() == []

    @pytest.mark.parametrize(
        "content",
        ["{not json", '"a string"', '{"streams": [{"name": "no id"}]}'],
        ids=["malformed", "wrong_shape", "missing_id"],
    )
    def test_invalid_documents_are_upstream_failures(self, temp_dir, content):
        path = temp_dir / "streams.json"
        path.write_text(content)

        with pytest.raises(UpstreamFailure):
            JsonStreamStore(path).fetch_streams()
