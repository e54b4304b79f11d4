"""
Pytest Configuration and Shared Fixtures

Provides common test fixtures and configuration for the entire test suite.
"""

import tempfile
from datetime import date
from pathlib import Path

import pytest

from income_analytics.core import config as config_module
from income_analytics.core.datastore import InMemoryStreamStore
from income_analytics.core.models import Provider, Snapshot, Stream, StreamType

from tests.fixtures.synthetic_data import make_stream


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_path:
        yield Path(temp_path)


@pytest.fixture
def net_flow_streams() -> list[Stream]:
    """Three $100 income snapshots and two $40 outcome snapshots in January 2024."""
    salary = make_stream(
        "salary",
        [(date(2024, 1, 5), 100.0), (date(2024, 1, 15), 100.0), (date(2024, 1, 25), 100.0)],
        category="Salary",
    )
    rent = make_stream(
        "rent",
        [(date(2024, 1, 10), 40.0), (date(2024, 1, 20), 40.0)],
        category="Housing",
        stream_type=StreamType.OUTCOME,
    )
    return [salary, rent]


@pytest.fixture
def sample_providers() -> list[Provider]:
    """Providers referenced by the synthetic streams."""
    return [
        Provider(id="provider-employer", name="Test Employer", type="Employer"),
        Provider(id="provider-exchange", name="Test Exchange", type="Exchange"),
    ]


@pytest.fixture
def sample_snapshot() -> Snapshot:
    """Sample EUR snapshot converted to USD."""
    return Snapshot(
        date=date(2024, 3, 15),
        usd_amount=108.5,
        original_amount=100.0,
        original_currency="EUR",
        exchange_rate=1.085,
        rate_source="test-rates",
        id="snapshot-001",
    )


@pytest.fixture
def net_flow_store(net_flow_streams, sample_providers) -> InMemoryStreamStore:
    """In-memory repository over the January 2024 net-flow streams."""
    return InMemoryStreamStore(net_flow_streams, sample_providers)


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, tmp_path):
    """Set up test environment variables."""
    # Ensure tests don't use real data
    monkeypatch.setenv("ANALYTICS_ENV", "test")
    monkeypatch.setenv("ANALYTICS_DATA_DIR", str(tmp_path / "analytics_data"))
    monkeypatch.delenv("ANALYTICS_STREAMS_FILE", raising=False)
    monkeypatch.delenv("MONTE_CARLO_SEED", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    # Configuration is a module-level singleton; rebuild it per test
    monkeypatch.setattr(config_module, "_config", None)


# Test markers for categorizing tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for complete workflows")
    config.addinivalue_line("markers", "statistics: Tests for statistical primitives and models")
    config.addinivalue_line("markers", "slow: Tests that take significant time to run")
