"""
Income Analytics - Trend, Forecast and Simulation Engine

Turns per-stream financial snapshots (income sources and expense sinks)
into trend reports, period comparisons, forecasts and Monte Carlo
projections.

Domain Packages:
- core: Stream models, calendar helpers, configuration, data stores
- analysis: Period alignment, statistics, forecasting, simulation, reports
- cli: Command-line interface

Example Usage:
    from income_analytics import AnalyticsEngine, JsonStreamStore

    engine = AnalyticsEngine(JsonStreamStore(Path("streams.json")))
    result = engine.daily_rate(days_back=30)
    if result.success:
        print(result.value.average_daily_usd)
"""

__version__ = "0.1.0"
__author__ = "Income Analytics Developers"

from .analysis import AnalyticsEngine, ComparisonType, Granularity, GroupBy
from .core.config import Environment, get_config
from .core.datastore import InMemoryStreamStore, JsonStreamStore
from .core.models import FixedPeriod, Provider, Snapshot, Stream, StreamType
from .core.results import ReportResult

__all__ = [
    # Engine
    "AnalyticsEngine",
    "ReportResult",
    # Parameters
    "ComparisonType",
    "Granularity",
    "GroupBy",
    # Models
    "FixedPeriod",
    "Provider",
    "Snapshot",
    "Stream",
    "StreamType",
    # Stores
    "InMemoryStreamStore",
    "JsonStreamStore",
    # Configuration
    "Environment",
    "get_config",
]
