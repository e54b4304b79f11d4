"""
Core Utilities Package

Shared domain models and infrastructure used by every analytics component.

This package provides:
- Stream/snapshot/provider models and the flattened flow-record view
- Calendar arithmetic (week, month, quarter, year boundaries)
- Output rounding and currency formatting
- Configuration management and model constants
- The upstream data-store contract and result/error taxonomy
"""

from .cancellation import CancellationToken
from .config import (
    Config,
    Environment,
    ModelParameters,
    get_config,
    get_model_parameters,
    reload_config,
)
from .currency import format_usd, round_pct, round_usd, safe_divide
from .datastore import InMemoryStreamStore, JsonStreamStore, StreamRepository
from .models import FixedPeriod, FlowRecord, Provider, Snapshot, Stream, StreamType, flatten_streams
from .results import (
    AnalyticsError,
    ErrorKind,
    InvalidParameterError,
    OperationCancelled,
    ReportResult,
    UpstreamFailure,
)

__all__ = [
    "AnalyticsError",
    "CancellationToken",
    # Configuration
    "Config",
    "Environment",
    "ErrorKind",
    "FixedPeriod",
    "FlowRecord",
    "InMemoryStreamStore",
    "InvalidParameterError",
    "JsonStreamStore",
    "ModelParameters",
    "OperationCancelled",
    "Provider",
    "ReportResult",
    "Snapshot",
    # Data models
    "Stream",
    "StreamRepository",
    "StreamType",
    "UpstreamFailure",
    "flatten_streams",
    # Currency utilities
    "format_usd",
    "get_config",
    "get_model_parameters",
    "reload_config",
    "round_pct",
    "round_usd",
    "safe_divide",
]
