#!/usr/bin/env python3
"""
Core Data Models for Income Analytics

Read-only projections of income/expense streams and their dated snapshots.
The analytics engine never mutates these; they are produced by the upstream
data store for each query.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class StreamType(Enum):
    """Flow direction of a stream."""

    INCOME = "Income"
    OUTCOME = "Outcome"

    @classmethod
    def parse(cls, value: "str | int | StreamType | None") -> "StreamType | None":
        """
        Parse a stream-type filter.

        Accepts the enum itself, its name or value (case-insensitive), or the
        legacy integer codes 0=Income, 1=Outcome. None means no filter.

        Raises:
            ValueError: If the value is not a recognized stream type
        """
        if value is None or isinstance(value, StreamType):
            return value
        if isinstance(value, int):
            if value == 0:
                return cls.INCOME
            if value == 1:
                return cls.OUTCOME
            raise ValueError(f"Unknown stream type code: {value}")

        normalized = str(value).strip().lower()
        for member in cls:
            if normalized in (member.value.lower(), member.name.lower()):
                return member
        if normalized in ("expense", "expenses"):
            return cls.OUTCOME
        raise ValueError(f"Unknown stream type: {value!r}")


class FixedPeriod(Enum):
    """Recurrence schedule of a fixed stream."""

    DAILY = "Daily"
    WEEKLY = "Weekly"
    BIWEEKLY = "BiWeekly"
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    ANNUALLY = "Annually"

    @classmethod
    def parse(cls, value: "str | FixedPeriod | None") -> "FixedPeriod | None":
        """Parse a fixed-period label, returning None for unknown labels."""
        if value is None or isinstance(value, FixedPeriod):
            return value
        normalized = str(value).strip().lower()
        for member in cls:
            if normalized == member.value.lower():
                return member
        logger.warning(f"Unknown fixed period {value!r}, treating as monthly-equivalent")
        return None


@dataclass(frozen=True)
class Snapshot:
    """One dated, USD-normalized observation of a stream's amount."""

    date: date
    usd_amount: float
    original_amount: float | None = None
    original_currency: str = "USD"
    exchange_rate: float = 1.0
    rate_source: str = "identity"
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "usd_amount": self.usd_amount,
            "original_amount": self.original_amount,
            "original_currency": self.original_currency,
            "exchange_rate": self.exchange_rate,
            "rate_source": self.rate_source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Snapshot":
        """Create Snapshot from dictionary."""
        usd_amount = float(data["usd_amount"])
        original_amount = data.get("original_amount")
        return cls(
            id=data.get("id"),
            date=date.fromisoformat(data["date"]),
            usd_amount=usd_amount,
            original_amount=float(original_amount) if original_amount is not None else usd_amount,
            original_currency=data.get("original_currency", "USD"),
            exchange_rate=float(data.get("exchange_rate", 1.0)),
            rate_source=data.get("rate_source", "identity"),
        )


@dataclass(frozen=True)
class Stream:
    """
    A named income or expense source with its snapshot history.

    Snapshots are kept in date order. At most one snapshot may exist per date;
    violating that is rejected at construction time because every aggregation
    in the engine relies on it.
    """

    id: str
    provider_id: str
    name: str
    category: str
    stream_type: StreamType = StreamType.INCOME
    is_fixed: bool = False
    fixed_period: FixedPeriod | None = None
    snapshots: tuple[Snapshot, ...] = field(default_factory=tuple)

    # Metadata
    original_currency: str = "USD"
    sync_state: str = "Active"
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.snapshots, key=lambda s: s.date))
        seen: set[date] = set()
        for snapshot in ordered:
            if snapshot.date in seen:
                raise ValueError(f"Stream {self.id} has more than one snapshot for {snapshot.date.isoformat()}")
            seen.add(snapshot.date)
        object.__setattr__(self, "snapshots", ordered)

    @property
    def is_active(self) -> bool:
        """Whether upstream sync considers the stream active."""
        return self.sync_state.lower() == "active"

    @property
    def latest_snapshot(self) -> Snapshot | None:
        """Most recent snapshot, or None for a stream with no history."""
        return self.snapshots[-1] if self.snapshots else None

    def snapshots_between(self, start: date | None = None, end: date | None = None) -> list[Snapshot]:
        """Snapshots with start <= date <= end; open bounds are unbounded."""
        return [
            s
            for s in self.snapshots
            if (start is None or s.date >= start) and (end is None or s.date <= end)
        ]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "provider_id": self.provider_id,
            "name": self.name,
            "category": self.category,
            "stream_type": self.stream_type.value,
            "is_fixed": self.is_fixed,
            "fixed_period": self.fixed_period.value if self.fixed_period else None,
            "original_currency": self.original_currency,
            "sync_state": self.sync_state,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "snapshots": [s.to_dict() for s in self.snapshots],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Stream":
        """Create Stream from dictionary."""
        created_at = data.get("created_at")
        return cls(
            id=data["id"],
            provider_id=data.get("provider_id", ""),
            name=data.get("name", data["id"]),
            category=data.get("category", "Uncategorized"),
            stream_type=StreamType.parse(data.get("stream_type", "Income")) or StreamType.INCOME,
            is_fixed=bool(data.get("is_fixed", False)),
            fixed_period=FixedPeriod.parse(data.get("fixed_period")),
            snapshots=tuple(Snapshot.from_dict(s) for s in data.get("snapshots", [])),
            original_currency=data.get("original_currency", "USD"),
            sync_state=data.get("sync_state", "Active"),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )


@dataclass(frozen=True)
class Provider:
    """A data provider (exchange, bank, employer) that owns streams."""

    id: str
    name: str
    type: str = "Manual"
    default_currency: str = "USD"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "default_currency": self.default_currency,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Provider":
        """Create Provider from dictionary."""
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            type=data.get("type", "Manual"),
            default_currency=data.get("default_currency", "USD"),
        )


@dataclass(frozen=True)
class FlowRecord:
    """
    Flattened (date, amount, direction) view of a snapshot.

    Carries the owning stream so cross-sectional aggregators can key on
    stream attributes without reaching back into the stream list.
    """

    date: date
    usd_amount: float
    stream_type: StreamType
    stream: Stream
    snapshot: Snapshot

    @property
    def signed_amount(self) -> float:
        """Amount with outflows negated, for net-flow sums."""
        return self.usd_amount if self.stream_type == StreamType.INCOME else -self.usd_amount


def flatten_streams(
    streams: list[Stream],
    start: date | None = None,
    end: date | None = None,
) -> list[FlowRecord]:
    """
    Flatten streams into flow records, optionally bounded by date.

    Args:
        streams: Streams to flatten
        start: Inclusive lower bound on snapshot date
        end: Inclusive upper bound on snapshot date

    Returns:
        Flow records in stream order, then date order
    """
    return [
        FlowRecord(
            date=snapshot.date,
            usd_amount=snapshot.usd_amount,
            stream_type=stream.stream_type,
            stream=stream,
            snapshot=snapshot,
        )
        for stream in streams
        for snapshot in stream.snapshots_between(start, end)
    ]
