#!/usr/bin/env python3
"""
Report Results and Error Taxonomy

Every engine operation returns a ReportResult: either a success payload or a
structured failure. Only infrastructure-level problems (upstream data store,
invalid caller parameters, cancellation) produce failures; sparse or empty
business data always yields a well-formed zero/empty payload.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ErrorKind(Enum):
    """Categories of structured failure."""

    UPSTREAM = "upstream_failure"
    INVALID_PARAMETER = "invalid_parameter"
    CANCELLED = "cancelled"


class AnalyticsError(Exception):
    """Base class for engine errors."""

    kind: ErrorKind = ErrorKind.UPSTREAM


class UpstreamFailure(AnalyticsError):
    """The stream data collaborator failed to produce data."""

    kind = ErrorKind.UPSTREAM


class InvalidParameterError(AnalyticsError, ValueError):
    """A caller supplied a parameter outside its valid domain."""

    kind = ErrorKind.INVALID_PARAMETER


class OperationCancelled(AnalyticsError):
    """A cancellation token was signalled while work was in progress."""

    kind = ErrorKind.CANCELLED


@dataclass
class ReportResult(Generic[T]):
    """
    Outcome of a single analytics query.

    Attributes:
        success: True when value holds the report payload
        value: Report payload on success
        error_kind: Failure category on failure
        error_message: Failure message, carried verbatim from the cause
    """

    success: bool
    value: T | None = None
    error_kind: ErrorKind | None = None
    error_message: str | None = None
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def ok(cls, value: T) -> "ReportResult[T]":
        """Wrap a successful payload."""
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: AnalyticsError) -> "ReportResult[T]":
        """Wrap an engine error as a structured failure."""
        return cls(success=False, error_kind=error.kind, error_message=str(error))

    @property
    def is_failed(self) -> bool:
        """Inverse of success."""
        return not self.success

    def unwrap(self) -> T:
        """
        Return the payload or raise the failure.

        Raises:
            RuntimeError: If the result is a failure
        """
        if not self.success or self.value is None:
            raise RuntimeError(f"{self.error_kind.value if self.error_kind else 'error'}: {self.error_message}")
        return self.value

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        if self.success:
            payload = self.value.to_dict() if hasattr(self.value, "to_dict") else self.value
            return {"success": True, "value": payload}
        return {
            "success": False,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "error_message": self.error_message,
        }
