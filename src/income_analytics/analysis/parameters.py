#!/usr/bin/env python3
"""
Report Parameter Types

Closed enumerations for every string-typed report parameter. Strings from
callers are parsed once at the engine boundary. Lenient parsing falls back
to the documented default and logs a warning; strict parsing raises
InvalidParameterError.
"""

import logging
from enum import Enum
from typing import TypeVar

from ..core.results import InvalidParameterError

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def _parse_choice(
    enum_cls: type[E],
    value: "str | E | None",
    aliases: dict[str, E],
    default: E,
    strict: bool,
) -> E:
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value

    normalized = str(value).strip().lower()
    for member in enum_cls:
        if normalized in (str(member.value).lower(), member.name.lower()):
            return member
    if normalized in aliases:
        return aliases[normalized]

    if strict:
        choices = ", ".join(str(m.value) for m in enum_cls)
        raise InvalidParameterError(f"Unknown {enum_cls.__name__} {value!r}; expected one of: {choices}")

    logger.warning(f"Unrecognized {enum_cls.__name__} {value!r}, falling back to {default.value}")
    return default


class ComparisonType(Enum):
    """Period-over-period comparison kinds."""

    MOM = "MoM"
    WOW = "WoW"
    QOQ = "QoQ"
    YOY = "YoY"

    @classmethod
    def parse(cls, value: "str | ComparisonType | None", strict: bool = False) -> "ComparisonType":
        """Parse a comparison type; defaults to MoM."""
        aliases = {
            "month-over-month": cls.MOM,
            "week-over-week": cls.WOW,
            "quarter-over-quarter": cls.QOQ,
            "year-over-year": cls.YOY,
        }
        return _parse_choice(cls, value, aliases, cls.MOM, strict)


class PeriodMode(Enum):
    """How comparison windows are aligned."""

    AUTO = "auto"
    EQUIVALENT = "equivalent"
    COMPLETE = "complete"

    @classmethod
    def parse(cls, value: "str | PeriodMode | None", strict: bool = False) -> "PeriodMode":
        """Parse a period mode; defaults to AUTO."""
        aliases = {"partial": cls.EQUIVALENT, "full": cls.COMPLETE}
        return _parse_choice(cls, value, aliases, cls.AUTO, strict)


class Granularity(Enum):
    """Time bucket sizes."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    @classmethod
    def parse(
        cls,
        value: "str | Granularity | None",
        strict: bool = False,
        default: "Granularity | None" = None,
    ) -> "Granularity":
        """Parse a granularity; defaults to MONTHLY unless another default is given."""
        aliases = {
            "day": cls.DAILY,
            "week": cls.WEEKLY,
            "month": cls.MONTHLY,
            "quarter": cls.QUARTERLY,
            "year": cls.YEARLY,
            "annual": cls.YEARLY,
            "annually": cls.YEARLY,
        }
        return _parse_choice(cls, value, aliases, default or cls.MONTHLY, strict)


class GroupBy(Enum):
    """Distribution grouping keys."""

    CATEGORY = "category"
    PROVIDER = "provider"
    STREAM = "stream"
    CURRENCY = "currency"

    @classmethod
    def parse(cls, value: "str | GroupBy | None", strict: bool = False) -> "GroupBy":
        """Parse a group-by key; defaults to CATEGORY."""
        return _parse_choice(cls, value, {}, cls.CATEGORY, strict)


class TrendDirection(Enum):
    """Direction of change between two values."""

    UPWARD = "Upward"
    DOWNWARD = "Downward"
    STABLE = "Stable"


class ChangeTrend(Enum):
    """Sign of an absolute period-over-period change."""

    UP = "Up"
    DOWN = "Down"
    FLAT = "Flat"


def require_positive(name: str, value: int) -> int:
    """
    Validate a count parameter.

    Raises:
        InvalidParameterError: If value is not a positive integer
    """
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise InvalidParameterError(f"{name} must be a positive integer, got {value!r}")
    return value
