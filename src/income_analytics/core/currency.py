#!/usr/bin/env python3
"""
Currency Rounding and Formatting Utilities

Internal computation keeps full float precision. Rounding happens only when
a report payload is built: currency to 2 decimals, percentages to 1 or 2.

All amounts handled here are already USD-normalized upstream; no currency
conversion happens in the engine.
"""

import math


def round_usd(amount: float) -> float:
    """
    Round a USD amount to cents for output.

    Non-finite values collapse to 0.0 so payloads never carry NaN.

    Example:
        round_usd(7.3333) -> 7.33
    """
    if not math.isfinite(amount):
        return 0.0
    return round(amount, 2) + 0.0


def round_pct(value: float, digits: int = 2) -> float:
    """Round a percentage for output; non-finite values become 0.0."""
    if not math.isfinite(value):
        return 0.0
    return round(value, digits) + 0.0


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning default when the denominator is zero."""
    if denominator == 0:
        return default
    return numerator / denominator


def format_usd(amount: float) -> str:
    """
    Format a USD amount for display.

    Example:
        format_usd(-1234.5) -> "-$1,234.50"
    """
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(round_usd(amount)):,.2f}"


def format_thousands(amount: float) -> str:
    """
    Compact thousands label used by histogram buckets.

    Example:
        format_thousands(12500) -> "$12k"
    """
    return f"${amount / 1000:.0f}k"
