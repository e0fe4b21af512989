"""
Numeric guards used everywhere a CSV-sourced float meets arithmetic.

A value is *usable* only if it is not ``None`` and is finite; everything
else is excluded from sums, counts and ratios instead of being treated as 0.
"""

from __future__ import annotations

import math
from typing import Optional


def is_finite(value: Optional[float]) -> bool:
    """True when ``value`` is a real, finite number."""
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def parse_float(value: object) -> Optional[float]:
    """Parse a CSV cell into a finite float, or ``None``.

    Thousands separators and a leading ``$`` are tolerated.  ``"nan"``,
    ``"inf"`` and anything non-numeric return ``None``.
    """
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if math.isfinite(value) else None
    text = str(value).strip().replace(",", "").lstrip("$")
    if not text:
        return None
    try:
        parsed = float(text)
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return math.floor(value + 0.5)
