"""
Date utilities shared by the loader and the derived-metric helpers.

Key concepts:
  - Generic date parsing: CSV exports carry ISO dates, ISO datetimes and the
    occasional US-style ``MM/DD/YYYY``; all of them parse to ``date``.
  - Unparsable input returns ``None`` rather than raising, so a bad cell
    excludes the row from date-keyed aggregates without dropping the row.
  - Period keys: calendar year and zero-based month index, matching the
    year/month chart axes.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

MONTH_LABELS: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_FALLBACK_FORMATS: tuple[str, ...] = ("%m/%d/%Y", "%Y/%m/%d", "%d-%b-%Y")


def parse_date(value: object) -> Optional[date]:
    """Parse a loosely formatted date value.

    Accepts ``date`` / ``datetime`` instances, ISO ``YYYY-MM-DD`` strings,
    ISO 8601 datetimes (trailing ``Z`` allowed) and a few common fallback
    formats.

    Args:
        value: Raw cell value.

    Returns:
        Parsed ``date``, or ``None`` if the value is empty or unparsable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def days_between(start: Optional[date], end: Optional[date]) -> Optional[float]:
    """Return ``end - start`` in days, or ``None`` if either side is missing."""
    if start is None or end is None:
        return None
    return float((end - start).days)


def year_of(d: Optional[date]) -> Optional[int]:
    """Calendar year of ``d``, or ``None``."""
    return d.year if d is not None else None


def month_index_of(d: Optional[date]) -> Optional[int]:
    """Zero-based month index (0 = January) of ``d``, or ``None``."""
    return d.month - 1 if d is not None else None
