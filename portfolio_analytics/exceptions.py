"""
Error taxonomy for Portfolio Analytics.

Only one failure is ever raised out of the library: ``DataFetchError``, when
an input file cannot be loaded.  Field-level parse problems never raise;
the offending value becomes ``None`` and is excluded from aggregates.  A
degenerate trend input produces a flat projection instead of an error.
"""

from __future__ import annotations

from pathlib import Path


class PortfolioAnalyticsError(Exception):
    """Base class for all errors raised by this package."""


class DataFetchError(PortfolioAnalyticsError):
    """An input CSV could not be read.

    Terminal for the view that needed it: the caller logs the error and
    renders nothing.  There is no retry.

    Attributes:
        path:   File that failed to load.
        reason: Short human-readable cause.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load {path}: {reason}")
