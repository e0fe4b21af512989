"""
Least-squares trend fitting over a handful of yearly points.

Model
-----
Ordinary least squares on raw (year, value) pairs; years are NOT centred::

    slope     = (n·Σxy − Σx·Σy) / max(1, n·Σx² − (Σx)²)
    intercept = (Σy − slope·Σx) / n

Degenerate input
----------------
- 0 points  → intercept 0, slope 0.
- 1 point   → intercept = that value, slope 0 (a flat projection).
- identical x values → the ``max(1, …)`` guard replaces a zero denominator
  with 1.  The numerator is then also 0, so the slope collapses to 0.  This
  is an intentional approximation, not a true zero-variance fit.

There is no confidence interval: projections are point forecasts only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class TrendFit:
    """Fitted line ``value = intercept + slope · period``."""

    intercept: float
    slope:     float

    def value_at(self, period: float) -> float:
        return self.intercept + self.slope * period


def fit_trend(series: Mapping[int, float]) -> TrendFit:
    """Fit a straight line to a period → value mapping.

    Args:
        series: Mapping of period (e.g. year) to observed value.

    Returns:
        ``TrendFit`` with intercept and slope.
    """
    xs = sorted(series)
    ys = [float(series[x]) for x in xs]
    n = len(xs)
    if n < 2:
        return TrendFit(intercept=ys[0] if ys else 0.0, slope=0.0)

    sx  = float(sum(xs))
    sy  = sum(ys)
    sxx = float(sum(x * x for x in xs))
    sxy = sum(x * y for x, y in zip(xs, ys))

    slope = (n * sxy - sx * sy) / max(1.0, n * sxx - sx * sx)
    intercept = (sy - slope * sx) / n
    return TrendFit(intercept=intercept, slope=slope)


def project_trend(
    intercept:   float,
    slope:       float,
    last_period: int,
    horizon:     int,
) -> list[tuple[int, float]]:
    """Extrapolate a fitted line ``horizon`` periods past ``last_period``.

    Returns:
        ``[(last+1, v1), …, (last+horizon, vN)]``; empty when horizon <= 0.
    """
    return [
        (period, intercept + slope * period)
        for period in range(last_period + 1, last_period + horizon + 1)
    ]


def pipeline_forecast(
    counts_by_year: Mapping[int, int],
    cost_fit:       TrendFit,
    last_period:    int,
    years:          int = 3,
) -> list[tuple[int, float]]:
    """Naive pipeline cost projection.

    Each future year's pipeline = mean projects-per-year × trend average
    cost for that year, floored at zero.

    Args:
        counts_by_year: Historical project counts per start year.
        cost_fit:       Trend fitted to average actual cost by year.
        last_period:    Last observed year.
        years:          Number of future years.

    Returns:
        ``[(year, projected_cost), …]``.
    """
    avg_count = (
        sum(counts_by_year.values()) / len(counts_by_year) if counts_by_year else 0.0
    )
    return [
        (year, max(0.0, avg_count * value))
        for year, value in project_trend(
            cost_fit.intercept, cost_fit.slope, last_period, years
        )
    ]
