"""
Portfolio-level overrun probability and the diagnostic variance KPIs.

``estimate_overrun_probability()``
  baseline = share of eligible projects (finite positive budget, finite
             actual cost) whose actual cost exceeds the plan.
  adjusted = clamp(baseline + bump, 0, 1) where bump is
             ``SCHEDULE_SLIP_BUMP`` when the mean schedule variance is
             positive, else ``SCHEDULE_ON_TIME_BUMP``.

The bump is a fixed heuristic, not a statistically derived adjustment.  The
constants are kept exactly as the dashboards have always shown them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from portfolio_analytics.analytics.aggregate import mean_finite
from portfolio_analytics.analytics.derived import cost_variance_ratio, schedule_slip_days
from portfolio_analytics.models.project import Project
from portfolio_analytics.utils.numeric import clamp, is_finite

SCHEDULE_SLIP_BUMP = 0.05
SCHEDULE_ON_TIME_BUMP = -0.02


@dataclass(frozen=True)
class OverrunProbability:
    baseline: float
    adjusted: float


def estimate_overrun_probability(projects: Iterable[Project]) -> OverrunProbability:
    """Estimate the probability that a portfolio project overruns its budget.

    Empty or fully ineligible input yields ``baseline = 0`` and
    ``adjusted = clamp(0 − 0.02) = 0``.
    """
    rows = list(projects)
    eligible = [
        p for p in rows
        if is_finite(p.planned_budget) and p.planned_budget > 0 and is_finite(p.actual_cost)
    ]
    over = sum(1 for p in eligible if p.actual_cost > p.planned_budget)
    baseline = over / len(eligible) if eligible else 0.0

    mean_slip = mean_finite(schedule_slip_days(p) for p in rows) or 0.0
    bump = SCHEDULE_SLIP_BUMP if mean_slip > 0 else SCHEDULE_ON_TIME_BUMP
    return OverrunProbability(baseline=baseline, adjusted=clamp(baseline + bump, 0.0, 1.0))


@dataclass(frozen=True)
class VarianceKpis:
    """Diagnostic KPI tiles.

    Attributes:
        overrun_rate:              Share of defined variance ratios > 0.
        average_cost_variance:     Mean cost variance ratio.
        average_schedule_variance: Mean schedule slip in days.

    Each is ``None`` when no project contributes a defined value.
    """

    overrun_rate:              Optional[float]
    average_cost_variance:     Optional[float]
    average_schedule_variance: Optional[float]


def variance_kpis(projects: Iterable[Project]) -> VarianceKpis:
    rows = list(projects)
    ratios = [r for p in rows if (r := cost_variance_ratio(p)) is not None]
    overrun_rate = sum(1 for r in ratios if r > 0) / len(ratios) if ratios else None
    return VarianceKpis(
        overrun_rate=overrun_rate,
        average_cost_variance=mean_finite(ratios),
        average_schedule_variance=mean_finite(schedule_slip_days(p) for p in rows),
    )
