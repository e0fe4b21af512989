"""
Per-project derived metrics.

None of these are stored; every view recomputes them from the snapshot.

Undefined vs zero
-----------------
``schedule_slip_days``, ``cost_variance_ratio`` and ``duration_days`` return
``None`` when their inputs are missing.  Callers computing means must drop
``None`` rather than coerce it: an in-flight project has no slip, not zero
slip.  ``cost_overrun`` is the exception: it is a floor-at-zero quantity and
returns 0.0 when either side is unusable, matching how the overrun feeds the
risk and savings formulas.
"""

from __future__ import annotations

from typing import Optional

from portfolio_analytics.models.project import Project
from portfolio_analytics.utils.numeric import is_finite
from portfolio_analytics.utils.time_utils import days_between


def schedule_slip_days(project: Project) -> Optional[float]:
    """``actual_end − planned_end`` in days; positive means late.

    Returns ``None`` for in-flight projects or unparsable dates.
    """
    return days_between(project.planned_end, project.actual_end)


def cost_overrun(project: Project) -> float:
    """``max(actual_cost − planned_budget, 0)``; 0.0 when either is unusable."""
    if not is_finite(project.planned_budget) or not is_finite(project.actual_cost):
        return 0.0
    return max(project.actual_cost - project.planned_budget, 0.0)


def cost_variance_ratio(project: Project) -> Optional[float]:
    """Signed ``(actual − planned) / planned``.

    Returns ``None`` when the budget is missing, non-finite or <= 0, or when
    the actual cost is unusable.
    """
    planned = project.planned_budget
    actual = project.actual_cost
    if not is_finite(planned) or planned <= 0 or not is_finite(actual):
        return None
    return (actual - planned) / planned


def duration_days(project: Project) -> Optional[float]:
    """Start-to-finish duration, preferring ``actual_end`` over ``planned_end``."""
    end = project.actual_end or project.planned_end
    return days_between(project.start_date, end)


def late_days(project: Project) -> float:
    """Schedule slip floored at zero; 0.0 when undefined.

    Used by the risk and action formulas, which only penalise lateness.
    """
    slip = schedule_slip_days(project)
    return max(0.0, slip) if slip is not None else 0.0


def safe_budget(project: Project) -> float:
    """Planned budget usable as a divisor or log argument: at least 1."""
    budget = project.planned_budget
    return max(1.0, budget) if is_finite(budget) else 1.0
