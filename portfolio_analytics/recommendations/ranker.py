"""
Recommendation ranker: turns a project cohort into sorted ``Recommendation``
records and the KPIs shown above the recommendation table.

Usage flow
----------
1. build_recommendations(projects, co_totals, rng)
   -> list[Recommendation]  (one per project, risk desc then savings desc)

2. top_n(recs, n=10)
   -> list[Recommendation]  (table rows)

3. action_mix(recs) / count_high_risk(recs) / total_savings(recs)
   -> chart + KPI values

Random draw order
-----------------
All spread-risk jitter is drawn first (one per project, input order), then
per project: the action tie-break (when a rule needs one), the impact
sample, the effort sample.  Keeping this order fixed makes a seeded run
reproducible across versions.
"""

from __future__ import annotations

import math
import random
from typing import Iterable, Mapping, Optional

from portfolio_analytics.analytics.derived import cost_overrun, late_days, safe_budget
from portfolio_analytics.models.project import Project
from portfolio_analytics.models.recommendation import Recommendation
from portfolio_analytics.recommendations.actions import (
    choose_action,
    estimate_savings,
    sample_range,
)
from portfolio_analytics.recommendations.risk import spread_risk_scores
from portfolio_analytics.taxonomy.action_taxonomy import (
    ACTION_ORDER,
    ACTION_PROFILES,
    ActionCategory,
)
from portfolio_analytics.utils.numeric import is_finite, round_half_up


def build_recommendations(
    projects:  Iterable[Project],
    co_totals: Mapping[str, float],
    rng:       Optional[random.Random] = None,
    jitter:    float = 2.0,
) -> list[Recommendation]:
    """Build one recommendation per project.

    Args:
        projects:  Project cohort (the spread risk is normalised over it).
        co_totals: Change-order totals keyed by project id.
        rng:       Random source; a fresh unseeded generator when ``None``.
        jitter:    Spread-risk jitter half-width.

    Returns:
        Recommendations sorted by risk descending, then savings descending.
    """
    rows = list(projects)
    rng = rng or random.Random()
    risk_by_id = spread_risk_scores(rows, co_totals, rng=rng, jitter=jitter)

    recs: list[Recommendation] = []
    for p in rows:
        plan = safe_budget(p)
        slip = late_days(p)
        overrun = cost_overrun(p)
        raw_co = co_totals.get(p.project_id, 0.0)
        co_total = max(0.0, raw_co) if is_finite(raw_co) else 0.0

        category = choose_action(plan, co_total, slip, overrun, rng)
        profile = ACTION_PROFILES[category]
        impact = sample_range(profile.impact, rng)
        effort = sample_range(profile.effort, rng)

        recs.append(
            Recommendation(
                project_id=p.project_id,
                project_name=p.project_name,
                category=category,
                impact=impact,
                effort=effort,
                savings=estimate_savings(category, plan, overrun, co_total, slip),
                risk=round_half_up(risk_by_id.get(p.project_id, 0.0)),
                overrun=overrun,
                co_total=co_total,
                plan=p.planned_budget,
            )
        )

    return sorted(recs, key=lambda r: (-r.risk, -r.savings))


def top_n(recs: list[Recommendation], n: int = 10) -> list[Recommendation]:
    """First ``n`` recommendations (already ranked)."""
    return recs[: max(0, n)]


def action_mix(recs: Iterable[Recommendation]) -> dict[ActionCategory, int]:
    """Recommendation count per category, in the fixed ``ACTION_ORDER``."""
    counts = {cat: 0 for cat in ACTION_ORDER}
    for r in recs:
        counts[r.category] += 1
    return counts


def count_high_risk(recs: Iterable[Recommendation], threshold: int = 80) -> int:
    return sum(1 for r in recs if r.risk >= threshold)


def total_savings(recs: Iterable[Recommendation]) -> float:
    return sum((r.savings for r in recs), 0.0)


def bubble_radius(savings: float) -> float:
    """Priority-matrix bubble radius: grows with √savings, minimum 3."""
    return max(3.0, math.sqrt(max(0.0, savings)) / 250.0)
