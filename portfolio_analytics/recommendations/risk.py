"""
Heuristic project risk scores.

Two formulas exist for the same concept and are kept as separate functions:
they produce different distributions and feed different views.

Rule score (predictive view)
----------------------------
Deterministic, absolute::

    score = clamp(round(20·log10(max(1, budget))
                        + 0.05·late_days
                        + 0.000005·co_total), 0, 100)

The size term alone reaches 100 at a $100K budget (log10 = 5), so most real
projects saturate at 100.  That is the known behaviour of this score; it is
a rule-of-thumb flag, not a calibrated probability.

Spread score (prescriptive view)
--------------------------------
Relative to the cohort.  Per project::

    raw = 18·(log10(max(1, budget)) − 4.5)     # size, centred near 0
        + 15·(late_days / 60)                  # 60 days late ≈ 1.0
        + 22·log10(1 + co_total / max(1, budget))
        + 18·log10(1 + overrun  / max(1, budget))

then min–max normalised across the cohort to 0–100 (a zero span divides by
1), perturbed by uniform jitter in ``[−jitter, +jitter]`` and clamped to
[0, 100].  The jitter comes from an injected ``random.Random`` so tests and
seeded runs are reproducible; ``jitter=0`` disables it entirely.

Guards
------
Budget and change-order totals are floored at 0; 1 is the minimum log
argument and divisor, so ``log10(0)`` and division by zero cannot occur.
"""

from __future__ import annotations

import math
import random
from typing import Iterable, Mapping, Optional

from portfolio_analytics.analytics.derived import cost_overrun, late_days, safe_budget
from portfolio_analytics.models.project import Project
from portfolio_analytics.utils.numeric import clamp, is_finite, round_half_up

RISK_BIN_LABELS: tuple[str, ...] = ("0–20", "21–40", "41–60", "61–80", "81–100")
_RISK_BIN_UPPER: tuple[int, ...] = (20, 40, 60, 80)


def _co_total_for(project: Project, co_totals: Mapping[str, float]) -> float:
    total = co_totals.get(project.project_id, 0.0)
    return max(0.0, total) if is_finite(total) else 0.0


# ── Rule score ────────────────────────────────────────────────────────────────


def rule_risk_score(project: Project, co_total: float = 0.0) -> int:
    """Deterministic 0–100 risk score for one project.

    Args:
        project:  Project row.
        co_total: Summed change-order cost for the project.

    Returns:
        Integer score in [0, 100].
    """
    size = math.log10(safe_budget(project))
    co = max(0.0, co_total) if is_finite(co_total) else 0.0
    score = 20.0 * size + 0.05 * late_days(project) + 0.000005 * co
    return int(clamp(round_half_up(score), 0, 100))


def rule_risk_scores(
    projects:  Iterable[Project],
    co_totals: Mapping[str, float],
) -> list[int]:
    """Rule scores for every project, in input order."""
    return [rule_risk_score(p, _co_total_for(p, co_totals)) for p in projects]


# ── Spread score ──────────────────────────────────────────────────────────────


def spread_raw_score(project: Project, co_total: float) -> float:
    """Unbounded composite behind the spread score."""
    plan = safe_budget(project)
    size_term = math.log10(plan) - 4.5
    slip_term = late_days(project) / 60.0
    co_term   = math.log10(1.0 + max(0.0, co_total) / plan)
    over_term = math.log10(1.0 + cost_overrun(project) / plan)
    return 18.0 * size_term + 15.0 * slip_term + 22.0 * co_term + 18.0 * over_term


def spread_risk_scores(
    projects:  Iterable[Project],
    co_totals: Mapping[str, float],
    rng:       Optional[random.Random] = None,
    jitter:    float = 2.0,
) -> dict[str, float]:
    """Cohort-normalised 0–100 risk scores keyed by project id.

    Args:
        projects:  Cohort to score.
        co_totals: Change-order totals keyed by project id.
        rng:       Random source for jitter; a fresh unseeded generator when
                   ``None``.
        jitter:    Jitter half-width in score points; 0 disables it.

    Returns:
        ``{project_id: score}`` with scores in [0, 100].  Empty for an empty
        cohort.
    """
    rows = list(projects)
    if not rows:
        return {}
    rng = rng or random.Random()

    raws = [(p.project_id, spread_raw_score(p, _co_total_for(p, co_totals))) for p in rows]
    lo = min(r for _, r in raws)
    hi = max(r for _, r in raws)
    span = (hi - lo) or 1.0

    scores: dict[str, float] = {}
    for project_id, raw in raws:
        noise = rng.uniform(-jitter, jitter) if jitter > 0 else 0.0
        scores[project_id] = clamp((raw - lo) / span * 100.0 + noise, 0.0, 100.0)
    return scores


# ── Distribution helpers ──────────────────────────────────────────────────────


def risk_histogram(scores: Iterable[float]) -> list[int]:
    """Count scores into the ``RISK_BIN_LABELS`` bins (upper edges inclusive)."""
    hist = [0] * len(RISK_BIN_LABELS)
    for s in scores:
        for i, upper in enumerate(_RISK_BIN_UPPER):
            if s <= upper:
                hist[i] += 1
                break
        else:
            hist[-1] += 1
    return hist


def count_at_risk(scores: Iterable[float], threshold: float = 70) -> int:
    """Number of scores at or above ``threshold``."""
    return sum(1 for s in scores if s >= threshold)
