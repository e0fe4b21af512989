"""
Action selection: maps a project's derived ratios to one of four actions
and estimates impact, effort and savings.

Drivers
-------
    plan         = max(1, planned_budget)
    co_share     = co_total / max(1, overrun + co_total)   # share of "pain" from COs
    overrun_pct  = overrun / plan

Action determination (priority order — first match wins)
--------------------------------------------------------
    1. co_share >= 0.55 AND overrun_pct >= 0.03
           → Scope alignment (60%) or Design clarification (40%)
    2. slip >= 45 days AND overrun_pct < 0.05
           → Schedule tune-up
    3. plan >= 5,000,000 AND (overrun_pct >= 0.02 OR co_share >= 0.35)
           → Supplier/subcontractor review
    4. otherwise
           → Design clarification (50%) or Schedule tune-up (50%)

The randomised tie-breaks exist to diversify the action mix across a
portfolio; every random draw goes through the injected ``random.Random``.

Savings
-------
    savings = max(0, min(SAVINGS_CAP_PCT · plan, pct(category) · (overrun + co_total)))

    pct: Scope alignment        0.10 + min(0.06, co_total / plan)
         Design clarification   0.07
         Supplier review        0.05
         Schedule tune-up       0.03 + min(0.02, slip / 180)

The 7%-of-plan cap is a fixed constant with no derivation behind it.
"""

from __future__ import annotations

import random

from portfolio_analytics.taxonomy.action_taxonomy import ActionCategory
from portfolio_analytics.utils.numeric import clamp

SAVINGS_CAP_PCT = 0.07
SAMPLE_JITTER = 0.02
LARGE_PROJECT_BUDGET = 5_000_000

_FALLBACK_SAVINGS_PCT = 0.04


def choose_action(
    plan:     float,
    co_total: float,
    slip:     float,
    overrun:  float,
    rng:      random.Random,
) -> ActionCategory:
    """Choose the recommended action for one project.

    Args:
        plan:     Planned budget, already floored at 1.
        co_total: Change-order total (>= 0).
        slip:     Days late (>= 0).
        overrun:  Cost overrun (>= 0).
        rng:      Random source for the tie-breaks.

    Returns:
        The chosen ``ActionCategory``.
    """
    co_share = co_total / max(1.0, overrun + co_total)
    overrun_pct = overrun / plan

    if co_share >= 0.55 and overrun_pct >= 0.03:
        return (
            ActionCategory.SCOPE_ALIGNMENT
            if rng.random() < 0.6
            else ActionCategory.DESIGN_CLARIFICATION
        )
    if slip >= 45 and overrun_pct < 0.05:
        return ActionCategory.SCHEDULE_TUNE_UP
    if plan >= LARGE_PROJECT_BUDGET and (overrun_pct >= 0.02 or co_share >= 0.35):
        return ActionCategory.SUPPLIER_REVIEW
    return (
        ActionCategory.DESIGN_CLARIFICATION
        if rng.random() < 0.5
        else ActionCategory.SCHEDULE_TUNE_UP
    )


def sample_range(
    band:   tuple[float, float],
    rng:    random.Random,
    jitter: float = SAMPLE_JITTER,
) -> float:
    """Uniform draw within ``band`` plus ±``jitter``, clamped to [0, 1]."""
    lo, hi = band
    value = lo + rng.random() * (hi - lo) + rng.uniform(-jitter, jitter)
    return clamp(value, 0.0, 1.0)


def savings_rate(category: ActionCategory, plan: float, co_total: float, slip: float) -> float:
    """Per-category share of ``overrun + co_total`` assumed recoverable."""
    if category is ActionCategory.SCOPE_ALIGNMENT:
        return 0.10 + min(0.06, co_total / plan)
    if category is ActionCategory.DESIGN_CLARIFICATION:
        return 0.07
    if category is ActionCategory.SUPPLIER_REVIEW:
        return 0.05
    if category is ActionCategory.SCHEDULE_TUNE_UP:
        return 0.03 + min(0.02, max(0.0, slip) / 180.0)
    return _FALLBACK_SAVINGS_PCT


def estimate_savings(
    category: ActionCategory,
    plan:     float,
    overrun:  float,
    co_total: float,
    slip:     float,
) -> float:
    """Estimated savings for acting on ``category``, capped at 7% of plan."""
    pct = savings_rate(category, plan, co_total, slip)
    capped = min(SAVINGS_CAP_PCT * plan, pct * (overrun + co_total))
    return max(0.0, capped)
