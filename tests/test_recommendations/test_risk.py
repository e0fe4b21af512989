"""
Tests for portfolio_analytics/recommendations/risk.py.

What we test
------------
rule_risk_score():
  - A 1,000,000 budget with 45 days' slip scores 100.
  - Deterministic and within [0, 100].
  - Small budgets stay below the cap; each term adds as documented.
  - Missing budget / in-flight project -> size and slip terms vanish.

spread_risk_scores():
  - jitter=0 -> min score exactly 0, max exactly 100.
  - Identical raws (zero span) -> all 0, no division error.
  - Seeded jitter is reproducible and stays within [0, 100].

risk_histogram() / count_at_risk():
  - Upper bin edges are inclusive.
"""

from __future__ import annotations

import random
from datetime import date

import pytest

from portfolio_analytics.models.project import Project
from portfolio_analytics.recommendations.risk import (
    RISK_BIN_LABELS,
    count_at_risk,
    risk_histogram,
    rule_risk_score,
    rule_risk_scores,
    spread_raw_score,
    spread_risk_scores,
)


def _project(
    pid: str = "P1",
    plan: float | None = 1_000_000.0,
    actual: float | None = None,
    slip_days: int | None = None,
) -> Project:
    planned_end = date(2023, 6, 1)
    actual_end = (
        date.fromordinal(planned_end.toordinal() + slip_days) if slip_days is not None else None
    )
    return Project(
        project_id=pid,
        planned_budget=plan,
        actual_cost=actual,
        planned_end=planned_end,
        actual_end=actual_end,
    )


# ── Rule score ────────────────────────────────────────────────────────────────

class TestRuleRiskScore:
    def test_million_dollar_late_project_saturates(self):
        p = _project(plan=1_000_000.0, actual=1_100_000.0, slip_days=45)
        assert rule_risk_score(p, 50_000.0) == 100

    def test_small_budget_size_term(self):
        assert rule_risk_score(_project(plan=1_000.0)) == 60

    def test_slip_and_change_order_terms(self):
        # 60 (size) + 0.05·100 (slip) + 0.000005·200,000 (COs) = 66
        p = _project(plan=1_000.0, slip_days=100)
        assert rule_risk_score(p, 200_000.0) == 66

    def test_early_finish_adds_nothing(self):
        assert rule_risk_score(_project(plan=1_000.0, slip_days=-30)) == 60

    def test_missing_budget_scores_zero(self):
        assert rule_risk_score(_project(plan=None)) == 0

    def test_deterministic_and_bounded(self):
        p = _project(plan=50_000_000.0, slip_days=400)
        scores = {rule_risk_score(p, 9e9) for _ in range(5)}
        assert scores == {100}

    def test_scores_in_input_order(self):
        projects = [_project("a", plan=1_000.0), _project("b", plan=None)]
        assert rule_risk_scores(projects, {"a": 0.0}) == [60, 0]


# ── Spread score ──────────────────────────────────────────────────────────────

class TestSpreadRiskScores:
    def test_zero_jitter_spans_full_range(self):
        projects = [
            _project("low", plan=100_000.0, actual=90_000.0, slip_days=0),
            _project("mid", plan=2_000_000.0, actual=2_100_000.0, slip_days=20),
            _project("high", plan=20_000_000.0, actual=25_000_000.0, slip_days=90),
        ]
        scores = spread_risk_scores(projects, {"high": 1_000_000.0}, jitter=0)
        assert scores["low"] == 0.0
        assert scores["high"] == 100.0
        assert 0.0 < scores["mid"] < 100.0

    def test_zero_span_does_not_divide_by_zero(self):
        projects = [_project("a"), _project("b")]
        assert spread_risk_scores(projects, {}, jitter=0) == {"a": 0.0, "b": 0.0}

    def test_seeded_jitter_reproducible_and_bounded(self):
        projects = [_project(str(i), plan=10_000.0 * (i + 1)) for i in range(20)]
        first = spread_risk_scores(projects, {}, rng=random.Random(7), jitter=2.0)
        second = spread_risk_scores(projects, {}, rng=random.Random(7), jitter=2.0)
        assert first == second
        assert all(0.0 <= s <= 100.0 for s in first.values())

    def test_jitter_zero_draws_nothing(self):
        rng = random.Random(3)
        state = rng.getstate()
        spread_risk_scores([_project("a"), _project("b", plan=10.0)], {}, rng=rng, jitter=0)
        assert rng.getstate() == state

    def test_empty_cohort(self):
        assert spread_risk_scores([], {}) == {}

    def test_raw_score_grows_with_change_orders(self):
        p = _project(plan=1_000_000.0)
        assert spread_raw_score(p, 500_000.0) > spread_raw_score(p, 0.0)


# ── Distribution helpers ──────────────────────────────────────────────────────

class TestDistribution:
    def test_histogram_inclusive_edges(self):
        hist = risk_histogram([0, 20, 21, 40, 60, 61, 80, 81, 100])
        assert hist == [2, 2, 1, 2, 2]
        assert len(hist) == len(RISK_BIN_LABELS)

    def test_count_at_risk_inclusive(self):
        assert count_at_risk([69, 70, 71, 100], threshold=70) == 3
