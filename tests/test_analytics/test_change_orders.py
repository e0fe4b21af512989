"""
Tests for portfolio_analytics/analytics/change_orders.py.

What we test
------------
- co_totals_per_project: unusable costs add 0; rows without a project land
  under "__missing__".
- co_counts_per_project counts rows regardless of cost.
- top_reasons: descending by count, capped at top_n, blank -> "Unspecified".
- co_frequency_histogram: every project counted, 5+ share the last bin.
- overrun_attribution: CO-driven share capped at the overrun; year mode and
  month mode.
"""

from __future__ import annotations

from datetime import date

import pytest

from portfolio_analytics.analytics.change_orders import (
    FREQUENCY_BIN_LABELS,
    co_counts_per_project,
    co_frequency_histogram,
    co_totals_per_project,
    overrun_attribution,
    top_reasons,
)
from portfolio_analytics.models.project import MISSING_PROJECT_KEY, ChangeOrder, Project
from portfolio_analytics.utils.time_utils import MONTH_LABELS


def _co(pid: str | None, cost: float | None = 1000.0, reason: str = "Scope Change") -> ChangeOrder:
    return ChangeOrder(project_id=pid, co_cost=cost, co_reason=reason)


class TestTotalsAndCounts:
    def test_totals(self, sample_change_orders):
        totals = co_totals_per_project(sample_change_orders)
        assert totals["A"] == pytest.approx(50_000.0)
        assert totals["B"] == pytest.approx(5_000.0)
        assert totals[MISSING_PROJECT_KEY] == pytest.approx(7_000.0)
        assert totals["D"] == 0.0

    def test_counts_include_costless_rows(self, sample_change_orders):
        counts = co_counts_per_project(sample_change_orders)
        assert counts == {"A": 2, "B": 1, MISSING_PROJECT_KEY: 1, "D": 1}


class TestTopReasons:
    def test_descending_and_capped(self):
        cos = (
            [_co("1", reason="Design Revision")] * 3
            + [_co("1", reason="Client Request")] * 5
            + [_co("1", reason="Weather")]
        )
        assert top_reasons(cos, top_n=2) == [("Client Request", 5), ("Design Revision", 3)]

    def test_blank_reason_counts_as_unspecified(self):
        assert top_reasons([_co("1", reason="  ")]) == [("Unspecified", 1)]

    def test_empty(self):
        assert top_reasons([]) == []


class TestFrequencyHistogram:
    def test_zero_change_order_projects_counted(self, sample_projects, sample_change_orders):
        hist = co_frequency_histogram(sample_projects, sample_change_orders)
        # C: 0, B: 1, D: 1, A: 2
        assert hist == [1, 2, 1, 0, 0, 0]

    def test_five_plus_bin(self):
        projects = [Project(project_id="X")]
        hist = co_frequency_histogram(projects, [_co("X")] * 9)
        assert hist[-1] == 1
        assert FREQUENCY_BIN_LABELS[-1] == "5+"


class TestOverrunAttribution:
    def test_year_mode(self, sample_projects, sample_change_orders):
        attr = overrun_attribution(sample_projects, sample_change_orders)
        assert attr.labels == [2022, 2024]
        # A: overrun 100k, COs 50k -> 50k / 50k.  D: overrun 300k, no usable CO cost.
        assert attr.co_values == [pytest.approx(50_000.0), 0.0]
        assert attr.other_values == [pytest.approx(50_000.0), pytest.approx(300_000.0)]

    def test_co_share_capped_at_overrun(self):
        project = Project(
            project_id="X",
            start_date=date(2023, 4, 1),
            planned_budget=100.0,
            actual_cost=110.0,
        )
        attr = overrun_attribution([project], [_co("X", cost=500.0)])
        assert attr.co_values == [pytest.approx(10.0)]
        assert attr.other_values == [0.0]

    def test_month_mode_has_twelve_slots(self, sample_projects, sample_change_orders):
        in_2022 = [p for p in sample_projects if p.start_date.year == 2022]
        attr = overrun_attribution(in_2022, sample_change_orders, year=2022)
        assert attr.labels == list(MONTH_LABELS)
        assert len(attr.co_values) == 12
        assert attr.co_values[2] == pytest.approx(50_000.0)   # A starts in March

    def test_under_budget_projects_ignored(self):
        project = Project(
            project_id="X", start_date=date(2023, 1, 1), planned_budget=100.0, actual_cost=90.0
        )
        attr = overrun_attribution([project], [])
        assert attr.labels == []
