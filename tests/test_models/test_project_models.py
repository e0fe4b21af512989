"""
Tests for the row, recommendation and chart models.

What we test
------------
- Project: blank name defaults to "Project <id>"; frozen.
- ChangeOrder: project_key falls back to "__missing__".
- Recommendation: impact/effort in [0, 1], risk in [0, 100].
- ChartSpec: to_dict() is plain JSON-compatible data.
"""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from portfolio_analytics.models.chart import ChartData, ChartSpec, Dataset
from portfolio_analytics.models.project import MISSING_PROJECT_KEY, ChangeOrder, Project
from portfolio_analytics.models.recommendation import Recommendation
from portfolio_analytics.taxonomy.action_taxonomy import ActionCategory


class TestProject:
    def test_default_name(self):
        assert Project(project_id="42").project_name == "Project 42"
        assert Project(project_id="42", project_name="  ").project_name == "Project 42"

    def test_explicit_name_kept(self):
        assert Project(project_id="42", project_name="Harbor").project_name == "Harbor"

    def test_frozen(self):
        p = Project(project_id="1")
        with pytest.raises(ValidationError):
            p.actual_cost = 5.0  # type: ignore[misc]

    def test_in_flight(self):
        assert Project(project_id="1").is_in_flight
        assert not Project(project_id="1", actual_end=date(2024, 1, 1)).is_in_flight


class TestChangeOrder:
    def test_project_key(self):
        assert ChangeOrder(project_id="P1").project_key == "P1"
        assert ChangeOrder(project_id=None).project_key == MISSING_PROJECT_KEY
        assert ChangeOrder(project_id="").project_key == MISSING_PROJECT_KEY

    def test_default_reason(self):
        assert ChangeOrder().co_reason == "Unspecified"


class TestRecommendation:
    def _make(self, **overrides) -> Recommendation:
        fields = dict(
            project_id="1",
            project_name="One",
            category=ActionCategory.SCOPE_ALIGNMENT,
            impact=0.8,
            effort=0.5,
            savings=1000.0,
            risk=88,
            overrun=100.0,
            co_total=50.0,
            plan=1000.0,
        )
        fields.update(overrides)
        return Recommendation(**fields)

    def test_valid(self):
        assert self._make().risk == 88

    @pytest.mark.parametrize("field", ["impact", "effort"])
    def test_unit_interval(self, field):
        with pytest.raises(ValidationError):
            self._make(**{field: 1.2})

    def test_risk_range(self):
        with pytest.raises(ValidationError):
            self._make(risk=101)


class TestChartSpec:
    def test_to_dict(self):
        spec = ChartSpec(
            type="bar",
            title="Projects",
            data=ChartData(labels=[2023, 2024], datasets=[Dataset(label="Projects", data=[1, None])]),
            options={"tooltip": {"format": "number"}},
        )
        out = spec.to_dict()
        assert out["type"] == "bar"
        assert out["data"]["labels"] == [2023, 2024]
        assert out["data"]["datasets"][0] == {"label": "Projects", "data": [1, None], "hints": {}}

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            ChartSpec(type="pie", data=ChartData())
