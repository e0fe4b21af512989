"""
Tests for portfolio_analytics/forecast/trend.py.

What we test
------------
fit_trend():
  - Matches a reference least-squares fit for >= 2 distinct periods.
  - Exact line recovery on collinear points.
  - One point -> flat line at that value; empty -> (0, 0).

project_trend():
  - Periods last+1 .. last+horizon; empty for horizon 0.

pipeline_forecast():
  - Average yearly count × trend value; floored at zero.
"""

from __future__ import annotations

import statistics

import pytest

from portfolio_analytics.forecast.trend import (
    TrendFit,
    fit_trend,
    pipeline_forecast,
    project_trend,
)


class TestFitTrend:
    def test_matches_reference_least_squares(self):
        series = {2019: 410_000.0, 2020: 455_000.0, 2021: 430_000.0, 2022: 520_000.0, 2024: 560_000.0}
        ref = statistics.linear_regression(list(series), list(series.values()))
        fit = fit_trend(series)
        assert fit.slope == pytest.approx(ref.slope, rel=1e-6)
        assert fit.value_at(2025) == pytest.approx(ref.intercept + ref.slope * 2025, rel=1e-6)

    def test_collinear_points(self):
        fit = fit_trend({2020: 1.0, 2021: 3.0, 2022: 5.0})
        assert fit.slope == pytest.approx(2.0)
        assert fit.value_at(2023) == pytest.approx(7.0)

    def test_single_point_is_flat(self):
        fit = fit_trend({2022: 500.0})
        assert fit == TrendFit(intercept=500.0, slope=0.0)

    def test_empty(self):
        assert fit_trend({}) == TrendFit(intercept=0.0, slope=0.0)

    def test_unsorted_input(self):
        fit = fit_trend({2022: 5.0, 2020: 1.0, 2021: 3.0})
        assert fit.slope == pytest.approx(2.0)


class TestProjectTrend:
    def test_flat_projection_from_single_point(self):
        fit = fit_trend({2022: 500.0})
        assert project_trend(fit.intercept, fit.slope, 2022, 3) == [
            (2023, 500.0),
            (2024, 500.0),
            (2025, 500.0),
        ]

    def test_sloped_projection(self):
        out = project_trend(-4000.0, 2.0, 2024, 2)
        assert out == [(2025, pytest.approx(50.0)), (2026, pytest.approx(52.0))]

    def test_zero_horizon(self):
        assert project_trend(1.0, 1.0, 2024, 0) == []


class TestPipelineForecast:
    def test_average_count_times_trend(self):
        fit = TrendFit(intercept=-2000.0, slope=1.0)   # 22 at 2022, 23 at 2023
        out = pipeline_forecast({2020: 2, 2021: 4}, fit, last_period=2021, years=2)
        assert out == [(2022, pytest.approx(66.0)), (2023, pytest.approx(69.0))]

    def test_floored_at_zero(self):
        fit = TrendFit(intercept=100.0, slope=-1.0)
        out = pipeline_forecast({2020: 3}, fit, last_period=2020, years=3)
        assert [v for _, v in out] == [0.0, 0.0, 0.0]

    def test_no_history_counts(self):
        out = pipeline_forecast({}, TrendFit(1.0, 0.0), last_period=2020)
        assert [v for _, v in out] == [0.0, 0.0, 0.0]
