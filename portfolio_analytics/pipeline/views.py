"""
View recomputation — snapshot + filter in, view model out.

Each ``recompute_*`` function is pure: it reads the immutable
``PortfolioSnapshot`` and returns a new frozen view model holding the KPI
tiles and ``ChartSpec`` objects of one dashboard view.  Renderers (the
Typer CLI, the Streamlit app, a JSON export) only read view models.

Views
-----
  descriptive   Year-filtered counts, totals and average cost.
  diagnostic    Year-filtered variance KPIs and change-order diagnostics.
                Projects filter on start year, change orders on their own
                date.
  predictive    All-years trend forecasts, overrun probability, rule risk
                distribution and pipeline projection.
  prescriptive  All-years spread risk, recommended actions and savings.

The predictive and prescriptive views ignore the year filter: trends and
cohort-relative scores need the full history.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Optional

from portfolio_analytics.analytics.aggregate import (
    count_by_month,
    count_by_year,
    filter_change_orders_by_year,
    filter_projects_by_year,
    mean_by_month,
    mean_by_year,
    mean_finite,
    month_series,
    sum_finite,
)
from portfolio_analytics.analytics.change_orders import (
    FREQUENCY_BIN_LABELS,
    co_frequency_histogram,
    co_totals_per_project,
    overrun_attribution,
    top_reasons,
)
from portfolio_analytics.analytics.derived import (
    cost_variance_ratio,
    duration_days,
    schedule_slip_days,
)
from portfolio_analytics.config import AppConfig
from portfolio_analytics.forecast.overrun import (
    OverrunProbability,
    estimate_overrun_probability,
    variance_kpis,
)
from portfolio_analytics.forecast.trend import (
    fit_trend,
    pipeline_forecast,
    project_trend,
)
from portfolio_analytics.models.chart import ChartSpec, FormatterName
from portfolio_analytics.models.recommendation import Recommendation
from portfolio_analytics.pipeline.state import PortfolioSnapshot, ViewFilter
from portfolio_analytics.recommendations.ranker import (
    action_mix,
    bubble_radius,
    build_recommendations,
    count_high_risk,
    top_n,
    total_savings,
)
from portfolio_analytics.recommendations.risk import (
    RISK_BIN_LABELS,
    count_at_risk,
    risk_histogram,
    rule_risk_scores,
)
from portfolio_analytics.reporting.charts import (
    BAR_HINTS,
    LINE_HINTS,
    axis_options,
    build_chart,
    dataset,
    history_with_forecast,
    should_rotate,
)
from portfolio_analytics.utils.time_utils import MONTH_LABELS

logger = logging.getLogger(__name__)


# ── View models ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Kpi:
    """One KPI tile: label, raw value and the formatter that displays it."""

    label:     str
    value:     Optional[float]
    formatter: FormatterName = "number"


@dataclass(frozen=True)
class DescriptiveView:
    year:                  Optional[int]
    total_projects:        int
    average_cost:          Optional[float]
    average_duration_days: Optional[float]
    total_planned:         float
    total_actual:          float
    charts:                tuple[ChartSpec, ...]

    @property
    def kpis(self) -> list[Kpi]:
        return [
            Kpi("Total Projects", self.total_projects, "number"),
            Kpi("Average Cost", self.average_cost, "money"),
            Kpi("Average Duration", self.average_duration_days, "days"),
        ]


@dataclass(frozen=True)
class DiagnosticView:
    year:                      Optional[int]
    overrun_rate:              Optional[float]
    average_cost_variance:     Optional[float]
    average_schedule_variance: Optional[float]
    top_reasons:               tuple[tuple[str, int], ...]
    charts:                    tuple[ChartSpec, ...]

    @property
    def kpis(self) -> list[Kpi]:
        return [
            Kpi("Overrun Rate", self.overrun_rate, "percent"),
            Kpi("Avg Cost Variance", self.average_cost_variance, "percent"),
            Kpi("Avg Schedule Variance", self.average_schedule_variance, "days"),
        ]


@dataclass(frozen=True)
class PredictiveView:
    horizon:           int
    next_year_cost:    Optional[float]
    overrun:           OverrunProbability
    at_risk_count:     int
    cost_forecast:     tuple[tuple[int, float], ...]
    schedule_forecast: tuple[tuple[int, float], ...]
    pipeline:          tuple[tuple[int, float], ...]
    charts:            tuple[ChartSpec, ...]

    @property
    def kpis(self) -> list[Kpi]:
        return [
            Kpi("Next-Year Avg Cost", self.next_year_cost, "money"),
            Kpi("Overrun Probability", self.overrun.adjusted, "percent"),
            Kpi("At-Risk Projects", self.at_risk_count, "number"),
        ]


@dataclass(frozen=True)
class PrescriptiveView:
    top_n:           int
    recommendations: tuple[Recommendation, ...]
    table:           tuple[Recommendation, ...]
    high_risk_count: int
    total_savings:   float
    charts:          tuple[ChartSpec, ...]

    @property
    def kpis(self) -> list[Kpi]:
        return [
            Kpi("Recommendations", len(self.recommendations), "number"),
            Kpi("High-Risk Projects", self.high_risk_count, "number"),
            Kpi("Est. Total Savings", self.total_savings, "money"),
        ]


@dataclass(frozen=True)
class PortfolioView:
    """All four views for one filter state."""

    descriptive:  DescriptiveView
    diagnostic:   DiagnosticView
    predictive:   PredictiveView
    prescriptive: PrescriptiveView


# ── Helpers ───────────────────────────────────────────────────────────────────


def _period_series(
    projects: list,
    year:     Optional[int],
    accessor: Any,
) -> tuple[list[Any], list[float]]:
    """Mean-by-year labels/values, or 12 zero-filled months for one year."""
    if year is None:
        by_year = mean_by_year(projects, accessor)
        return list(by_year), list(by_year.values())
    return list(MONTH_LABELS), month_series(mean_by_month(projects, year, accessor))


def _titled(all_title: str, year_title: str, year: Optional[int]) -> str:
    return all_title if year is None else year_title.format(year=year)


# ── Descriptive ───────────────────────────────────────────────────────────────


def recompute_descriptive(
    snapshot: PortfolioSnapshot,
    year:     Optional[int] = None,
) -> DescriptiveView:
    """Counts, planned-vs-actual totals and average actual cost.

    Args:
        snapshot: Loaded rows.
        year:     Start-year filter; ``None`` for all years.

    Returns:
        ``DescriptiveView`` with three charts: projects by period, totals,
        average actual cost by period.
    """
    projects = filter_projects_by_year(snapshot.projects, year)

    if year is None:
        counts = count_by_year(projects)
        count_labels: list[Any] = list(counts)
        count_values: list[float] = list(counts.values())
    else:
        count_labels = list(MONTH_LABELS)
        count_values = month_series(count_by_month(projects, year))

    projects_chart = build_chart(
        "bar",
        _titled("Projects by Year", "Projects by Month ({year})", year),
        count_labels,
        [dataset("Projects" if year is None else f"Projects in {year}", count_values, **BAR_HINTS)],
        axis_options(y_format="number", rotate_x=should_rotate(count_labels)),
    )

    total_planned = sum_finite(p.planned_budget for p in projects)
    total_actual  = sum_finite(p.actual_cost for p in projects)
    totals_chart = build_chart(
        "bar",
        "Planned vs Actual Totals",
        ["Totals"],
        [dataset("Planned", [total_planned]), dataset("Actual", [total_actual])],
        axis_options(y_format="money"),
    )

    cost_labels, cost_values = _period_series(projects, year, lambda p: p.actual_cost)
    cost_chart = build_chart(
        "line",
        _titled("Avg Actual Cost by Year", "Avg Actual Cost by Month ({year})", year),
        cost_labels,
        [
            dataset(
                "Avg Actual Cost" if year is None else f"Avg Actual Cost ({year})",
                cost_values,
                **LINE_HINTS,
            )
        ],
        axis_options(y_format="money", rotate_x=should_rotate(cost_labels)),
    )

    return DescriptiveView(
        year=year,
        total_projects=len(projects),
        average_cost=mean_finite(p.actual_cost for p in projects),
        average_duration_days=mean_finite(duration_days(p) for p in projects),
        total_planned=total_planned,
        total_actual=total_actual,
        charts=(projects_chart, totals_chart, cost_chart),
    )


# ── Diagnostic ────────────────────────────────────────────────────────────────


def recompute_diagnostic(
    snapshot:         PortfolioSnapshot,
    year:             Optional[int] = None,
    top_reason_count: int = 7,
) -> DiagnosticView:
    """Variance KPIs plus six diagnostic charts.

    Args:
        snapshot:         Loaded rows.
        year:             Year filter; projects by start year, change orders
                          by their own date.
        top_reason_count: Number of reasons on the top-reasons chart.

    Returns:
        ``DiagnosticView``.
    """
    projects = filter_projects_by_year(snapshot.projects, year)
    change_orders = filter_change_orders_by_year(snapshot.change_orders, year)
    kpis = variance_kpis(projects)

    var_labels, var_values = _period_series(projects, year, cost_variance_ratio)
    cost_var_chart = build_chart(
        "bar",
        _titled("Cost Variance — by Year", "Cost Variance — by Month ({year})", year),
        var_labels,
        [dataset("Avg Cost Variance", var_values, **BAR_HINTS)],
        axis_options(y_format="percent", rotate_x=should_rotate(var_labels)),
    )

    slip_labels, slip_values = _period_series(projects, year, schedule_slip_days)
    sched_chart = build_chart(
        "line",
        _titled("Schedule Variance — by Year", "Schedule Variance — by Month ({year})", year),
        slip_labels,
        [dataset("Avg Schedule Variance (days)", slip_values, **LINE_HINTS)],
        axis_options(y_format="days", rotate_x=should_rotate(slip_labels)),
    )

    reasons = top_reasons(change_orders, top_reason_count)
    reasons_chart = build_chart(
        "bar",
        _titled("Change Orders — Top Reasons", "Change Orders — Top Reasons ({year})", year),
        [r for r, _ in reasons],
        [dataset("Count", [n for _, n in reasons])],
        axis_options(y_format="number", index_axis="y"),
    )

    freq_chart = build_chart(
        "bar",
        _titled("Change Orders — Frequency by Project", "Change Orders — Frequency ({year})", year),
        list(FREQUENCY_BIN_LABELS),
        [dataset("Projects", co_frequency_histogram(projects, change_orders), **BAR_HINTS)],
        axis_options(y_format="number"),
    )

    attribution = overrun_attribution(projects, change_orders, year)
    attrib_chart = build_chart(
        "bar",
        _titled("Overrun Attribution — CO vs Other", "Overrun Attribution — CO vs Other ({year})", year),
        attribution.labels,
        [
            dataset("CO-driven", attribution.co_values, stack="s1"),
            dataset("Other", attribution.other_values, stack="s1"),
        ],
        axis_options(y_format="money", stacked=True, rotate_x=should_rotate(attribution.labels)),
    )

    points = [
        {"x": x, "y": y}
        for p in projects
        if (x := duration_days(p)) is not None and (y := cost_variance_ratio(p)) is not None
    ]
    scatter_chart = build_chart(
        "scatter",
        _titled("Variance vs Duration (Correlation)", "Variance vs Duration ({year})", year),
        [],
        [dataset("Project", points, point_radius=3)],
        axis_options(
            y_format="percent",
            x_title="Duration (days)",
            y_title="Cost Variance (%)",
        ),
    )

    return DiagnosticView(
        year=year,
        overrun_rate=kpis.overrun_rate,
        average_cost_variance=kpis.average_cost_variance,
        average_schedule_variance=kpis.average_schedule_variance,
        top_reasons=tuple(reasons),
        charts=(cost_var_chart, sched_chart, reasons_chart, freq_chart, attrib_chart, scatter_chart),
    )


# ── Predictive ────────────────────────────────────────────────────────────────


def recompute_predictive(
    snapshot: PortfolioSnapshot,
    horizon:  int = 3,
    config:   Optional[AppConfig] = None,
) -> PredictiveView:
    """Trend forecasts, overrun probability, rule risk and pipeline.

    With no dated cost history there is no last year to project from: the
    forecasts and pipeline are empty and ``next_year_cost`` is ``None``.

    Args:
        snapshot: Loaded rows (all years).
        horizon:  Years to forecast past the last observed year.
        config:   Thresholds; defaults to ``AppConfig()``.

    Returns:
        ``PredictiveView``.
    """
    config = config or AppConfig()
    projects = list(snapshot.projects)

    cost_by_year = mean_by_year(projects, lambda p: p.actual_cost)
    cost_fit = fit_trend(cost_by_year)
    slip_by_year = mean_by_year(projects, schedule_slip_days)
    slip_fit = fit_trend(slip_by_year)

    cost_forecast: list[tuple[int, float]] = []
    pipeline: list[tuple[int, float]] = []
    next_year_cost: Optional[float] = None
    if cost_by_year:
        last_year = max(cost_by_year)
        cost_forecast = project_trend(cost_fit.intercept, cost_fit.slope, last_year, horizon)
        pipeline = pipeline_forecast(
            count_by_year(projects), cost_fit, last_year, config.forecast.pipeline_years
        )
        next_year_cost = cost_fit.value_at(last_year + 1)
    else:
        logger.info("No dated cost history; predictive forecasts are empty")

    slip_forecast: list[tuple[int, float]] = []
    if slip_by_year:
        slip_forecast = project_trend(
            slip_fit.intercept, slip_fit.slope, max(slip_by_year), horizon
        )

    overrun = estimate_overrun_probability(projects)
    scores = rule_risk_scores(projects, co_totals_per_project(snapshot.change_orders))

    charts = (
        history_with_forecast(
            "Avg Actual Cost — Forecast",
            "Avg Actual Cost (history)",
            list(cost_by_year.items()),
            cost_forecast,
            "money",
        ),
        history_with_forecast(
            "Schedule Variance — Forecast",
            "Avg Schedule Var (days)",
            list(slip_by_year.items()),
            slip_forecast,
            "days",
        ),
        build_chart(
            "bar",
            "Overrun Probability",
            ["Baseline", "Adjusted"],
            [dataset("Probability", [overrun.baseline, overrun.adjusted])],
            axis_options(y_format="percent"),
        ),
        build_chart(
            "bar",
            "Risk Score Distribution",
            list(RISK_BIN_LABELS),
            [dataset("Projects", risk_histogram(scores), **BAR_HINTS)],
            axis_options(y_format="number"),
        ),
        build_chart(
            "bar",
            "Projected Pipeline Cost",
            [y for y, _ in pipeline],
            [dataset("Projected Pipeline Cost", [v for _, v in pipeline])],
            axis_options(y_format="money"),
        ),
    )

    return PredictiveView(
        horizon=horizon,
        next_year_cost=next_year_cost,
        overrun=overrun,
        at_risk_count=count_at_risk(scores, config.risk.at_risk_threshold),
        cost_forecast=tuple(cost_forecast),
        schedule_forecast=tuple(slip_forecast),
        pipeline=tuple(pipeline),
        charts=charts,
    )


# ── Prescriptive ──────────────────────────────────────────────────────────────


def recompute_prescriptive(
    snapshot: PortfolioSnapshot,
    top:      int = 10,
    config:   Optional[AppConfig] = None,
    rng:      Optional[random.Random] = None,
) -> PrescriptiveView:
    """Recommended actions, savings KPIs, action mix and priority matrix.

    Args:
        snapshot: Loaded rows (all years).
        top:      Table length.
        config:   Thresholds, jitter and seed; defaults to ``AppConfig()``.
        rng:      Random source.  When ``None`` one is created from
                  ``config.recommend.seed`` (unseeded if that is ``None``).

    Returns:
        ``PrescriptiveView``.
    """
    config = config or AppConfig()
    if rng is None:
        rng = random.Random(config.recommend.seed)

    recs = build_recommendations(
        snapshot.projects,
        co_totals_per_project(snapshot.change_orders),
        rng=rng,
        jitter=config.risk.spread_jitter,
    )
    mix = action_mix(recs)

    mix_chart = build_chart(
        "bar",
        "Action Mix",
        [c.value for c in mix],
        [dataset("Count", list(mix.values()), **BAR_HINTS)],
        axis_options(y_format="number"),
    )
    matrix_chart = build_chart(
        "bubble",
        "Priority Matrix — Impact vs Effort",
        [],
        [
            dataset(
                "Recommendations",
                [{"x": r.effort, "y": r.impact, "r": bubble_radius(r.savings)} for r in recs],
            )
        ],
        axis_options(
            y_format="number",
            x_title="Effort (0–1)",
            y_title="Impact (0–1)",
            x_range=(0.0, 1.0),
            y_range=(0.0, 1.0),
        ),
    )

    return PrescriptiveView(
        top_n=top,
        recommendations=tuple(recs),
        table=tuple(top_n(recs, top)),
        high_risk_count=count_high_risk(recs, config.risk.high_risk_threshold),
        total_savings=total_savings(recs),
        charts=(mix_chart, matrix_chart),
    )


# ── All views ─────────────────────────────────────────────────────────────────


def recompute(
    snapshot:    PortfolioSnapshot,
    view_filter: ViewFilter,
    config:      Optional[AppConfig] = None,
    rng:         Optional[random.Random] = None,
) -> PortfolioView:
    """Recompute every view for one filter state."""
    config = config or AppConfig()
    logger.debug(
        "Recomputing views",
        extra={
            "year": view_filter.year,
            "horizon": view_filter.horizon,
            "top_n": view_filter.top_n,
            "projects": len(snapshot.projects),
        },
    )
    return PortfolioView(
        descriptive=recompute_descriptive(snapshot, view_filter.year),
        diagnostic=recompute_diagnostic(snapshot, view_filter.year, config.diagnostic.top_reasons),
        predictive=recompute_predictive(snapshot, view_filter.horizon, config),
        prescriptive=recompute_prescriptive(snapshot, view_filter.top_n, config, rng),
    )
