"""
Portfolio Analytics — Streamlit Dashboard
=========================================

Optional local analysis UI.  Reads ``projects.csv`` and
``change_orders.csv`` once (cached), then recomputes the four views on
every widget change.  All numbers shown here are also available via the
``portfolio-analytics`` CLI commands.

App structure (4 tabs)
----------------------
  1. Descriptive   — Project counts, planned vs actual totals, average cost.
  2. Diagnostic    — Cost / schedule variance, change-order reasons,
                     frequency, overrun attribution, variance vs duration.
  3. Predictive    — Cost and schedule trend forecasts, overrun probability,
                     risk distribution, pipeline projection.
  4. Prescriptive  — Recommended actions, action mix, priority matrix.

Usage
-----
    pip install -e ".[dashboard]"
    streamlit run dashboard/app.py
"""

from __future__ import annotations

import sys
from pathlib import Path

# ── Ensure project root is importable ────────────────────────────────────────
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import streamlit as st

# ── Must be the first Streamlit call ─────────────────────────────────────────
st.set_page_config(
    page_title="Portfolio Analytics",
    layout="wide",
    initial_sidebar_state="expanded",
)

from dashboard.data_loader import (
    chart_to_dataframe,
    load_portfolio,
    recommendations_to_dataframe,
)
from portfolio_analytics.config import load_config, resolve_data_path
from portfolio_analytics.models.chart import ChartSpec
from portfolio_analytics.pipeline.state import parse_year_filter, seeded_rng
from portfolio_analytics.pipeline.views import (
    recompute_descriptive,
    recompute_diagnostic,
    recompute_predictive,
    recompute_prescriptive,
)
from portfolio_analytics.reporting.formatters import format_value, pct_str

_CONFIG = load_config()


# ── Sidebar ───────────────────────────────────────────────────────────────────

with st.sidebar:
    st.title("Portfolio Analytics")
    st.caption("Construction portfolio dashboard — reads the project CSV exports")
    st.divider()

    projects_csv = st.text_input(
        "Projects CSV", value=str(resolve_data_path(_CONFIG.data.projects_csv))
    )
    change_orders_csv = st.text_input(
        "Change orders CSV", value=str(resolve_data_path(_CONFIG.data.change_orders_csv))
    )

    if st.button("Clear cache", help="Force re-read of both CSV files."):
        st.cache_data.clear()
        st.rerun()

snapshot, load_error = load_portfolio(projects_csv, change_orders_csv)

if snapshot is None:
    st.error(f"Could not load portfolio data. {load_error}")
    st.stop()

with st.sidebar:
    st.divider()
    year_choice = st.selectbox(
        "Year",
        options=["all"] + [str(y) for y in snapshot.years],
        index=0,
        help="Filters the descriptive and diagnostic views.",
    )
    horizon = st.selectbox(
        "Forecast horizon (years)",
        options=_CONFIG.forecast.horizon_options,
        index=_CONFIG.forecast.horizon_options.index(_CONFIG.forecast.default_horizon)
        if _CONFIG.forecast.default_horizon in _CONFIG.forecast.horizon_options
        else 0,
    )
    top_n = st.selectbox(
        "Top-N recommendations",
        options=_CONFIG.recommend.top_n_options,
        index=_CONFIG.recommend.top_n_options.index(_CONFIG.recommend.default_top_n)
        if _CONFIG.recommend.default_top_n in _CONFIG.recommend.top_n_options
        else 0,
    )
    seed = st.number_input(
        "Random seed",
        min_value=0,
        value=_CONFIG.recommend.seed,
        step=1,
        placeholder="unseeded",
        help="Fixes action tie-breaks, impact/effort sampling and risk jitter. "
             "Leave blank for a fresh draw on every rerun.",
    )
    st.divider()
    st.caption(f"{len(snapshot.projects)} projects · {len(snapshot.change_orders)} change orders")

year = parse_year_filter(year_choice)


# ── Render helpers ────────────────────────────────────────────────────────────


def _render_kpis(kpis) -> None:
    cols = st.columns(len(kpis))
    for col, kpi in zip(cols, kpis):
        col.metric(kpi.label, format_value(kpi.formatter, kpi.value))


def _render_chart(spec: ChartSpec) -> None:
    st.subheader(spec.title)
    df = chart_to_dataframe(spec)
    if df.empty:
        st.info("No data for this chart.")
        return
    if spec.type == "line":
        st.line_chart(df)
    elif spec.type == "bar":
        st.bar_chart(df, horizontal=spec.options.get("index_axis") == "y")
    elif spec.type == "scatter":
        st.scatter_chart(df, x="x", y="y")
    else:
        st.scatter_chart(df, x="x", y="y", size="r")


def _render_charts(charts, per_row: int = 2) -> None:
    for start in range(0, len(charts), per_row):
        cols = st.columns(per_row)
        for col, spec in zip(cols, charts[start:start + per_row]):
            with col:
                _render_chart(spec)


# ── Tabs ──────────────────────────────────────────────────────────────────────

tab_desc, tab_diag, tab_pred, tab_presc = st.tabs(
    ["Descriptive", "Diagnostic", "Predictive", "Prescriptive"]
)


# ══════════════════════════════════════════════════════════════════════════════
# Tab 1 — Descriptive
# ══════════════════════════════════════════════════════════════════════════════

with tab_desc:
    st.header("Portfolio Overview")
    st.caption("Totals always reflect the current year filter.")
    view = recompute_descriptive(snapshot, year)
    _render_kpis(view.kpis)
    _render_charts(view.charts)


# ══════════════════════════════════════════════════════════════════════════════
# Tab 2 — Diagnostic
# ══════════════════════════════════════════════════════════════════════════════

with tab_diag:
    st.header("Variance & Change Orders")
    st.caption(
        "Projects filter on start year; change orders filter on their own date."
    )
    view = recompute_diagnostic(snapshot, year, _CONFIG.diagnostic.top_reasons)
    _render_kpis(view.kpis)
    _render_charts(view.charts)


# ══════════════════════════════════════════════════════════════════════════════
# Tab 3 — Predictive
# ══════════════════════════════════════════════════════════════════════════════

with tab_pred:
    st.header("Forecasts & Risk")
    st.caption(
        "Least-squares trends over yearly averages (all years). "
        "Point forecasts only — no confidence interval."
    )
    view = recompute_predictive(snapshot, int(horizon), _CONFIG)
    _render_kpis(view.kpis)
    st.caption(
        f"Overrun probability: baseline {pct_str(view.overrun.baseline)}, "
        f"adjusted {pct_str(view.overrun.adjusted)}"
    )
    _render_charts(view.charts)


# ══════════════════════════════════════════════════════════════════════════════
# Tab 4 — Prescriptive
# ══════════════════════════════════════════════════════════════════════════════

with tab_presc:
    st.header("Recommended Actions")
    rng = seeded_rng(_CONFIG, None if seed is None else int(seed))
    view = recompute_prescriptive(snapshot, int(top_n), _CONFIG, rng)
    _render_kpis(view.kpis)
    _render_charts(view.charts)

    st.subheader(f"Top {int(top_n)} Recommendations")
    st.dataframe(
        recommendations_to_dataframe(view.table),
        use_container_width=True,
        hide_index=True,
    )
