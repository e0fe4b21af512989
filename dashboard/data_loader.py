"""
Dashboard data loader.

``load_portfolio`` is decorated with ``@st.cache_data`` so Streamlit only
re-reads the CSVs when the paths change or the TTL expires; widget
interactions (year, horizon, top-N) recompute views from the cached
snapshot without touching disk.

The remaining helpers turn view-model pieces (``ChartSpec``,
``Recommendation``) into pandas DataFrames for the Streamlit chart and
table widgets.

Load failures return ``(None, message)`` rather than raising so every view
can show a graceful error message.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import pandas as pd
import streamlit as st

from portfolio_analytics.exceptions import DataFetchError
from portfolio_analytics.ingestion.csv_loader import load_snapshot
from portfolio_analytics.models.chart import ChartSpec
from portfolio_analytics.models.recommendation import Recommendation
from portfolio_analytics.pipeline.state import PortfolioSnapshot
from portfolio_analytics.reporting.formatters import money_str

logger = logging.getLogger(__name__)


# ── Loaders ──────────────────────────────────────────────────────────────────


@st.cache_data(ttl=300)
def load_portfolio(
    projects_csv: str,
    change_orders_csv: str,
) -> tuple[Optional[PortfolioSnapshot], Optional[str]]:
    """Load both CSVs into a snapshot.

    TTL: 5 minutes (re-reads after the source exports are refreshed).

    Returns:
        ``(snapshot, None)`` on success, ``(None, error message)`` on a
        ``DataFetchError``.
    """
    try:
        return load_snapshot(projects_csv, change_orders_csv), None
    except DataFetchError as exc:
        logger.error("Dashboard data load failed: %s", exc)
        return None, str(exc)


# ── DataFrame adapters ────────────────────────────────────────────────────────


def chart_to_dataframe(spec: ChartSpec) -> pd.DataFrame:
    """Convert a ``ChartSpec`` into a DataFrame for ``st.*_chart``.

    Category charts (line/bar) -> index = labels, one column per dataset.
    Point charts (scatter/bubble) -> one row per point with ``x``, ``y``
    (and ``r``) columns plus a ``series`` column naming the dataset.
    """
    if spec.type in ("scatter", "bubble"):
        rows = [
            {**point, "series": ds.label}
            for ds in spec.data.datasets
            for point in ds.data
        ]
        return pd.DataFrame(rows, columns=["x", "y", "r", "series"] if spec.type == "bubble" else ["x", "y", "series"])

    labels = [str(lb) for lb in spec.data.labels]
    frame = pd.DataFrame(
        {ds.label: pd.to_numeric(pd.Series(ds.data, dtype="object"), errors="coerce") for ds in spec.data.datasets},
    )
    if len(frame) == len(labels):
        frame.index = pd.Index(labels, name="label")
    return frame


def recommendations_to_dataframe(recs: Sequence[Recommendation]) -> pd.DataFrame:
    """Recommendation table rows for ``st.dataframe``."""
    return pd.DataFrame(
        [
            {
                "Project":            r.project_name,
                "Recommended Action": r.category.value,
                "Risk":               r.risk,
                "Est. Savings":       money_str(r.savings),
                "Impact":             round(r.impact, 2),
                "Effort":             round(r.effort, 2),
            }
            for r in recs
        ],
        columns=["Project", "Recommended Action", "Risk", "Est. Savings", "Impact", "Effort"],
    )
