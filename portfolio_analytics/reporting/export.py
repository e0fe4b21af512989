"""
Export helpers for BI tools and manual analysis.

All writers create parent directories and return the written ``Path``.
They accept generic ``list[dict]`` data to stay decoupled from specific
view shapes; the ``flatten_*`` / ``*_to_dict`` adapters do the shaping.

CSV and Parquet exports are flat (no nested dicts) so they load directly in
Power BI, Excel or pandas without any pre-processing step.  JSON exports
keep the nested chart descriptions so a JavaScript renderer can draw them
unchanged.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Sequence

import pyarrow as pa
import pyarrow.parquet as pq

from portfolio_analytics.models.recommendation import Recommendation

logger = logging.getLogger(__name__)

RECOMMENDATION_SCHEMA = pa.schema([
    pa.field("rank",         pa.int32(),   nullable=False),
    pa.field("project_id",   pa.string(),  nullable=False),
    pa.field("project_name", pa.string(),  nullable=False),
    pa.field("category",     pa.string(),  nullable=False),
    pa.field("risk",         pa.int32(),   nullable=False),
    pa.field("impact",       pa.float64(), nullable=False),
    pa.field("effort",       pa.float64(), nullable=False),
    pa.field("savings",      pa.float64(), nullable=False),
    pa.field("overrun",      pa.float64(), nullable=False),
    pa.field("co_total",     pa.float64(), nullable=False),
    pa.field("plan",         pa.float64(), nullable=True),
])


# ── Writers ───────────────────────────────────────────────────────────────────


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.  No records -> empty file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(data: dict | list, path: Path) -> Path:
    """Write ``data`` to a pretty-printed JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    return path


def export_to_parquet(
    records: list[dict[str, Any]],
    path: Path,
    schema: pa.Schema = RECOMMENDATION_SCHEMA,
) -> Path:
    """Write flat ``records`` to a snappy-compressed Parquet file.

    Args:
        records: Row dicts; each must carry every field in ``schema``.
        path:    Destination file path.
        schema:  Column schema.  Defaults to the recommendation export schema.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    arrays = {
        field.name: pa.array([r.get(field.name) for r in records], type=field.type)
        for field in schema
    }
    table = pa.table(arrays, schema=schema)
    pq.write_table(table, str(path), compression="snappy")
    logger.info("Parquet written: %s (%d rows)", path.name, len(records))
    return path


# ── Adapters ──────────────────────────────────────────────────────────────────


def flatten_recommendations_for_export(recs: Sequence[Recommendation]) -> list[dict]:
    """One flat row per recommendation, in ranked order.

    Each row contains ``rank`` (1-based), the project identity, the action
    ``category`` as its display label, and every numeric field of the
    recommendation.
    """
    return [
        {
            "rank":         i,
            "project_id":   r.project_id,
            "project_name": r.project_name,
            "category":     r.category.value,
            "risk":         r.risk,
            "impact":       round(r.impact, 4),
            "effort":       round(r.effort, 4),
            "savings":      round(r.savings, 2),
            "overrun":      round(r.overrun, 2),
            "co_total":     round(r.co_total, 2),
            "plan":         r.plan,
        }
        for i, r in enumerate(recs, start=1)
    ]


def view_to_dict(view: Any) -> dict[str, Any]:
    """Serialise a view model: KPI tiles plus chart descriptions.

    Args:
        view: Any of the four view models (anything with ``kpis`` and
              ``charts``).

    Returns:
        ``{"kpis": [{label, value, format}], "charts": [ChartSpec dicts]}``.
    """
    return {
        "kpis": [
            {"label": k.label, "value": k.value, "format": k.formatter}
            for k in view.kpis
        ],
        "charts": [spec.to_dict() for spec in view.charts],
    }


def flatten_kpis_for_export(views: dict[str, Any]) -> list[dict]:
    """One row per KPI tile across views: ``view, label, value, format``."""
    return [
        {"view": name, "label": k.label, "value": k.value, "format": k.formatter}
        for name, view in views.items()
        for k in view.kpis
    ]
