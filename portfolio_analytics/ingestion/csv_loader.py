"""
CSV loader for project and change-order exports.

Files
-----
projects.csv (comma delimited, header row).  Required columns:
  project_id, start_date, planned_end, actual_end, planned_budget, actual_cost
Optional columns (absent → None / default):
  project_name, completion_pct

change_orders.csv.  Required columns:
  project_id, co_cost
Optional columns:
  phase_id, co_id, co_reason, date

Lenient fields
--------------
Unlike a strict import, a bad cell never rejects the file or the row:
  - numbers   → ``parse_float`` (``"$1,200"`` ok; junk → None)
  - dates     → ``parse_date``  (ISO, ISO datetime, MM/DD/YYYY; junk → None)
  - co_reason → ``normalize_reason``
Each degraded cell is logged at DEBUG.  Only a missing/unreadable file or a
missing required column raises ``DataFetchError``.

Concurrency
-----------
``load_snapshot()`` reads both files on worker threads
(``asyncio.gather`` over ``asyncio.to_thread``) and joins before returning.
If either load fails the whole snapshot fails; nothing is retried.
"""

from __future__ import annotations

import asyncio
import csv
import logging
from datetime import date
from pathlib import Path
from typing import Optional, Union

from portfolio_analytics.exceptions import DataFetchError
from portfolio_analytics.models.project import ChangeOrder, Project
from portfolio_analytics.pipeline.state import PortfolioSnapshot
from portfolio_analytics.taxonomy.reason_taxonomy import normalize_reason
from portfolio_analytics.utils.numeric import parse_float
from portfolio_analytics.utils.time_utils import parse_date

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

REQUIRED_PROJECT_COLUMNS = frozenset({
    "project_id", "start_date", "planned_end", "actual_end",
    "planned_budget", "actual_cost",
})

REQUIRED_CO_COLUMNS = frozenset({"project_id", "co_cost"})


def load_projects(path: PathLike) -> list[Project]:
    """Read ``projects.csv`` into :class:`Project` rows.

    Args:
        path: CSV file path.

    Returns:
        Projects in file order.  A header-only file yields ``[]``.

    Raises:
        DataFetchError: File missing/unreadable or required columns absent.
    """
    path = Path(path)
    rows = _read_rows(path, REQUIRED_PROJECT_COLUMNS)
    projects = [_row_to_project(row, line_no) for line_no, row in enumerate(rows, start=2)]
    logger.info("Loaded %d projects from %s", len(projects), path.name)
    return projects


def load_change_orders(path: PathLike) -> list[ChangeOrder]:
    """Read ``change_orders.csv`` into :class:`ChangeOrder` rows.

    Raises:
        DataFetchError: File missing/unreadable or required columns absent.
    """
    path = Path(path)
    rows = _read_rows(path, REQUIRED_CO_COLUMNS)
    change_orders = [_row_to_change_order(row, line_no) for line_no, row in enumerate(rows, start=2)]
    logger.info("Loaded %d change orders from %s", len(change_orders), path.name)
    return change_orders


async def load_snapshot_async(
    projects_path:      PathLike,
    change_orders_path: PathLike,
) -> PortfolioSnapshot:
    """Load both files concurrently and join into a snapshot."""
    projects, change_orders = await asyncio.gather(
        asyncio.to_thread(load_projects, projects_path),
        asyncio.to_thread(load_change_orders, change_orders_path),
    )
    return PortfolioSnapshot(projects=tuple(projects), change_orders=tuple(change_orders))


def load_snapshot(
    projects_path:      PathLike,
    change_orders_path: PathLike,
) -> PortfolioSnapshot:
    """Blocking wrapper around :func:`load_snapshot_async`.

    Raises:
        DataFetchError: If either file fails to load.
    """
    return asyncio.run(load_snapshot_async(projects_path, change_orders_path))


# ── Private helpers ────────────────────────────────────────────────────────────


def _read_rows(path: Path, required: frozenset[str]) -> list[dict[str, str]]:
    """Read all data rows after validating the header."""
    if not path.exists():
        raise DataFetchError(path, "file not found")

    try:
        with open(path, encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            if reader.fieldnames is None:
                raise DataFetchError(path, "file is empty or has no header row")

            actual_cols = {c.strip() for c in reader.fieldnames if c}
            missing = required - actual_cols
            if missing:
                raise DataFetchError(
                    path,
                    f"missing required columns {sorted(missing)}; found {sorted(actual_cols)}",
                )
            rows = [
                {(k or "").strip(): v for k, v in row.items()}
                for row in reader
            ]
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise DataFetchError(path, str(exc)) from exc

    if not rows:
        logger.warning("CSV is empty (header only): %s", path)
    return rows


def _text(row: dict[str, str], key: str) -> Optional[str]:
    """Stripped cell text; empty → None."""
    v = (row.get(key) or "").strip()
    return v or None


def _number(row: dict[str, str], key: str, line_no: int) -> Optional[float]:
    raw = _text(row, key)
    value = parse_float(raw)
    if raw is not None and value is None:
        logger.debug("Row %d: unparsable %s=%r treated as missing", line_no, key, raw)
    return value


def _date(row: dict[str, str], key: str, line_no: int) -> Optional[date]:
    raw = _text(row, key)
    value = parse_date(raw)
    if raw is not None and value is None:
        logger.debug("Row %d: unparsable %s=%r treated as missing", line_no, key, raw)
    return value


def _row_to_project(row: dict[str, str], line_no: int) -> Project:
    return Project(
        project_id=_text(row, "project_id") or "",
        project_name=_text(row, "project_name") or "",
        start_date=_date(row, "start_date", line_no),
        planned_end=_date(row, "planned_end", line_no),
        actual_end=_date(row, "actual_end", line_no),
        planned_budget=_number(row, "planned_budget", line_no),
        actual_cost=_number(row, "actual_cost", line_no),
        completion_pct=_number(row, "completion_pct", line_no),
    )


def _row_to_change_order(row: dict[str, str], line_no: int) -> ChangeOrder:
    return ChangeOrder(
        project_id=_text(row, "project_id"),
        phase_id=_text(row, "phase_id"),
        co_id=_text(row, "co_id"),
        co_cost=_number(row, "co_cost", line_no),
        co_reason=normalize_reason(row.get("co_reason")),
        co_date=_date(row, "date", line_no),
    )
