"""
Tests for portfolio_analytics.ingestion.csv_loader — CSV import.

Covers:
  - load_projects(): valid file, lenient cells, blank names, header-only file
  - load_change_orders(): reason codes, "$" costs, blank project ids
  - DataFetchError on missing file, missing columns, empty file
  - load_snapshot(): both files joined; one failing file fails the snapshot
  - an unparsable start_date loads as None and stays out of year rollups
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from portfolio_analytics.exceptions import DataFetchError
from portfolio_analytics.ingestion.csv_loader import (
    REQUIRED_CO_COLUMNS,
    REQUIRED_PROJECT_COLUMNS,
    load_change_orders,
    load_projects,
    load_snapshot,
)
from portfolio_analytics.pipeline.state import PortfolioSnapshot
from portfolio_analytics.pipeline.views import recompute_descriptive


# ── Helpers ────────────────────────────────────────────────────────────────────

def _write_csv(tmp_path: Path, content: str, name: str = "projects.csv") -> Path:
    p = tmp_path / name
    p.write_text(content, encoding="utf-8")
    return p


PROJECT_HEADER = (
    "project_id,project_name,start_date,planned_end,actual_end,"
    "planned_budget,actual_cost,completion_pct\n"
)


# ── Required columns ───────────────────────────────────────────────────────────

def test_required_project_columns():
    assert {"project_id", "start_date", "planned_budget", "actual_cost"} <= REQUIRED_PROJECT_COLUMNS
    assert "project_name" not in REQUIRED_PROJECT_COLUMNS


def test_required_change_order_columns():
    assert REQUIRED_CO_COLUMNS == frozenset({"project_id", "co_cost"})


# ── load_projects ──────────────────────────────────────────────────────────────

class TestLoadProjects:
    def test_sample_file(self, sample_csv_dir):
        projects = load_projects(sample_csv_dir / "projects.csv")
        assert [p.project_id for p in projects] == ["A", "B", "C", "D"]
        a = projects[0]
        assert a.project_name == "Alpha Tower"
        assert a.start_date == date(2022, 3, 1)
        assert a.actual_end == date(2023, 1, 30)
        assert a.planned_budget == 1_000_000.0
        assert a.completion_pct == 100.0

    def test_in_flight_actual_end_is_none(self, sample_csv_dir):
        projects = load_projects(sample_csv_dir / "projects.csv")
        assert projects[2].actual_end is None

    def test_accepts_string_path(self, sample_csv_dir):
        assert len(load_projects(str(sample_csv_dir / "projects.csv"))) == 4

    def test_lenient_cells_become_none(self, tmp_path):
        path = _write_csv(
            tmp_path,
            PROJECT_HEADER + "X,Xray,not-a-date,2024-12-31,,lots,\"$1,250,000\",\n",
        )
        (p,) = load_projects(path)
        assert p.start_date is None
        assert p.planned_budget is None
        assert p.actual_cost == 1_250_000.0
        assert p.completion_pct is None

    def test_us_date_format(self, tmp_path):
        path = _write_csv(tmp_path, PROJECT_HEADER + "X,Xray,03/15/2023,2023-12-31,,100,100,\n")
        (p,) = load_projects(path)
        assert p.start_date == date(2023, 3, 15)

    def test_blank_name_gets_default(self, tmp_path):
        path = _write_csv(tmp_path, PROJECT_HEADER + "P9,,2023-01-01,2023-06-30,,100,100,\n")
        (p,) = load_projects(path)
        assert p.project_name == "Project P9"

    def test_optional_columns_absent(self, tmp_path):
        path = _write_csv(
            tmp_path,
            "project_id,start_date,planned_end,actual_end,planned_budget,actual_cost\n"
            "Q,2023-01-01,2023-06-30,,100,90\n",
        )
        (p,) = load_projects(path)
        assert p.completion_pct is None
        assert p.project_name == "Project Q"

    def test_bom_and_padded_headers(self, tmp_path):
        path = tmp_path / "projects.csv"
        path.write_text(
            "\ufeffproject_id, project_name ,start_date,planned_end,actual_end,"
            "planned_budget,actual_cost\nZ,Zulu,2023-01-01,2023-06-30,,100,90\n",
            encoding="utf-8",
        )
        (p,) = load_projects(path)
        assert p.project_id == "Z"
        assert p.project_name == "Zulu"

    def test_header_only_returns_empty(self, tmp_path):
        path = _write_csv(tmp_path, PROJECT_HEADER)
        assert load_projects(path) == []


class TestLoadProjectsErrors:
    def test_missing_file(self, tmp_path):
        with pytest.raises(DataFetchError, match="file not found"):
            load_projects(tmp_path / "nope.csv")

    def test_missing_required_column(self, tmp_path):
        path = _write_csv(tmp_path, "project_id,project_name\nA,Alpha\n")
        with pytest.raises(DataFetchError, match="missing required columns"):
            load_projects(path)

    def test_empty_file(self, tmp_path):
        path = _write_csv(tmp_path, "")
        with pytest.raises(DataFetchError, match="empty"):
            load_projects(path)

    def test_error_carries_path(self, tmp_path):
        missing = tmp_path / "nope.csv"
        with pytest.raises(DataFetchError) as exc_info:
            load_projects(missing)
        assert exc_info.value.path == missing


# ── load_change_orders ─────────────────────────────────────────────────────────

class TestLoadChangeOrders:
    def test_sample_file(self, sample_csv_dir):
        cos = load_change_orders(sample_csv_dir / "change_orders.csv")
        assert len(cos) == 5
        assert cos[0].co_reason == "Scope Change"
        assert cos[1].co_reason == "Unforeseen Conditions"
        assert cos[0].co_date == date(2022, 6, 1)

    def test_blank_project_id_and_reason(self, sample_csv_dir):
        cos = load_change_orders(sample_csv_dir / "change_orders.csv")
        assert cos[3].project_id is None
        assert cos[3].co_reason == "Unspecified"

    def test_blank_cost_is_none(self, sample_csv_dir):
        cos = load_change_orders(sample_csv_dir / "change_orders.csv")
        assert cos[4].co_cost is None

    def test_free_text_and_decimal_codes(self, tmp_path):
        path = _write_csv(
            tmp_path,
            "project_id,co_cost,co_reason\nA,\"$860,000\",Weather\nA,n/a,2.0\n",
            name="change_orders.csv",
        )
        first, second = load_change_orders(path)
        assert first.co_cost == 860_000.0
        assert first.co_reason == "Weather"
        assert second.co_cost is None
        assert second.co_reason == "Unforeseen Conditions"

    def test_missing_cost_column(self, tmp_path):
        path = _write_csv(tmp_path, "project_id,co_reason\nA,0\n", name="change_orders.csv")
        with pytest.raises(DataFetchError, match="co_cost"):
            load_change_orders(path)


# ── load_snapshot ──────────────────────────────────────────────────────────────

class TestLoadSnapshot:
    def test_joins_both_files(self, sample_csv_dir):
        snapshot = load_snapshot(
            sample_csv_dir / "projects.csv",
            sample_csv_dir / "change_orders.csv",
        )
        assert isinstance(snapshot, PortfolioSnapshot)
        assert len(snapshot.projects) == 4
        assert len(snapshot.change_orders) == 5
        assert snapshot.years == [2022, 2023, 2024]

    def test_one_missing_file_fails(self, sample_csv_dir):
        with pytest.raises(DataFetchError):
            load_snapshot(
                sample_csv_dir / "projects.csv",
                sample_csv_dir / "missing.csv",
            )

    def test_unparsable_start_date_reaches_descriptive_view(self, sample_csv_dir):
        projects_csv = sample_csv_dir / "projects.csv"
        with open(projects_csv, "a", encoding="utf-8") as f:
            f.write("E,Echo Yard,not-a-date,2025-06-30,,400000,500000,10\n")

        snapshot = load_snapshot(projects_csv, sample_csv_dir / "change_orders.csv")
        echo = snapshot.projects[-1]
        assert echo.project_id == "E"
        assert echo.start_date is None
        assert snapshot.years == [2022, 2023, 2024]

        view = recompute_descriptive(snapshot)
        assert view.total_projects == 5
        assert view.average_cost == pytest.approx(1_400_000.0)
        by_year = next(c for c in view.charts if c.title == "Projects by Year")
        assert by_year.data.labels == [2022, 2023, 2024]
        assert sum(by_year.data.datasets[0].data) == 4
