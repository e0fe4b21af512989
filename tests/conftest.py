"""
Shared pytest fixtures for the Portfolio Analytics test suite.

Provides:
  - ``sample_projects`` / ``sample_change_orders``: a small four-project
    portfolio spanning 2022-2024 with two completed projects, two in-flight
    projects and one unassigned change order.
  - ``sample_snapshot``: the two lists wrapped in a ``PortfolioSnapshot``.
  - ``sample_csv_dir``: the same portfolio written as CSV files under
    ``tmp_path``.
  - ``config_file``: a minimal TOML config under ``tmp_path``.

Portfolio at a glance::

    id  start       planned_end  actual_end  budget     actual     slip
    A   2022-03-01  2022-12-31   2023-01-30  1,000,000  1,100,000  +30
    B   2022-07-15  2023-06-30   2023-06-20  2,000,000  1,900,000  -10
    C   2023-02-01  2023-12-31   (in flight)   500,000    200,000
    D   2024-05-10  2025-01-31   (in flight) 3,000,000  3,300,000
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from portfolio_analytics.models.project import ChangeOrder, Project
from portfolio_analytics.pipeline.state import PortfolioSnapshot

PROJECTS_CSV = """\
project_id,project_name,start_date,planned_end,actual_end,planned_budget,actual_cost,completion_pct
A,Alpha Tower,2022-03-01,2022-12-31,2023-01-30,1000000,1100000,100
B,Bravo Clinic,2022-07-15,2023-06-30,2023-06-20,2000000,1900000,100
C,Charlie Bridge,2023-02-01,2023-12-31,,500000,200000,40
D,Delta Depot,2024-05-10,2025-01-31,,3000000,3300000,85
"""

CHANGE_ORDERS_CSV = """\
project_id,phase_id,co_id,co_cost,co_reason,date
A,PH1,CO-1,40000,0,2022-06-01
A,PH2,CO-2,10000,2,2022-09-01
B,PH1,CO-3,5000,1,2023-01-10
,PH1,CO-4,7000,,2023-03-03
D,PH1,CO-5,,3,2024-07-01
"""


# ── Sample domain objects ─────────────────────────────────────────────────────

@pytest.fixture
def sample_projects() -> list[Project]:
    return [
        Project(
            project_id="A",
            project_name="Alpha Tower",
            start_date=date(2022, 3, 1),
            planned_end=date(2022, 12, 31),
            actual_end=date(2023, 1, 30),
            planned_budget=1_000_000.0,
            actual_cost=1_100_000.0,
            completion_pct=100.0,
        ),
        Project(
            project_id="B",
            project_name="Bravo Clinic",
            start_date=date(2022, 7, 15),
            planned_end=date(2023, 6, 30),
            actual_end=date(2023, 6, 20),
            planned_budget=2_000_000.0,
            actual_cost=1_900_000.0,
            completion_pct=100.0,
        ),
        Project(
            project_id="C",
            project_name="Charlie Bridge",
            start_date=date(2023, 2, 1),
            planned_end=date(2023, 12, 31),
            planned_budget=500_000.0,
            actual_cost=200_000.0,
            completion_pct=40.0,
        ),
        Project(
            project_id="D",
            project_name="Delta Depot",
            start_date=date(2024, 5, 10),
            planned_end=date(2025, 1, 31),
            planned_budget=3_000_000.0,
            actual_cost=3_300_000.0,
            completion_pct=85.0,
        ),
    ]


@pytest.fixture
def sample_change_orders() -> list[ChangeOrder]:
    return [
        ChangeOrder(project_id="A", phase_id="PH1", co_id="CO-1", co_cost=40_000.0,
                    co_reason="Scope Change", co_date=date(2022, 6, 1)),
        ChangeOrder(project_id="A", phase_id="PH2", co_id="CO-2", co_cost=10_000.0,
                    co_reason="Unforeseen Conditions", co_date=date(2022, 9, 1)),
        ChangeOrder(project_id="B", phase_id="PH1", co_id="CO-3", co_cost=5_000.0,
                    co_reason="Client Request", co_date=date(2023, 1, 10)),
        ChangeOrder(project_id=None, phase_id="PH1", co_id="CO-4", co_cost=7_000.0,
                    co_reason="Unspecified", co_date=date(2023, 3, 3)),
        ChangeOrder(project_id="D", phase_id="PH1", co_id="CO-5", co_cost=None,
                    co_reason="Design Revision", co_date=date(2024, 7, 1)),
    ]


@pytest.fixture
def sample_snapshot(
    sample_projects: list[Project],
    sample_change_orders: list[ChangeOrder],
) -> PortfolioSnapshot:
    return PortfolioSnapshot(
        projects=tuple(sample_projects),
        change_orders=tuple(sample_change_orders),
    )


# ── File fixtures ─────────────────────────────────────────────────────────────

@pytest.fixture
def sample_csv_dir(tmp_path: Path) -> Path:
    """Directory holding ``projects.csv`` and ``change_orders.csv``."""
    (tmp_path / "projects.csv").write_text(PROJECTS_CSV, encoding="utf-8")
    (tmp_path / "change_orders.csv").write_text(CHANGE_ORDERS_CSV, encoding="utf-8")
    return tmp_path


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Minimal TOML config with a fixed seed and no spread jitter."""
    cfg_dir = tmp_path / "config"
    cfg_dir.mkdir()
    path = cfg_dir / "test.toml"
    path.write_text(
        "[data]\n"
        f'output_dir = "{(tmp_path / "outputs").as_posix()}"\n'
        "\n"
        "[risk]\n"
        "spread_jitter = 0.0\n"
        "\n"
        "[recommend]\n"
        "seed = 42\n"
        "\n"
        "[logging]\n"
        'level = "WARNING"\n',
        encoding="utf-8",
    )
    return path
