"""
Project and change-order row models.

Both models are frozen: rows are loaded once into a snapshot and every
downstream transformation produces new structures.

Missing values
--------------
Every numeric and date field is ``Optional``.  ``None`` means "missing or
unparsable" and is *excluded* from aggregates; it is never read as zero.
``actual_end = None`` specifically marks an in-flight project.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, model_validator

MISSING_PROJECT_KEY = "__missing__"
"""Bucket key for change orders that carry no project reference."""


class Project(BaseModel):
    """One row of ``projects.csv``.

    Attributes:
        project_id: Project identifier (string; not necessarily numeric).
        project_name: Display name; defaults to ``"Project <id>"`` when blank.
        start_date: Project start; keys every year/month rollup.
        planned_end: Baseline completion date.
        actual_end: Actual completion date, or ``None`` while in flight.
        planned_budget: Baseline budget.  ``None``/<= 0 excludes the row from
            ratio-based metrics.
        actual_cost: Actual cost to date.
        completion_pct: Percent complete as exported (not used in scoring).
    """

    model_config = ConfigDict(frozen=True)

    project_id: str
    project_name: str = ""
    start_date: Optional[date] = None
    planned_end: Optional[date] = None
    actual_end: Optional[date] = None
    planned_budget: Optional[float] = None
    actual_cost: Optional[float] = None
    completion_pct: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def default_project_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not str(data.get("project_name") or "").strip():
            data = {**data, "project_name": f"Project {data.get('project_id')}"}
        return data

    @property
    def is_in_flight(self) -> bool:
        """True while the project has no actual completion date."""
        return self.actual_end is None


class ChangeOrder(BaseModel):
    """One row of ``change_orders.csv``.

    Attributes:
        project_id: FK to ``Project.project_id``; may reference an unknown
            project, or be ``None`` (aggregated under ``MISSING_PROJECT_KEY``).
        phase_id: Phase identifier, passed through for display.
        co_id: Change-order identifier.
        co_cost: Cost of the change order; ``None`` when unparsable.
        co_reason: Normalised reason label (see ``reason_taxonomy``).
        co_date: Date the change order was raised.
    """

    model_config = ConfigDict(frozen=True)

    project_id: Optional[str] = None
    phase_id: Optional[str] = None
    co_id: Optional[str] = None
    co_cost: Optional[float] = None
    co_reason: str = "Unspecified"
    co_date: Optional[date] = None

    @property
    def project_key(self) -> str:
        """Aggregation key: the project id, or the missing-reference bucket."""
        return self.project_id or MISSING_PROJECT_KEY
