"""
Prescriptive recommendation output model.

A ``Recommendation`` couples one project with its chosen action, the sampled
impact/effort position on the priority matrix, the savings estimate and the
spread risk score.  Frozen: a new recompute produces new recommendations.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from portfolio_analytics.taxonomy.action_taxonomy import ActionCategory


class Recommendation(BaseModel):
    """One recommended action for one project.

    Attributes:
        project_id: Project identifier.
        project_name: Display name.
        category: Chosen ``ActionCategory``.
        impact: Sampled expected impact in [0, 1].
        effort: Sampled expected effort in [0, 1].
        savings: Estimated savings in currency units (>= 0).
        risk: Rounded spread risk score in [0, 100].
        overrun: Cost overrun (floored at zero).
        co_total: Sum of change-order cost for the project.
        plan: Planned budget as loaded (may be ``None``).
    """

    model_config = ConfigDict(frozen=True)

    project_id: str
    project_name: str
    category: ActionCategory
    impact: float
    effort: float
    savings: float
    risk: int
    overrun: float
    co_total: float
    plan: float | None = None

    @field_validator("impact", "effort")
    @classmethod
    def validate_unit_interval(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"impact/effort must be in [0, 1], got {v}.")
        return v

    @field_validator("risk")
    @classmethod
    def validate_risk_range(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"risk must be in [0, 100], got {v}.")
        return v
