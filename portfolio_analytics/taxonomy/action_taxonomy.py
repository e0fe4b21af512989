"""
Prescriptive action taxonomy.

Four categorical actions are recommended per project.  Each carries an
impact/effort profile (uniform sampling bands on [0, 1]) used to place the
recommendation on the priority matrix.

``ACTION_ORDER`` is the fixed display order for the action-mix chart, so the
bars do not reshuffle between recomputes.

This module has NO imports from any other ``portfolio_analytics`` package.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ActionCategory(StrEnum):
    """Recommended intervention for a project."""

    SCOPE_ALIGNMENT = "Scope alignment"
    """Change orders dominate the cost pressure; re-baseline scope with the owner."""

    DESIGN_CLARIFICATION = "Design clarification"
    """Resolve open design questions before they become change orders."""

    SUPPLIER_REVIEW = "Supplier/subcontractor review"
    """Large job under moderate pressure; review supplier and sub performance."""

    SCHEDULE_TUNE_UP = "Schedule tune-up"
    """Schedule slip without matching cost overrun; re-sequence the work."""


@dataclass(frozen=True)
class ActionProfile:
    """Sampling bands for one action category.

    Attributes:
        impact: ``(low, high)`` band for expected impact.
        effort: ``(low, high)`` band for expected effort.
    """

    impact: tuple[float, float]
    effort: tuple[float, float]


ACTION_PROFILES: dict[ActionCategory, ActionProfile] = {
    ActionCategory.SCOPE_ALIGNMENT:      ActionProfile(impact=(0.75, 0.95), effort=(0.45, 0.70)),
    ActionCategory.DESIGN_CLARIFICATION: ActionProfile(impact=(0.55, 0.80), effort=(0.35, 0.55)),
    ActionCategory.SUPPLIER_REVIEW:      ActionProfile(impact=(0.45, 0.70), effort=(0.45, 0.65)),
    ActionCategory.SCHEDULE_TUNE_UP:     ActionProfile(impact=(0.35, 0.55), effort=(0.25, 0.45)),
}

ACTION_ORDER: tuple[ActionCategory, ...] = (
    ActionCategory.SCOPE_ALIGNMENT,
    ActionCategory.DESIGN_CLARIFICATION,
    ActionCategory.SUPPLIER_REVIEW,
    ActionCategory.SCHEDULE_TUNE_UP,
)
