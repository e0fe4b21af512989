"""
Loaded-data state shared by every view.

A ``PortfolioSnapshot`` is built once per load and replaced wholesale on
reload.  View recomputation never mutates it; filter changes simply call the
``recompute_*`` functions again with a new ``ViewFilter``.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional, Union

from portfolio_analytics.analytics.aggregate import available_years
from portfolio_analytics.models.project import ChangeOrder, Project

if TYPE_CHECKING:
    from portfolio_analytics.config import AppConfig

ALL_YEARS = "all"


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Immutable set of loaded rows.

    Attributes:
        projects:      Project rows in file order.
        change_orders: Change-order rows in file order.
        loaded_at:     UTC load time (provenance only).
    """

    projects:      tuple[Project, ...]
    change_orders: tuple[ChangeOrder, ...]
    loaded_at:     datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def years(self) -> list[int]:
        """Year-selector options, ascending."""
        return available_years(self.projects)

    @property
    def is_empty(self) -> bool:
        return not self.projects


@dataclass(frozen=True)
class ViewFilter:
    """UI control values.

    Attributes:
        year:    Selected start year; ``None`` means all years.
        horizon: Forecast horizon in years (predictive view).
        top_n:   Recommendation table length (prescriptive view).
    """

    year:    Optional[int] = None
    horizon: int = 3
    top_n:   int = 10


def parse_year_filter(value: Union[str, int, None]) -> Optional[int]:
    """Normalise a year-selector value.

    Args:
        value: ``"all"``, ``None``, ``""``, a year as int or as a string.

    Returns:
        The year, or ``None`` for "all years".

    Raises:
        ValueError: If ``value`` is neither "all" nor an integer year.
    """
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = str(value).strip()
    if not text or text.lower() == ALL_YEARS:
        return None
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"Year filter must be 'all' or a year, got {value!r}.") from None


def seeded_rng(config: AppConfig, seed: Optional[int] = None) -> random.Random:
    """Random source for one prescriptive recompute.

    An explicit ``seed`` wins; otherwise ``recommend.seed`` from config is
    used.  When both are ``None`` the generator is seeded from OS entropy, so
    repeated runs may order ties and sample impact/effort differently.
    """
    return random.Random(seed if seed is not None else config.recommend.seed)
