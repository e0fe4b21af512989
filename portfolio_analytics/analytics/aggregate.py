"""
Group-and-reduce rollups over project rows.

Every chart on the descriptive and diagnostic views is one of two shapes:

  Count-by-period   key = start year (or month of a selected year),
                    value = 1, reducer = sum.
  Mean-by-period    key = period, value = numeric field,
                    reducer = running (sum, count), finished as sum / count.

Both are expressed through ``group_and_reduce()``.

Exclusion rules
---------------
- A row whose key is ``None`` (unparsable ``start_date``) is skipped.  It is
  still counted by ``len(projects)`` for the "total projects" KPI; it just has
  no period to land in.
- A row whose value is ``None`` or non-finite is excluded from BOTH the
  running sum and the running count.  Zero-filling would drag means down.
- Empty input yields an empty mapping.  Downstream consumers (trend fit,
  charts) must accept zero-length series.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Hashable, Iterable, Optional, TypeVar

from portfolio_analytics.models.project import ChangeOrder, Project
from portfolio_analytics.utils.numeric import is_finite
from portfolio_analytics.utils.time_utils import month_index_of, year_of

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)
A = TypeVar("A")
R = TypeVar("R")

Accessor = Callable[[Project], Optional[float]]


# ── Reducers ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Reducer(Generic[A, R]):
    """Fold description: start value, step function, finaliser."""

    initial: Callable[[], A]
    step: Callable[[A, float], A]
    finish: Callable[[A], R]


SUM: Reducer[Any, Any] = Reducer(
    initial=lambda: 0,
    step=lambda acc, v: acc + v,
    finish=lambda acc: acc,
)

MEAN: Reducer[tuple[float, int], float] = Reducer(
    initial=lambda: (0.0, 0),
    step=lambda acc, v: (acc[0] + v, acc[1] + 1),
    finish=lambda acc: acc[0] / acc[1],
)


def group_and_reduce(
    rows:     Iterable[T],
    key_fn:   Callable[[T], Optional[K]],
    value_fn: Callable[[T], Optional[float]],
    reducer:  Reducer[A, R],
) -> dict[K, R]:
    """Group ``rows`` by ``key_fn`` and fold each group's values with ``reducer``.

    Args:
        rows:     Any iterable of rows.
        key_fn:   Period key for a row; ``None`` skips the row.
        value_fn: Numeric value for a row; ``None``/non-finite skips the row.
        reducer:  ``SUM``, ``MEAN`` or a custom ``Reducer``.

    Returns:
        Mapping key -> reduced value, in first-seen key order.  Keys whose
        every value was excluded do not appear.
    """
    accs: dict[K, A] = {}
    for row in rows:
        key = key_fn(row)
        if key is None:
            continue
        value = value_fn(row)
        if not is_finite(value):
            continue
        acc = accs[key] if key in accs else reducer.initial()
        accs[key] = reducer.step(acc, value)
    return {k: reducer.finish(acc) for k, acc in accs.items()}


# ── Period keys ───────────────────────────────────────────────────────────────


def start_year(project: Project) -> Optional[int]:
    return year_of(project.start_date)


def _month_key(year: int) -> Callable[[Project], Optional[int]]:
    def key(project: Project) -> Optional[int]:
        if start_year(project) != year:
            return None
        return month_index_of(project.start_date)
    return key


# ── Count / mean rollups ──────────────────────────────────────────────────────


def count_by_year(projects: Iterable[Project]) -> dict[int, int]:
    """Projects per start year, sorted by year."""
    counts = group_and_reduce(projects, start_year, lambda _: 1, SUM)
    return dict(sorted(counts.items()))


def count_by_month(projects: Iterable[Project], year: int) -> dict[int, int]:
    """Projects per month index (0 = Jan) within ``year``."""
    counts = group_and_reduce(projects, _month_key(year), lambda _: 1, SUM)
    return dict(sorted(counts.items()))


def mean_by_year(projects: Iterable[Project], accessor: Accessor) -> dict[int, float]:
    """Mean of ``accessor`` per start year, sorted by year."""
    means = group_and_reduce(projects, start_year, accessor, MEAN)
    return dict(sorted(means.items()))


def mean_by_month(
    projects: Iterable[Project],
    year:     int,
    accessor: Accessor,
) -> dict[int, float]:
    """Mean of ``accessor`` per month index within ``year``."""
    means = group_and_reduce(projects, _month_key(year), accessor, MEAN)
    return dict(sorted(means.items()))


def month_series(by_month: dict[int, float], fill: float = 0) -> list[float]:
    """Expand a month-index mapping into a 12-slot Jan..Dec list.

    Months with no data are filled with ``fill`` (0 by default, as the
    month-view charts draw empty months as zero-height bars).
    """
    return [by_month.get(m, fill) for m in range(12)]


# ── Scalar helpers ────────────────────────────────────────────────────────────


def sum_finite(values: Iterable[Optional[float]]) -> float:
    """Sum of the finite values; unusable entries are skipped."""
    return sum((v for v in values if is_finite(v)), 0.0)


def mean_finite(values: Iterable[Optional[float]]) -> Optional[float]:
    """Mean of the finite values, or ``None`` when there are none."""
    usable = [v for v in values if is_finite(v)]
    return sum(usable) / len(usable) if usable else None


# ── Year filter ───────────────────────────────────────────────────────────────


def available_years(projects: Iterable[Project]) -> list[int]:
    """Distinct start years, ascending — the options of the year selector."""
    return sorted({y for p in projects if (y := start_year(p)) is not None})


def filter_projects_by_year(
    projects: Iterable[Project],
    year:     Optional[int],
) -> list[Project]:
    """Projects starting in ``year``; all projects when ``year`` is ``None``."""
    if year is None:
        return list(projects)
    return [p for p in projects if start_year(p) == year]


def filter_change_orders_by_year(
    change_orders: Iterable[ChangeOrder],
    year:          Optional[int],
) -> list[ChangeOrder]:
    """Change orders dated in ``year``; all when ``year`` is ``None``.

    Filtering uses the change order's own date, not its project's start.
    Undated change orders drop out of a year-filtered slice.
    """
    if year is None:
        return list(change_orders)
    return [co for co in change_orders if year_of(co.co_date) == year]
