"""
Change-order diagnostics.

Keyed rollups
-------------
``co_totals_per_project`` and ``co_counts_per_project`` key on
``ChangeOrder.project_key``: the project id, or ``"__missing__"`` for rows
without one.  The foreign key is not validated; totals for unknown projects
are kept and simply never looked up.

Overrun attribution
-------------------
For each over-budget project in the slice::

    overrun      = max(actual − planned, 0)
    co_driven    = min(overrun, change-order total)
    other        = overrun − co_driven

summed per start year (all-years view) or per month (single-year view).
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional

from portfolio_analytics.analytics.aggregate import SUM, group_and_reduce
from portfolio_analytics.analytics.derived import cost_overrun
from portfolio_analytics.models.project import ChangeOrder, Project
from portfolio_analytics.taxonomy.reason_taxonomy import ChangeOrderReason
from portfolio_analytics.utils.numeric import is_finite
from portfolio_analytics.utils.time_utils import MONTH_LABELS, month_index_of, year_of

FREQUENCY_BIN_LABELS: tuple[str, ...] = ("0", "1", "2", "3", "4", "5+")


def co_totals_per_project(change_orders: Iterable[ChangeOrder]) -> dict[str, float]:
    """Summed ``co_cost`` per project key; unusable costs add nothing."""
    return group_and_reduce(
        change_orders,
        lambda co: co.project_key,
        lambda co: co.co_cost if is_finite(co.co_cost) else 0.0,
        SUM,
    )


def co_counts_per_project(change_orders: Iterable[ChangeOrder]) -> dict[str, int]:
    """Number of change orders per project key (cost not required)."""
    return group_and_reduce(change_orders, lambda co: co.project_key, lambda _: 1, SUM)


def top_reasons(
    change_orders: Iterable[ChangeOrder],
    top_n:         int = 7,
) -> list[tuple[str, int]]:
    """Most frequent change-order reasons, descending.

    Ties keep first-seen order.  Blank reasons count as ``"Unspecified"``.

    Returns:
        Up to ``top_n`` ``(reason, count)`` pairs.
    """
    counts: Counter[str] = Counter()
    for co in change_orders:
        reason = (co.co_reason or "").strip() or ChangeOrderReason.UNSPECIFIED.value
        counts[reason] += 1
    return counts.most_common(top_n)


def co_frequency_histogram(
    projects:      Iterable[Project],
    change_orders: Iterable[ChangeOrder],
) -> list[int]:
    """Histogram of change-order counts per project in the slice.

    Every project is represented, including those with zero change orders.
    Bins follow ``FREQUENCY_BIN_LABELS``; five or more share the last bin.
    """
    counts = co_counts_per_project(change_orders)
    hist = [0] * len(FREQUENCY_BIN_LABELS)
    last = len(hist) - 1
    for p in projects:
        n = counts.get(p.project_id, 0)
        hist[min(n, last)] += 1
    return hist


@dataclass(frozen=True)
class OverrunAttribution:
    """Stacked-bar series for CO-driven vs other overrun.

    Attributes:
        labels:       Year numbers, or month labels in single-year mode.
        co_values:    Overrun attributed to change orders, per label.
        other_values: Remaining overrun, per label.
    """

    labels:       list
    co_values:    list[float]
    other_values: list[float]


def overrun_attribution(
    projects:      Iterable[Project],
    change_orders: Iterable[ChangeOrder],
    year:          Optional[int] = None,
) -> OverrunAttribution:
    """Split each over-budget project's overrun into CO-driven and other.

    Args:
        projects:      Project slice (already year-filtered by the caller).
        change_orders: Change-order slice used for the CO totals.
        year:          ``None`` buckets by start year; a year buckets by month.

    Returns:
        ``OverrunAttribution`` series.  In month mode all 12 months appear.
    """
    co_totals = co_totals_per_project(change_orders)
    buckets: dict[int, list[float]] = {}

    for p in projects:
        if not is_finite(p.planned_budget) or not is_finite(p.actual_cost):
            continue
        overrun = cost_overrun(p)
        if overrun <= 0:
            continue
        key = year_of(p.start_date) if year is None else month_index_of(p.start_date)
        if key is None:
            continue
        attr_co = min(overrun, co_totals.get(p.project_id, 0.0))
        attr_other = max(overrun - attr_co, 0.0)
        bucket = buckets.setdefault(key, [0.0, 0.0])
        bucket[0] += attr_co
        bucket[1] += attr_other

    if year is None:
        keys = sorted(buckets)
        return OverrunAttribution(
            labels=keys,
            co_values=[buckets[k][0] for k in keys],
            other_values=[buckets[k][1] for k in keys],
        )

    return OverrunAttribution(
        labels=list(MONTH_LABELS),
        co_values=[buckets.get(m, [0.0, 0.0])[0] for m in range(12)],
        other_values=[buckets.get(m, [0.0, 0.0])[1] for m in range(12)],
    )
