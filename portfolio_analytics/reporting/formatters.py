"""
ASCII terminal formatters for CLI reporting commands.

All formatters accept view models / record lists and return plain
multi-line strings suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Number formats
--------------
The same named formatters a chart renderer resolves from
``ChartSpec.options``::

  money    ->  $1.2M        (abbreviated)
  number   ->  1.2K         (abbreviated; plain integer below 1,000)
  percent  ->  12.5%        (input is a ratio, 0.125)
  days     ->  45 days

Missing values (``None``/NaN) print as ``N/A`` everywhere except axis ticks,
where ``abbr_number`` prints ``0``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence

from portfolio_analytics.models.chart import ChartSpec
from portfolio_analytics.models.recommendation import Recommendation
from portfolio_analytics.utils.numeric import is_finite, round_half_up

if TYPE_CHECKING:
    from portfolio_analytics.pipeline.views import Kpi

NA = "N/A"

_ABBREVIATIONS: tuple[tuple[float, str], ...] = (
    (1e12, "T"),
    (1e9,  "B"),
    (1e6,  "M"),
    (1e3,  "K"),
)


# ── Scalar formatters ────────────────────────────────────────────────────────


def abbr_number(n: Optional[float]) -> str:
    """Compact number: ``1234567 -> "1.2M"``; non-finite -> ``"0"``."""
    if not is_finite(n):
        return "0"
    for size, suffix in _ABBREVIATIONS:
        if abs(n) >= size:
            return f"{n / size:.1f}{suffix}"
    return str(round_half_up(n))


def money_abbr(n: Optional[float]) -> str:
    return f"${abbr_number(n)}"


def money_str(n: Optional[float]) -> str:
    """Whole-dollar amount with thousands separators, e.g. ``$1,234,568``."""
    if not is_finite(n):
        return NA
    return f"${round_half_up(n):,}"


def pct_str(ratio: Optional[float], decimals: int = 1) -> str:
    """Ratio as a percentage string: ``0.125 -> "12.5%"``."""
    if not is_finite(ratio):
        return NA
    return f"{ratio * 100:.{decimals}f}%"


def days_str(days: Optional[float]) -> str:
    if not is_finite(days):
        return NA
    return f"{round_half_up(days)} days"


def format_value(formatter: str, value: Any) -> str:
    """Apply a named formatter (``money``/``number``/``percent``/``days``).

    Args:
        formatter: Formatter name as used in chart options and KPI tiles.
        value:     Value to render.

    Returns:
        Display string.

    Raises:
        ValueError: On an unknown formatter name.
    """
    if formatter == "money":
        return money_str(value)
    if formatter == "number":
        return NA if not is_finite(value) else f"{round_half_up(value):,}"
    if formatter == "percent":
        return pct_str(value)
    if formatter == "days":
        return days_str(value)
    raise ValueError(f"Unknown formatter {formatter!r}")


def _tick(formatter: str, value: Any) -> str:
    """Abbreviated rendering used inside chart tables."""
    if value is None:
        return "-"
    if formatter == "money":
        return money_abbr(value)
    if formatter == "number":
        return abbr_number(value)
    return format_value(formatter, value)


# ── Building blocks ───────────────────────────────────────────────────────────


def format_header(title: str, subtitle: str = "") -> str:
    lines = ["", f"=== {title} ==="]
    if subtitle:
        lines.append(f"  {subtitle}")
    return "\n".join(lines)


def format_kpis(kpis: Sequence["Kpi"]) -> str:
    """One KPI per line, labels padded to a common width::

        Total Projects : 42
        Average Cost   : $1,250,000
    """
    if not kpis:
        return "  (no KPIs)"
    width = max(len(k.label) for k in kpis)
    return "\n".join(
        f"  {k.label:<{width}} : {format_value(k.formatter, k.value)}" for k in kpis
    )


def format_chart_table(spec: ChartSpec, max_rows: int = 50) -> str:
    """Render a category chart as a label / dataset-column table.

    Scatter and bubble charts have no category axis; they print a point
    count instead.
    """
    lines = [f"  [{spec.title or spec.type}]"]
    datasets = spec.data.datasets

    if spec.type in ("scatter", "bubble"):
        for ds in datasets:
            lines.append(f"    {ds.label}: {len(ds.data)} point(s)")
        return "\n".join(lines)

    labels = spec.data.labels
    if not labels:
        lines.append("    (no data)")
        return "\n".join(lines)

    fmt = spec.options.get("tooltip", {}).get("format", "number")
    label_w = max(8, max(len(str(lb)) for lb in labels))
    col_w = max(12, max(len(ds.label) for ds in datasets)) if datasets else 12

    header = f"    {'':<{label_w}}" + "".join(f"  {ds.label:>{col_w}}" for ds in datasets)
    lines.append(header)
    lines.append("    " + "-" * (len(header) - 4))
    for i, label in enumerate(labels[:max_rows]):
        cells = "".join(
            f"  {_tick(fmt, ds.data[i] if i < len(ds.data) else None):>{col_w}}"
            for ds in datasets
        )
        lines.append(f"    {str(label):<{label_w}}{cells}")
    if len(labels) > max_rows:
        lines.append(f"    … and {len(labels) - max_rows} more")
    return "\n".join(lines)


def format_recommendation_table(recs: Sequence[Recommendation]) -> str:
    """Top-N recommendation table::

        Project                 Recommended Action              Risk   Est. Savings
        ---------------------------------------------------------------------------
        Harbor Tower            Scope alignment                   97       $84,000
    """
    if not recs:
        return "  (no recommendations)"
    name_w = max(7, min(30, max(len(r.project_name) for r in recs)))
    header = (
        f"  {'Project':<{name_w}}  {'Recommended Action':<30}  "
        f"{'Risk':>4}  {'Est. Savings':>13}"
    )
    lines = [header, "  " + "-" * (len(header) - 2)]
    for r in recs:
        name = r.project_name[:name_w]
        lines.append(
            f"  {name:<{name_w}}  {r.category.value:<30}  "
            f"{r.risk:>4}  {money_str(r.savings):>13}"
        )
    return "\n".join(lines)


# ── View reports ──────────────────────────────────────────────────────────────


def format_view_report(
    title:    str,
    subtitle: str,
    kpis:     Sequence["Kpi"],
    charts:   Sequence[ChartSpec],
    extra:    str = "",
) -> str:
    """Header, KPI block, then one table per chart.

    Args:
        title:    Report heading.
        subtitle: Filter description (year, horizon, top-N).
        kpis:     KPI tiles of the view.
        charts:   Charts of the view, in display order.
        extra:    Optional trailing block (e.g. the recommendation table).

    Returns:
        Multi-line string.
    """
    parts = [format_header(title, subtitle), "", format_kpis(kpis)]
    for spec in charts:
        parts.append("")
        parts.append(format_chart_table(spec))
    if extra:
        parts.append("")
        parts.append(extra)
    return "\n".join(parts)
