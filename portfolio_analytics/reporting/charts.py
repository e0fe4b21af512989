"""
Chart-spec builders.

Every chart the views emit goes through ``build_chart()`` so that the
``{type, data, options}`` shape is uniform across renderers.

Axis options
------------
``axis_options()`` returns a plain dict::

    {
      "legend":  {"position": "top"},
      "tooltip": {"format": "money"},
      "scales": {
        "x": {"stacked": False, "rotate_labels": 0, "title": None},
        "y": {"stacked": False, "begin_at_zero": True,
              "tick_format": "money", "title": None},
      },
    }

Formatter names resolve through ``formatters.format_value()``.  X-axis
labels rotate 45° once a chart has more than 12 categories.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from portfolio_analytics.models.chart import (
    ChartData,
    ChartSpec,
    ChartType,
    Dataset,
    FormatterName,
)

ROTATE_LABELS_AFTER = 12

# Display hints reused by several charts.
BAR_HINTS: dict[str, Any] = {"category_percentage": 0.9, "bar_percentage": 0.9}
LINE_HINTS: dict[str, Any] = {"tension": 0.25, "point_radius": 3}
FORECAST_HINTS: dict[str, Any] = {**LINE_HINTS, "border_dash": [6, 6]}


def should_rotate(labels: Sequence[Any]) -> bool:
    return len(labels) > ROTATE_LABELS_AFTER


def axis_options(
    y_format:       FormatterName = "number",
    tooltip_format: Optional[FormatterName] = None,
    rotate_x:       bool = False,
    stacked:        bool = False,
    x_title:        Optional[str] = None,
    y_title:        Optional[str] = None,
    index_axis:     Optional[str] = None,
    x_range:        Optional[tuple[float, float]] = None,
    y_range:        Optional[tuple[float, float]] = None,
) -> dict[str, Any]:
    """Declarative axis/tooltip options for one chart.

    Args:
        y_format:       Formatter for value-axis ticks.
        tooltip_format: Formatter for tooltips; defaults to ``y_format``.
        rotate_x:       Rotate category labels by 45°.
        stacked:        Stack datasets on both axes.
        x_title:        Optional x-axis title.
        y_title:        Optional y-axis title.
        index_axis:     ``"y"`` for horizontal bar charts.
        x_range:        Fixed ``(min, max)`` for the x axis.
        y_range:        Fixed ``(min, max)`` for the y axis.

    Returns:
        Options dict for ``ChartSpec.options``.
    """
    x_axis: dict[str, Any] = {
        "stacked": stacked,
        "rotate_labels": 45 if rotate_x else 0,
        "title": x_title,
    }
    y_axis: dict[str, Any] = {
        "stacked": stacked,
        "begin_at_zero": True,
        "tick_format": y_format,
        "title": y_title,
    }
    if x_range is not None:
        x_axis["min"], x_axis["max"] = x_range
    if y_range is not None:
        y_axis["min"], y_axis["max"] = y_range

    options: dict[str, Any] = {
        "legend": {"position": "top"},
        "tooltip": {"format": tooltip_format or y_format},
        "scales": {"x": x_axis, "y": y_axis},
    }
    if index_axis is not None:
        options["index_axis"] = index_axis
    return options


def dataset(label: str, data: Sequence[Any], **hints: Any) -> Dataset:
    return Dataset(label=label, data=list(data), hints=hints)


def build_chart(
    chart_type: ChartType,
    title:      str,
    labels:     Sequence[Any],
    datasets:   Sequence[Dataset],
    options:    dict[str, Any],
) -> ChartSpec:
    """Assemble a ``ChartSpec``."""
    return ChartSpec(
        type=chart_type,
        title=title,
        data=ChartData(labels=list(labels), datasets=list(datasets)),
        options=options,
    )


def history_with_forecast(
    title:          str,
    history_label:  str,
    history:        Sequence[tuple[int, float]],
    forecast:       Sequence[tuple[int, float]],
    y_format:       FormatterName,
) -> ChartSpec:
    """Line chart with an observed segment and a dashed forecast segment.

    Both datasets span the full label range; each is ``None`` where the
    other segment applies.
    """
    labels = [p for p, _ in history] + [p for p, _ in forecast]
    hist_values = [v for _, v in history] + [None] * len(forecast)
    fc_values = [None] * len(history) + [v for _, v in forecast]
    return build_chart(
        "line",
        title,
        labels,
        [
            dataset(history_label, hist_values, **LINE_HINTS),
            dataset("Forecast", fc_values, **FORECAST_HINTS),
        ],
        axis_options(y_format=y_format),
    )
