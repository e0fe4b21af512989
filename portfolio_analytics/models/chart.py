"""
Declarative chart description — the contract with any chart renderer.

A ``ChartSpec`` is ``{type, data: {labels, datasets: [...]}, options}``.
Colours, fonts and layout belong to the renderer; the core only fills the
data and names the axis/tooltip formatters to use (``"money"``,
``"number"``, ``"percent"``, ``"days"``), since callbacks cannot cross the
renderer boundary.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ChartType = Literal["line", "bar", "bubble", "scatter"]
FormatterName = Literal["money", "number", "percent", "days"]


class Dataset(BaseModel):
    """One series on a chart.

    ``data`` holds plain numbers for line/bar charts, ``{"x", "y"}`` dicts
    for scatter charts and ``{"x", "y", "r"}`` dicts for bubble charts.
    ``None`` entries are gaps (e.g. history vs forecast segments).
    ``hints`` carries renderer display hints such as ``tension``,
    ``border_dash`` or ``stack``.
    """

    model_config = ConfigDict(frozen=True)

    label: str
    data: list[Any]
    hints: dict[str, Any] = Field(default_factory=dict)


class ChartData(BaseModel):
    model_config = ConfigDict(frozen=True)

    labels: list[Any] = Field(default_factory=list)
    datasets: list[Dataset] = Field(default_factory=list)


class ChartSpec(BaseModel):
    """A complete chart request."""

    model_config = ConfigDict(frozen=True)

    type: ChartType
    title: str = ""
    data: ChartData
    options: dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form for JSON export or a JavaScript renderer."""
        return self.model_dump(mode="json")
