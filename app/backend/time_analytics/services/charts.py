"""Chart-ready series and Chart.js payloads."""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from time_analytics.services.aggregation import ZERO, AggregateBucket

Q1 = Decimal("0.1")

PALETTE = (
    "#FF6384",
    "#36A2EB",
    "#FFCE56",
    "#4BC0C0",
    "#9966FF",
    "#FF9F40",
    "#8AC249",
    "#EA5F89",
    "#00D1B2",
    "#958AF7",
)

NO_DATA_LABEL = "No Data"


class ChartType(str, enum.Enum):
    BAR = "bar"
    LINE = "line"
    PIE = "pie"


@dataclass(slots=True)
class ChartSeries:
    labels: list[str] = field(default_factory=list)
    values: list[Decimal] = field(default_factory=list)
    tooltips: list[str] | None = None

    def __post_init__(self) -> None:
        if len(self.labels) != len(self.values):
            raise ValueError("labels and values must have the same length.")
        if self.tooltips is not None and len(self.tooltips) != len(self.labels):
            raise ValueError("tooltips must match labels in length.")

    @property
    def total(self) -> Decimal:
        return sum(self.values, ZERO)

    @property
    def is_empty(self) -> bool:
        return not self.labels


def to_series(
    items: Iterable[AggregateBucket | tuple[Any, Decimal]],
    label_formatter: Callable[[Any], str],
    *,
    tooltip_formatter: Callable[[Any], str] | None = None,
) -> ChartSeries:
    """Turn aggregate buckets or ``(key, value)`` pairs into a series, order preserved."""

    labels: list[str] = []
    values: list[Decimal] = []
    tooltips: list[str] | None = [] if tooltip_formatter is not None else None
    for item in items:
        if isinstance(item, AggregateBucket):
            key, value = item.period, item.total_hours
        else:
            key, value = item
        labels.append(label_formatter(key))
        values.append(value)
        if tooltips is not None:
            tooltips.append(tooltip_formatter(key))
    return ChartSeries(labels=labels, values=values, tooltips=tooltips)


def _percentage(value: Decimal, total: Decimal) -> Decimal:
    if total == ZERO:
        return Decimal("0.0")
    return (value / total * 100).quantize(Q1, rounding=ROUND_HALF_UP)


def to_proportional_labels(series: ChartSeries) -> list[str]:
    """Labels in the form ``"Label (61.5%, 8.0h)"``."""

    total = series.total
    return [
        f"{label} ({_percentage(value, total)}%, {Decimal(value).quantize(Q1, rounding=ROUND_HALF_UP)}h)"
        for label, value in zip(series.labels, series.values)
    ]


def generate_colors(count: int) -> list[str]:
    colors = list(PALETTE[:count])
    for index in range(count - len(PALETTE)):
        hue = (index * 137.5) % 360
        colors.append(f"hsl({hue}, 70%, 60%)")
    return colors


def _axis_options() -> dict[str, Any]:
    return {
        "y": {"beginAtZero": True, "title": {"display": True, "text": "Hours"}},
        "x": {"ticks": {"maxRotation": 45, "minRotation": 45}},
    }


def empty_chart(chart_type: ChartType) -> dict[str, Any]:
    return {
        "type": chart_type.value,
        "data": {
            "labels": [NO_DATA_LABEL],
            "datasets": [
                {
                    "data": [1],
                    "backgroundColor": ["rgba(200, 200, 200, 0.2)"],
                    "borderColor": ["rgba(200, 200, 200, 0.6)"],
                    "borderWidth": 1,
                }
            ],
        },
        "options": {
            "responsive": True,
            "maintainAspectRatio": False,
            "plugins": {"legend": {"display": False}},
        },
    }


def build_chart(series: ChartSeries, chart_type: ChartType, *, dataset_label: str = "Hours") -> dict[str, Any]:
    """Chart.js ``{type, data, options}`` payload for a series."""

    if series.is_empty:
        return empty_chart(chart_type)

    values = [float(value) for value in series.values]
    if chart_type is ChartType.PIE:
        return {
            "type": "pie",
            "data": {
                "labels": to_proportional_labels(series),
                "datasets": [
                    {
                        "data": values,
                        "backgroundColor": generate_colors(len(values)),
                        "borderWidth": 1,
                        "borderColor": "#fff",
                    }
                ],
            },
            "options": {
                "responsive": True,
                "maintainAspectRatio": False,
                "plugins": {"legend": {"position": "right", "labels": {"padding": 15, "boxWidth": 12}}},
                "total_hours": float(series.total),
            },
        }

    if chart_type is ChartType.LINE:
        dataset: dict[str, Any] = {
            "label": dataset_label,
            "data": values,
            "borderColor": "#36a2eb",
            "backgroundColor": "rgba(54, 162, 235, 0.1)",
            "fill": True,
            "tension": 0.2,
            "borderWidth": 2,
            "pointRadius": 3,
            "pointHoverRadius": 5,
        }
    else:
        dataset = {
            "label": dataset_label,
            "data": values,
            "backgroundColor": generate_colors(len(values)),
            "borderWidth": 1,
        }

    payload: dict[str, Any] = {
        "type": chart_type.value,
        "data": {"labels": list(series.labels), "datasets": [dataset]},
        "options": {
            "responsive": True,
            "maintainAspectRatio": False,
            "plugins": {"legend": {"display": False}},
            "scales": _axis_options(),
        },
    }
    if series.tooltips is not None:
        payload["data"]["tooltips"] = list(series.tooltips)
    return payload
