from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from time_analytics.services.aggregation import AggregateBucket
from time_analytics.services.charts import (
    PALETTE,
    ChartSeries,
    ChartType,
    build_chart,
    generate_colors,
    to_proportional_labels,
    to_series,
)
from time_analytics.services.periods import DateRange, Granularity, PeriodKey, chart_label, tooltip_label


def test_proportional_labels() -> None:
    series = ChartSeries(labels=["Development", "Testing"], values=[Decimal("8"), Decimal("5")])

    assert to_proportional_labels(series) == ["Development (61.5%, 8.0h)", "Testing (38.5%, 5.0h)"]


def test_proportional_percentages_sum_to_hundred() -> None:
    series = ChartSeries(labels=["a", "b", "c"], values=[Decimal("1"), Decimal("1"), Decimal("1")])

    percentages = [Decimal(label.split("(")[1].split("%")[0]) for label in to_proportional_labels(series)]

    assert abs(sum(percentages) - Decimal("100")) <= Decimal("0.1") * len(percentages)


def test_proportional_labels_with_zero_total() -> None:
    series = ChartSeries(labels=["Idle"], values=[Decimal("0")])

    assert to_proportional_labels(series) == ["Idle (0.0%, 0.0h)"]


def test_series_length_invariant() -> None:
    with pytest.raises(ValueError):
        ChartSeries(labels=["a"], values=[])


def test_to_series_from_buckets_with_weekly_tooltips() -> None:
    date_range = DateRange(date(2025, 1, 1), date(2025, 1, 12))
    buckets = [
        AggregateBucket(PeriodKey(date(2024, 12, 30), Granularity.WEEKLY), Decimal("4.00"), 1, 2),
        AggregateBucket(PeriodKey(date(2025, 1, 6), Granularity.WEEKLY), Decimal("7.00"), 1, 1),
    ]

    series = to_series(buckets, chart_label, tooltip_formatter=lambda key: tooltip_label(key, date_range))

    assert series.labels == ["Dec 30, 2024", "Jan 06, 2025"]
    assert series.values == [Decimal("4.00"), Decimal("7.00")]
    assert series.tooltips == ["01/01/2025 to 01/05/2025", "01/06/2025 to 01/12/2025"]


def test_generate_colors_extends_palette_with_hsl() -> None:
    colors = generate_colors(12)

    assert colors[:10] == list(PALETTE)
    assert colors[10] == "hsl(0.0, 70%, 60%)"
    assert colors[11] == "hsl(137.5, 70%, 60%)"
    assert generate_colors(3) == list(PALETTE[:3])


def test_pie_chart_payload_carries_total_hours() -> None:
    series = to_series([("Development", Decimal("8")), ("Testing", Decimal("5"))], str)

    payload = build_chart(series, ChartType.PIE)

    assert payload["type"] == "pie"
    assert payload["options"]["total_hours"] == 13.0
    assert payload["options"]["plugins"]["legend"]["position"] == "right"
    assert payload["data"]["labels"][0] == "Development (61.5%, 8.0h)"


def test_line_chart_payload() -> None:
    series = to_series([("Jan 2025", Decimal("3.5"))], str)

    payload = build_chart(series, ChartType.LINE)

    dataset = payload["data"]["datasets"][0]
    assert dataset["label"] == "Hours"
    assert dataset["data"] == [3.5]
    assert dataset["borderColor"] == "#36a2eb"
    assert payload["options"]["scales"]["y"]["beginAtZero"] is True


def test_empty_series_renders_placeholder() -> None:
    payload = build_chart(ChartSeries(), ChartType.BAR)

    assert payload["type"] == "bar"
    assert payload["data"]["labels"] == ["No Data"]
    assert payload["data"]["datasets"][0]["data"] == [1]
