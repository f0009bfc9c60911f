"""Period x dimension pivot tables."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from time_analytics.services.aggregation import ZERO, LabelDirectory, TimeRecord, _q2
from time_analytics.services.periods import DateRange, Granularity, PeriodKey, Weekday, period_key, period_sequence

logger = logging.getLogger(__name__)

NO_ACTIVITY = "No Activity"
NO_PROJECT = "No Project"
UNKNOWN_MEMBER = "Unknown Member"

DimensionExtractor = Callable[[TimeRecord], str]


@dataclass(slots=True)
class PivotTable:
    """Matrix of hours keyed by ``(period, label)``; absent cells read as zero.

    Totals are always derived from the matrix.
    """

    periods: list[PeriodKey]
    dimension_values: list[str]
    matrix: dict[tuple[PeriodKey, str], Decimal] = field(default_factory=dict)

    def cell(self, period: PeriodKey, label: str) -> Decimal:
        return self.matrix.get((period, label), ZERO)

    def row(self, period: PeriodKey) -> list[Decimal]:
        return [self.cell(period, label) for label in self.dimension_values]

    @property
    def period_totals(self) -> dict[PeriodKey, Decimal]:
        totals = {period: ZERO for period in self.periods}
        for (period, _label), hours in self.matrix.items():
            totals[period] = totals.get(period, ZERO) + hours
        return {period: _q2(value) for period, value in totals.items()}

    @property
    def dimension_totals(self) -> dict[str, Decimal]:
        totals = {label: ZERO for label in self.dimension_values}
        for (_period, label), hours in self.matrix.items():
            totals[label] = totals.get(label, ZERO) + hours
        return {label: _q2(value) for label, value in totals.items()}

    @property
    def grand_total(self) -> Decimal:
        return _q2(sum(self.matrix.values(), ZERO))

    @property
    def is_empty(self) -> bool:
        return not self.matrix

    def summary_view(self) -> list[tuple[str, Decimal]]:
        totals = self.dimension_totals
        return [(label, totals[label]) for label in self.dimension_values]

    def detailed_view(self) -> list[tuple[PeriodKey, Decimal]]:
        totals = self.period_totals
        return [(period, totals[period]) for period in self.periods]


def build_pivot(
    records: Iterable[TimeRecord],
    granularity: Granularity,
    week_start: Weekday,
    dimension_extractor: DimensionExtractor,
    *,
    date_range: DateRange | None = None,
) -> PivotTable:
    """Tabulate hours by period and dimension label.

    Labels are ordered by descending total; equal totals keep first-seen order.
    With ``date_range`` every period in the range is listed, including empty ones.
    """

    matrix: dict[tuple[PeriodKey, str], Decimal] = {}
    label_totals: dict[str, Decimal] = {}
    seen_periods: set[PeriodKey] = set()
    for record in records:
        key = period_key(record.spent_on, granularity, week_start)
        label = dimension_extractor(record)
        hours = Decimal(record.hours)
        matrix[(key, label)] = matrix.get((key, label), ZERO) + hours
        label_totals[label] = label_totals.get(label, ZERO) + hours
        seen_periods.add(key)

    dimension_values = sorted(label_totals, key=lambda label: -label_totals[label])
    if date_range is not None:
        periods = period_sequence(date_range, granularity, week_start)
        in_range = set(periods)
        periods.extend(sorted(seen_periods - in_range))
        periods.sort()
    else:
        periods = sorted(seen_periods)

    logger.info(
        "Pivot built: granularity=%s periods=%d dimension_values=%d",
        granularity.value,
        len(periods),
        len(dimension_values),
    )
    return PivotTable(
        periods=periods,
        dimension_values=dimension_values,
        matrix={cell: _q2(hours) for cell, hours in matrix.items()},
    )


# ---------- Dimension extractors ----------
def activity_dimension(labels: LabelDirectory) -> DimensionExtractor:
    def extract(record: TimeRecord) -> str:
        return labels.activity(record.activity_id) or NO_ACTIVITY

    return extract


def project_dimension(labels: LabelDirectory, *, umbrella: Mapping[int, str] | None = None) -> DimensionExtractor:
    """Project names; ids listed in ``umbrella`` collapse into their umbrella label."""

    grouped = umbrella or {}

    def extract(record: TimeRecord) -> str:
        if record.project_id in grouped:
            return grouped[record.project_id]
        return labels.project(record.project_id) or NO_PROJECT

    return extract


def member_dimension(labels: LabelDirectory) -> DimensionExtractor:
    def extract(record: TimeRecord) -> str:
        return labels.actor(record.actor_id) or UNKNOWN_MEMBER

    return extract
