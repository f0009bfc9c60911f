"""Period aggregation of time records and summary statistics."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from time_analytics.services.periods import (
    DateRange,
    Granularity,
    PeriodKey,
    Weekday,
    period_key,
    period_sequence,
)

ZERO = Decimal("0.00")
Q2 = Decimal("0.01")


def _q2(value: Decimal) -> Decimal:
    return value.quantize(Q2)


def _safe_div(numerator: Decimal, denominator: Decimal) -> Decimal:
    if denominator == ZERO:
        return ZERO
    return (numerator / denominator).quantize(Q2)


@dataclass(frozen=True, slots=True)
class TimeRecord:
    spent_on: date
    hours: Decimal
    actor_id: int
    project_id: int
    activity_id: int | None = None
    issue_id: int | None = None
    comment: str | None = None


@dataclass(slots=True)
class LabelDirectory:
    """Display names for the identifiers carried by time records."""

    actors: Mapping[int, str] = field(default_factory=dict)
    projects: Mapping[int, str] = field(default_factory=dict)
    activities: Mapping[int, str] = field(default_factory=dict)
    issues: Mapping[int, str] = field(default_factory=dict)

    def actor(self, actor_id: int | None) -> str | None:
        return self.actors.get(actor_id) if actor_id is not None else None

    def project(self, project_id: int | None) -> str | None:
        return self.projects.get(project_id) if project_id is not None else None

    def activity(self, activity_id: int | None) -> str | None:
        return self.activities.get(activity_id) if activity_id is not None else None

    def issue(self, issue_id: int | None) -> str | None:
        return self.issues.get(issue_id) if issue_id is not None else None


@dataclass(frozen=True, slots=True)
class AggregateBucket:
    period: PeriodKey
    total_hours: Decimal
    actor_count: int
    entry_count: int

    @classmethod
    def empty(cls, period: PeriodKey) -> AggregateBucket:
        return cls(period=period, total_hours=ZERO, actor_count=0, entry_count=0)


@dataclass(frozen=True, slots=True)
class SummaryStats:
    total: Decimal
    average: Decimal
    minimum: Decimal
    maximum: Decimal
    period_count: int

    def as_dict(self) -> dict[str, str | int]:
        return {
            "total": str(self.total),
            "average": str(self.average),
            "minimum": str(self.minimum),
            "maximum": str(self.maximum),
            "period_count": self.period_count,
        }


def aggregate(
    records: Iterable[TimeRecord],
    granularity: Granularity,
    week_start: Weekday = Weekday.MONDAY,
    *,
    descending: bool = False,
) -> list[AggregateBucket]:
    """Sum hours per period and count distinct actors per period."""

    hours: dict[PeriodKey, Decimal] = {}
    actors: dict[PeriodKey, set[int]] = {}
    entries: dict[PeriodKey, int] = {}
    for record in records:
        key = period_key(record.spent_on, granularity, week_start)
        hours[key] = hours.get(key, ZERO) + Decimal(record.hours)
        actors.setdefault(key, set()).add(record.actor_id)
        entries[key] = entries.get(key, 0) + 1

    return [
        AggregateBucket(
            period=key,
            total_hours=_q2(hours[key]),
            actor_count=len(actors[key]),
            entry_count=entries[key],
        )
        for key in sorted(hours, reverse=descending)
    ]


def fill_gaps(
    buckets: Iterable[AggregateBucket],
    date_range: DateRange,
    granularity: Granularity,
    week_start: Weekday = Weekday.MONDAY,
    *,
    descending: bool = False,
) -> list[AggregateBucket]:
    """One bucket per period key spanning the range; missing periods become zeros.

    Buckets outside the range are dropped.
    """

    by_period = {bucket.period: bucket for bucket in buckets}
    filled = [
        by_period.get(key) or AggregateBucket.empty(key)
        for key in period_sequence(date_range, granularity, week_start)
    ]
    if descending:
        filled.reverse()
    return filled


def summary_stats(
    buckets: Iterable[AggregateBucket],
    granularity: Granularity,
    *,
    working_days: int = 0,
) -> SummaryStats:
    """Sum, average, min and max over buckets.

    Daily averages divide by working days, coarser ones by the bucket count.
    Minimum and maximum consider periods that carry logged time.
    """

    bucket_list = list(buckets)
    total = _q2(sum((bucket.total_hours for bucket in bucket_list), ZERO))
    if granularity is Granularity.DAILY:
        average = _safe_div(total, Decimal(working_days))
    else:
        average = _safe_div(total, Decimal(len(bucket_list)))

    logged = [bucket.total_hours for bucket in bucket_list if bucket.entry_count > 0]
    return SummaryStats(
        total=total,
        average=average,
        minimum=_q2(min(logged)) if logged else ZERO,
        maximum=_q2(max(logged)) if logged else ZERO,
        period_count=len(bucket_list),
    )


def total_hours(records: Iterable[TimeRecord]) -> Decimal:
    return _q2(sum((Decimal(record.hours) for record in records), ZERO))


def per_member_average(total: Decimal, member_count: int) -> Decimal:
    return _safe_div(total, Decimal(member_count))
