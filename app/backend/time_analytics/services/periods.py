"""Calendar period keys, period sequences and period labels."""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date, timedelta


class Granularity(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Weekday(enum.IntEnum):
    """Weekday numbers aligned with ``date.weekday()``."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def from_name(cls, name: str) -> Weekday:
        return cls[name.strip().upper()]


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive calendar range. ``start > end`` denotes an empty range."""

    start: date
    end: date

    @property
    def is_empty(self) -> bool:
        return self.start > self.end

    @property
    def days(self) -> int:
        if self.is_empty:
            return 0
        return (self.end - self.start).days + 1

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and self.start <= day <= self.end

    def __iter__(self) -> Iterator[date]:
        for offset in range(self.days):
            yield self.start + timedelta(days=offset)


@dataclass(frozen=True, order=True, slots=True)
class PeriodKey:
    """Canonical bucket key: the first day of the bucket.

    Equality and ordering use ``start`` only; a single computation always
    works with one granularity.
    """

    start: date
    granularity: Granularity = field(compare=False)

    @property
    def year(self) -> int:
        return self.start.year

    @property
    def month(self) -> int:
        return self.start.month

    @property
    def end(self) -> date:
        start = self.start
        if self.granularity is Granularity.WEEKLY:
            # The final week of year 9999 is cut off at date.max.
            return start + timedelta(days=min(6, (date.max - start).days))
        if self.granularity is Granularity.MONTHLY:
            if start.month == 12:
                return date(start.year, 12, 31)
            return date(start.year, start.month + 1, 1) - timedelta(days=1)
        if self.granularity is Granularity.YEARLY:
            return date(start.year, 12, 31)
        return start

    def next(self) -> PeriodKey:
        start = self.start
        if self.granularity is Granularity.DAILY:
            return PeriodKey(start + timedelta(days=1), self.granularity)
        if self.granularity is Granularity.WEEKLY:
            return PeriodKey(start + timedelta(days=7), self.granularity)
        if self.granularity is Granularity.MONTHLY:
            if start.month == 12:
                return PeriodKey(date(start.year + 1, 1, 1), self.granularity)
            return PeriodKey(date(start.year, start.month + 1, 1), self.granularity)
        return PeriodKey(date(start.year + 1, 1, 1), self.granularity)

    def isoformat(self) -> str:
        return self.start.isoformat()


def week_start_of(day: date, week_start: Weekday = Weekday.MONDAY) -> date:
    days_since_start = (day.weekday() - int(week_start)) % 7
    return day - timedelta(days=min(days_since_start, (day - date.min).days))


def period_key(day: date, granularity: Granularity, week_start: Weekday = Weekday.MONDAY) -> PeriodKey:
    """Map a date to the key of the bucket containing it."""

    if granularity is Granularity.WEEKLY:
        return PeriodKey(week_start_of(day, week_start), granularity)
    if granularity is Granularity.MONTHLY:
        return PeriodKey(date(day.year, day.month, 1), granularity)
    if granularity is Granularity.YEARLY:
        return PeriodKey(date(day.year, 1, 1), granularity)
    return PeriodKey(day, Granularity.DAILY)


def period_sequence(
    date_range: DateRange,
    granularity: Granularity,
    week_start: Weekday = Weekday.MONDAY,
) -> list[PeriodKey]:
    """Every period key touching the inclusive range, ascending."""

    if date_range.is_empty:
        return []
    current = period_key(date_range.start, granularity, week_start)
    last = period_key(date_range.end, granularity, week_start)
    keys: list[PeriodKey] = []
    while True:
        keys.append(current)
        if current >= last:
            break
        current = current.next()
    return keys


def period_bounds(key: PeriodKey) -> DateRange:
    """Full inclusive span of a bucket, ignoring any requested range."""

    return DateRange(key.start, key.end)


def clip_period(key: PeriodKey, date_range: DateRange) -> DateRange:
    """Intersection of a bucket with the requested range."""

    bounds = period_bounds(key)
    return DateRange(max(bounds.start, date_range.start), min(bounds.end, date_range.end))


# ---------- Labels ----------
def _iso_week_label(key: PeriodKey) -> str:
    # ISO numbering is taken from the Monday that falls inside the bucket.
    offset = (7 - key.start.weekday()) % 7
    if offset > (date.max - key.start).days:
        return _iso_label(key.start)
    return _iso_label(key.start + timedelta(days=offset))


def _iso_label(monday: date) -> str:
    iso_year, iso_week, _ = monday.isocalendar()
    return f"{iso_year}-{iso_week}"


def table_label(key: PeriodKey) -> str:
    """Descriptive label used for table rows and pivot periods."""

    if key.granularity is Granularity.WEEKLY:
        return _iso_week_label(key)
    if key.granularity is Granularity.MONTHLY:
        return key.start.strftime("%B %Y")
    if key.granularity is Granularity.YEARLY:
        return str(key.year)
    return key.start.strftime("%b %d, %Y")


def chart_label(key: PeriodKey) -> str:
    """Compact label used on chart axes."""

    if key.granularity is Granularity.MONTHLY:
        return key.start.strftime("%b %Y")
    if key.granularity is Granularity.YEARLY:
        return str(key.year)
    return key.start.strftime("%b %d, %Y")


def tooltip_label(key: PeriodKey, date_range: DateRange) -> str:
    """Weekly buckets show the in-range part of the week."""

    if key.granularity is not Granularity.WEEKLY:
        return table_label(key)
    visible = clip_period(key, date_range)
    return f"{visible.start.strftime('%m/%d/%Y')} to {visible.end.strftime('%m/%d/%Y')}"
