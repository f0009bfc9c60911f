"""Working-day oracle and composable holiday calendars."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from datetime import date
from typing import Protocol

from time_analytics.services import holiday_tables
from time_analytics.services.periods import DateRange

HolidayPredicate = Callable[[date], bool]

# ISO weekday numbers: 1 = Monday .. 7 = Sunday.
DEFAULT_WEEKEND_DAYS = frozenset({6, 7})


def no_holidays(day: date) -> bool:
    return False


def normalize_weekend_days(days: Iterable[int] | None) -> frozenset[int]:
    """Validate the host's non-working weekdays.

    An unset configuration, or one marking all seven days as non-working,
    falls back to Saturday and Sunday. An empty list means a seven-day week.
    """

    if days is None:
        return DEFAULT_WEEKEND_DAYS
    normalized = frozenset(int(day) for day in days if 1 <= int(day) <= 7)
    if len(normalized) >= 7:
        return DEFAULT_WEEKEND_DAYS
    return normalized


def is_weekend(day: date, weekend_days: frozenset[int] = DEFAULT_WEEKEND_DAYS) -> bool:
    return day.isoweekday() in weekend_days


def is_working_day(
    day: date,
    weekend_days: frozenset[int] = DEFAULT_WEEKEND_DAYS,
    is_holiday: HolidayPredicate = no_holidays,
) -> bool:
    return not is_weekend(day, weekend_days) and not is_holiday(day)


def working_day_count(
    date_range: DateRange,
    weekend_days: frozenset[int] = DEFAULT_WEEKEND_DAYS,
    is_holiday: HolidayPredicate = no_holidays,
) -> int:
    """Number of working days in the inclusive range; 0 for an inverted range."""

    return sum(1 for day in date_range if is_working_day(day, weekend_days, is_holiday))


# ---------- Holiday sources ----------
class HolidaySource(Protocol):
    def is_holiday(self, day: date) -> bool: ...

    def holidays_between(self, date_range: DateRange) -> set[date]: ...


class FixedAnnualHolidays:
    """Holidays repeating on the same month/day every year."""

    def __init__(self, month_days: Iterable[tuple[int, int]]) -> None:
        self.month_days = frozenset(month_days)

    def is_holiday(self, day: date) -> bool:
        return (day.month, day.day) in self.month_days

    def holidays_between(self, date_range: DateRange) -> set[date]:
        return {day for day in date_range if self.is_holiday(day)}


class YearTableHolidays:
    """Explicit per-year dates. Years without a table contribute nothing."""

    def __init__(self, tables: Mapping[int, Iterable[date]]) -> None:
        self.tables = {year: frozenset(days) for year, days in tables.items()}

    def is_holiday(self, day: date) -> bool:
        return day in self.tables.get(day.year, frozenset())

    def holidays_between(self, date_range: DateRange) -> set[date]:
        if date_range.is_empty:
            return set()
        found: set[date] = set()
        for year in range(date_range.start.year, date_range.end.year + 1):
            found.update(day for day in self.tables.get(year, ()) if day in date_range)
        return found


class DateRangeHolidays:
    """Custom holidays spanning inclusive date ranges."""

    def __init__(self, ranges: Iterable[DateRange]) -> None:
        self.ranges = tuple(item for item in ranges if not item.is_empty)

    def is_holiday(self, day: date) -> bool:
        return any(day in item for item in self.ranges)

    def holidays_between(self, date_range: DateRange) -> set[date]:
        found: set[date] = set()
        for item in self.ranges:
            overlap = DateRange(max(item.start, date_range.start), min(item.end, date_range.end))
            found.update(overlap)
        return found


class HolidayCalendar:
    """OR-composition of holiday sources, usable directly as a predicate."""

    def __init__(self, sources: Iterable[HolidaySource] = ()) -> None:
        self.sources = tuple(sources)
        self._memo: dict[date, bool] = {}

    def __call__(self, day: date) -> bool:
        return self.is_holiday(day)

    def is_holiday(self, day: date) -> bool:
        cached = self._memo.get(day)
        if cached is None:
            cached = any(source.is_holiday(day) for source in self.sources)
            self._memo[day] = cached
        return cached

    def holidays_between(self, date_range: DateRange) -> list[date]:
        found: set[date] = set()
        for source in self.sources:
            found.update(source.holidays_between(date_range))
        return sorted(found)


def sri_lanka_calendar(custom_ranges: Iterable[DateRange] = ()) -> HolidayCalendar:
    return HolidayCalendar(
        [
            FixedAnnualHolidays(holiday_tables.FIXED_PUBLIC_HOLIDAYS),
            FixedAnnualHolidays(holiday_tables.MERCANTILE_HOLIDAYS),
            YearTableHolidays(holiday_tables.POYA_DAYS),
            YearTableHolidays(holiday_tables.ISLAMIC_HOLIDAYS),
            DateRangeHolidays(custom_ranges),
        ]
    )
