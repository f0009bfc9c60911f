"""Named date-range presets used by the dashboards."""

from __future__ import annotations

import enum
from datetime import date, timedelta

from time_analytics.services.periods import DateRange, Weekday, week_start_of


class DatePreset(str, enum.Enum):
    TODAY = "today"
    THIS_WEEK = "this_week"
    LAST_WEEK = "last_week"
    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    LAST_3_MONTHS = "last_3_months"
    THIS_YEAR = "this_year"
    LAST_7_DAYS = "last_7_days"
    LAST_14_DAYS = "last_14_days"
    CUSTOM = "custom"


INDIVIDUAL_DEFAULT_PRESET = DatePreset.THIS_WEEK
TEAM_DEFAULT_PRESET = DatePreset.LAST_7_DAYS
INDIVIDUAL_CUSTOM_LOOKBACK_DAYS = 30
TEAM_CUSTOM_LOOKBACK_DAYS = 6


def _month_start(day: date) -> date:
    return day.replace(day=1)


def _month_end(day: date) -> date:
    if day.month == 12:
        return date(day.year, 12, 31)
    return date(day.year, day.month + 1, 1) - timedelta(days=1)


def _shift_months(day: date, months: int) -> date:
    """First day of the month ``months`` away from ``day``'s month."""

    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def resolve_date_range(
    preset: DatePreset,
    *,
    today: date,
    week_start: Weekday = Weekday.MONDAY,
    custom_from: date | None = None,
    custom_to: date | None = None,
    custom_lookback_days: int = INDIVIDUAL_CUSTOM_LOOKBACK_DAYS,
) -> DateRange:
    """Translate a preset into an inclusive range relative to ``today``.

    Custom ranges default a missing end to today and a missing start to
    ``custom_lookback_days`` before today. Inverted custom ranges are kept
    as given and yield empty results downstream.
    """

    if preset is DatePreset.TODAY:
        return DateRange(today, today)
    if preset is DatePreset.THIS_WEEK:
        start = week_start_of(today, week_start)
        return DateRange(start, start + timedelta(days=6))
    if preset is DatePreset.LAST_WEEK:
        start = week_start_of(today - timedelta(days=7), week_start)
        return DateRange(start, start + timedelta(days=6))
    if preset is DatePreset.THIS_MONTH:
        return DateRange(_month_start(today), _month_end(today))
    if preset is DatePreset.LAST_MONTH:
        start = _shift_months(today, -1)
        return DateRange(start, _month_end(start))
    if preset is DatePreset.LAST_3_MONTHS:
        start = _shift_months(today, -3)
        return DateRange(start, _month_end(_shift_months(today, -1)))
    if preset is DatePreset.THIS_YEAR:
        return DateRange(date(today.year, 1, 1), date(today.year, 12, 31))
    if preset is DatePreset.LAST_7_DAYS:
        return DateRange(today - timedelta(days=6), today)
    if preset is DatePreset.LAST_14_DAYS:
        return DateRange(today - timedelta(days=13), today)

    return DateRange(
        custom_from or today - timedelta(days=custom_lookback_days),
        custom_to or today,
    )
