from __future__ import annotations

from datetime import date

from time_analytics.services.calendar import (
    DEFAULT_WEEKEND_DAYS,
    DateRangeHolidays,
    FixedAnnualHolidays,
    HolidayCalendar,
    YearTableHolidays,
    is_working_day,
    normalize_weekend_days,
    sri_lanka_calendar,
    working_day_count,
)
from time_analytics.services.periods import DateRange


def test_working_day_count_skips_weekend_and_holiday() -> None:
    holiday = date(2025, 2, 4)

    count = working_day_count(
        DateRange(date(2025, 2, 1), date(2025, 2, 7)),
        DEFAULT_WEEKEND_DAYS,
        lambda day: day == holiday,
    )

    # Feb 1-2 are Saturday/Sunday, Feb 4 is the holiday.
    assert count == 4


def test_working_day_count_is_zero_for_inverted_range() -> None:
    assert working_day_count(DateRange(date(2025, 2, 7), date(2025, 2, 1))) == 0


def test_working_day_count_is_bounded_and_monotone() -> None:
    start = date(2025, 3, 1)
    previous = 0
    for offset in range(0, 40):
        end = date.fromordinal(start.toordinal() + offset)
        date_range = DateRange(start, end)
        count = working_day_count(date_range)
        assert count <= date_range.days
        assert count >= previous
        previous = count


def test_is_working_day_respects_custom_weekend() -> None:
    friday = date(2025, 1, 10)

    assert is_working_day(friday) is True
    assert is_working_day(friday, frozenset({5, 6})) is False


def test_normalize_weekend_days_falls_back_on_degenerate_configuration() -> None:
    assert normalize_weekend_days([1, 2, 3, 4, 5, 6, 7]) == DEFAULT_WEEKEND_DAYS
    assert normalize_weekend_days(None) == DEFAULT_WEEKEND_DAYS
    assert normalize_weekend_days([5, 6, 9]) == frozenset({5, 6})


def test_empty_weekend_configuration_is_a_seven_day_week() -> None:
    weekend_days = normalize_weekend_days([])

    assert weekend_days == frozenset()
    assert working_day_count(DateRange(date(2025, 2, 1), date(2025, 2, 7)), weekend_days) == 7


def test_working_day_count_up_to_date_max() -> None:
    tail = DateRange(date(9999, 12, 25), date.max)

    assert working_day_count(tail, frozenset()) == 7
    assert sri_lanka_calendar([tail]).holidays_between(tail)[-1] == date.max


def test_year_table_ignores_unknown_years() -> None:
    source = YearTableHolidays({2025: [date(2025, 5, 12)]})

    assert source.is_holiday(date(2025, 5, 12)) is True
    assert source.is_holiday(date(2031, 5, 12)) is False
    assert source.holidays_between(DateRange(date(2030, 1, 1), date(2031, 12, 31))) == set()


def test_holiday_calendar_merges_sources_sorted_and_deduplicated() -> None:
    calendar = HolidayCalendar(
        [
            FixedAnnualHolidays([(5, 1)]),
            YearTableHolidays({2026: [date(2026, 5, 1), date(2026, 5, 30)]}),
            DateRangeHolidays([DateRange(date(2026, 4, 29), date(2026, 5, 2))]),
        ]
    )

    holidays = calendar.holidays_between(DateRange(date(2026, 4, 30), date(2026, 5, 31)))

    assert holidays == [date(2026, 4, 30), date(2026, 5, 1), date(2026, 5, 2), date(2026, 5, 30)]
    assert calendar(date(2026, 4, 29)) is True
    assert calendar(date(2026, 5, 3)) is False


def test_sri_lanka_calendar_covers_fixed_lunar_and_custom_days() -> None:
    calendar = sri_lanka_calendar([DateRange(date(2025, 7, 21), date(2025, 7, 22))])

    assert calendar.is_holiday(date(2025, 2, 4))  # Independence Day
    assert calendar.is_holiday(date(2025, 4, 14))  # New Year
    assert calendar.is_holiday(date(2025, 1, 13))  # Duruthu Poya
    assert calendar.is_holiday(date(2025, 9, 5))  # Milad-un-Nabi
    assert calendar.is_holiday(date(2025, 7, 22))  # custom range
    assert not calendar.is_holiday(date(2025, 7, 23))


def test_working_day_count_with_sri_lanka_calendar() -> None:
    calendar = sri_lanka_calendar()

    # January 2025 has 23 weekdays; Jan 13 (Poya) and Jan 15 (Thai Pongal) are holidays.
    assert working_day_count(DateRange(date(2025, 1, 1), date(2025, 1, 31)), DEFAULT_WEEKEND_DAYS, calendar) == 21
