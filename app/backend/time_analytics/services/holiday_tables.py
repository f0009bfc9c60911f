"""Sri Lankan public, mercantile and lunar holiday tables.

Poya and Islamic holidays follow the lunar calendar and are published per
year; years missing here have no lunar holidays on record.
"""

from __future__ import annotations

from datetime import date

FIXED_PUBLIC_HOLIDAYS: tuple[tuple[int, int], ...] = (
    (2, 4),  # Independence Day
    (5, 1),  # May Day
    (12, 25),  # Christmas Day
    (12, 31),  # Special Bank Holiday
)

MERCANTILE_HOLIDAYS: tuple[tuple[int, int], ...] = (
    (1, 15),  # Tamil Thai Pongal Day
    (4, 13),  # Sinhala and Tamil New Year's Eve
    (4, 14),  # Sinhala and Tamil New Year Day
)

POYA_DAYS: dict[int, tuple[date, ...]] = {
    2024: (
        date(2024, 1, 25),
        date(2024, 2, 23),
        date(2024, 3, 24),
        date(2024, 4, 23),
        date(2024, 5, 23),
        date(2024, 6, 21),
        date(2024, 7, 20),
        date(2024, 8, 19),
        date(2024, 9, 17),
        date(2024, 10, 17),
        date(2024, 11, 15),
        date(2024, 12, 14),
    ),
    2025: (
        date(2025, 1, 13),
        date(2025, 2, 12),
        date(2025, 3, 13),
        date(2025, 4, 12),
        date(2025, 5, 12),
        date(2025, 6, 10),
        date(2025, 7, 10),
        date(2025, 8, 8),
        date(2025, 9, 7),
        date(2025, 10, 6),
        date(2025, 11, 5),
        date(2025, 12, 4),
    ),
    2026: (
        date(2026, 1, 3),
        date(2026, 2, 1),
        date(2026, 3, 2),
        date(2026, 4, 1),
        date(2026, 5, 1),
        date(2026, 5, 30),
        date(2026, 6, 29),
        date(2026, 7, 29),
        date(2026, 8, 27),
        date(2026, 9, 26),
        date(2026, 10, 25),
        date(2026, 11, 24),
        date(2026, 12, 23),
    ),
}

ISLAMIC_HOLIDAYS: dict[int, tuple[date, ...]] = {
    2024: (date(2024, 9, 16),),  # Milad-un-Nabi
    2025: (date(2025, 9, 5),),
    2026: (date(2026, 8, 26),),
}
