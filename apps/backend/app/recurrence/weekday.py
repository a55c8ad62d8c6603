"""Weekday calculation via Zeller's congruence.

Indices follow Zeller's native numbering and are stored as-is in
``TransactionTemplate.day_of_week``:

    0 = Saturday, 1 = Sunday, 2 = Monday, 3 = Tuesday,
    4 = Wednesday, 5 = Thursday, 6 = Friday
"""

from __future__ import annotations

from datetime import date

SATURDAY = 0
SUNDAY = 1
MONDAY = 2
TUESDAY = 3
WEDNESDAY = 4
THURSDAY = 5
FRIDAY = 6

WEEKDAY_NAMES = ("Saturday", "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday")


def weekday_of(day: int, month: int, year: int) -> int:
    """Return the weekday index (0=Saturday .. 6=Friday) of a Gregorian date.

    The caller is responsible for passing a valid calendar date.
    """
    # January and February count as months 13 and 14 of the previous year
    if month < 3:
        month += 12
        year -= 1

    k = year % 100
    j = year // 100
    h = day + (13 * (month + 1)) // 5 + k + k // 4 + j // 4 - 2 * j
    # Python's modulo already lands in [0, 6] for negative h
    return h % 7


def weekday_of_date(value: date) -> int:
    return weekday_of(value.day, value.month, value.year)
