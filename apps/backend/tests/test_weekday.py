from datetime import date, timedelta

import pytest

from app.recurrence import weekday_of, weekday_of_date
from app.recurrence.weekday import FRIDAY, MONDAY, SATURDAY, SUNDAY, THURSDAY, WEDNESDAY


def test_march_first_2000_is_wednesday():
    assert weekday_of(1, 3, 2000) == 4 == WEDNESDAY


@pytest.mark.parametrize(
    "day, month, year, expected",
    [
        (1, 1, 2024, MONDAY),
        (1, 1, 2023, SUNDAY),
        (29, 2, 2024, THURSDAY),
        (1, 1, 1900, MONDAY),
        (31, 12, 1999, FRIDAY),
        (6, 1, 2024, SATURDAY),
    ],
)
def test_known_dates(day, month, year, expected):
    assert weekday_of(day, month, year) == expected


def test_matches_python_calendar_over_several_years():
    # date.weekday(): Monday=0; the Zeller convention puts Saturday at 0
    current = date(1999, 12, 1)
    while current <= date(2004, 3, 31):
        assert weekday_of_date(current) == (current.weekday() + 2) % 7, current
        current += timedelta(days=1)


def test_result_always_in_range():
    for year in (1600, 1700, 1900, 2000, 2100):
        for month in range(1, 13):
            assert 0 <= weekday_of(1, month, year) <= 6
