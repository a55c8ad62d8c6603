from datetime import date

import pytest

from app.recurrence import (
    Frequency,
    Template,
    create_exception,
    get_occurrences,
    replacement_id,
)
from app.recurrence.weekday import MONDAY


@pytest.fixture
def gym():
    return Template(
        id="gym",
        frequency=Frequency.WEEKLY,
        anchor_date=date(2024, 1, 1),
        day_of_week=MONDAY,
        payload={"type": "despesa", "amount": 20.0, "category": "saude", "expense_budget_category": "gastos"},
    )


OVERRIDE = {
    "type": "despesa",
    "amount": 35.0,
    "category": "saude",
    "expense_budget_category": "gastos",
    "description": "personal trainer",
}


def test_exception_excludes_source_date_and_builds_unique_replacement(gym):
    outcome = create_exception(gym, date(2024, 1, 15), OVERRIDE)

    assert outcome.already_excluded is False
    assert outcome.excluded_on == date(2024, 1, 15)
    assert gym.excluded_dates.contains(date(2024, 1, 15))

    replacement = outcome.replacement
    assert replacement.frequency == Frequency.UNIQUE
    assert replacement.anchor_date == date(2024, 1, 15)
    assert replacement.day_of_week is None
    assert replacement.day_of_month is None
    assert len(replacement.excluded_dates) == 0
    assert replacement.payload == OVERRIDE


def test_repeated_exception_reports_already_excluded_and_same_id(gym):
    first = create_exception(gym, date(2024, 1, 15), OVERRIDE)
    second = create_exception(gym, date(2024, 1, 15), {**OVERRIDE, "amount": 40.0})

    assert second.already_excluded is True
    assert second.replacement.id == first.replacement.id == replacement_id("gym", date(2024, 1, 15))
    assert second.replacement.payload["amount"] == 40.0
    assert len(gym.excluded_dates) == 1


def test_recurrence_keys_in_override_are_ignored(gym):
    outcome = create_exception(gym, date(2024, 1, 8), {**OVERRIDE, "frequency": "weekly", "day_of_week": 3})
    assert outcome.replacement.frequency == Frequency.UNIQUE
    assert outcome.replacement.day_of_week is None
    assert "day_of_week" not in outcome.replacement.payload


def test_override_may_move_the_replacement(gym):
    outcome = create_exception(gym, date(2024, 1, 8), {**OVERRIDE, "date": "2024-01-09"})
    assert outcome.excluded_on == date(2024, 1, 8)
    assert outcome.replacement.anchor_date == date(2024, 1, 9)


def test_explicit_replacement_id(gym):
    outcome = create_exception(gym, date(2024, 1, 8), OVERRIDE, new_id="custom")
    assert outcome.replacement.id == "custom"


def test_round_trip_through_range_query(gym):
    outcome = create_exception(gym, date(2024, 1, 15), OVERRIDE)
    occurrences = get_occurrences([gym, outcome.replacement], date(2024, 1, 1), date(2024, 1, 31))

    on_the_15th = [occ for occ in occurrences if occ.date == date(2024, 1, 15)]
    assert len(on_the_15th) == 1
    assert on_the_15th[0].template_id == outcome.replacement.id
    assert on_the_15th[0].payload == OVERRIDE
    assert [occ.date.day for occ in occurrences] == [1, 8, 15, 22, 29]
