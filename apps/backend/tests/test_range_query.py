from datetime import date
from threading import Event

import pytest

from app.recurrence import (
    Frequency,
    MalformedTemplateError,
    OccurrenceId,
    QueryCancelled,
    RangeError,
    RangeQueryService,
    Template,
    get_occurrences,
)
from app.recurrence.weekday import MONDAY, FRIDAY


def _templates():
    return [
        Template(
            id="rent",
            frequency=Frequency.MONTHLY,
            day_of_month=31,
            payload={"type": "despesa", "amount": 700.0, "category": "miscelaneos"},
        ),
        Template(
            id="coffee",
            frequency=Frequency.WEEKLY,
            day_of_week=FRIDAY,
            payload={"type": "despesa", "amount": 2.5, "category": "cafe"},
        ),
        Template(
            id="bonus",
            frequency=Frequency.UNIQUE,
            anchor_date=date(2023, 2, 10),
            payload={"type": "ganho", "amount": 300.0, "category": "salario"},
        ),
        # Missing day_of_week: contributes nothing
        Template(id="broken", frequency=Frequency.WEEKLY, payload={"type": "despesa", "amount": 1.0, "category": "snacks"}),
    ]


def test_rejects_inverted_range_before_expanding():
    with pytest.raises(RangeError):
        get_occurrences(_templates(), date(2023, 3, 1), date(2023, 2, 1))


def test_merged_and_sorted():
    result = get_occurrences(_templates(), date(2023, 2, 1), date(2023, 2, 28))
    assert [(occ.date.day, occ.template_id) for occ in result] == [
        (3, "coffee"),
        (10, "bonus"),
        (10, "coffee"),
        (17, "coffee"),
        (24, "coffee"),
        (28, "rent"),
    ]


def test_every_occurrence_inside_range():
    start, end = date(2023, 1, 15), date(2023, 5, 14)
    result = get_occurrences(_templates(), start, end)
    assert result
    assert all(start <= occ.date <= end for occ in result)


def test_identical_inputs_give_identical_output():
    templates = _templates()
    first = get_occurrences(templates, date(2023, 1, 1), date(2023, 6, 30))
    second = get_occurrences(templates, date(2023, 1, 1), date(2023, 6, 30))
    assert [occ.id for occ in first] == [occ.id for occ in second]
    assert first == second


def test_occurrence_carries_template_payload_and_rule():
    result = get_occurrences(_templates(), date(2023, 2, 3), date(2023, 2, 3))
    (occ,) = result
    assert occ.id == OccurrenceId("coffee", date(2023, 2, 3))
    assert occ.frequency == Frequency.WEEKLY
    assert occ.day_of_week == FRIDAY
    assert occ.day_of_month is None
    assert occ.payload == {"type": "despesa", "amount": 2.5, "category": "cafe"}


def test_exclusion_effect_on_later_queries():
    templates = _templates()
    templates[1].excluded_dates.add(date(2023, 2, 17))
    result = get_occurrences(templates, date(2023, 2, 1), date(2023, 2, 28))
    assert date(2023, 2, 17) not in [occ.date for occ in result if occ.template_id == "coffee"]


def test_ties_are_broken_by_template_id():
    same_day = [
        Template(id=tid, frequency=Frequency.UNIQUE, anchor_date=date(2024, 1, 1))
        for tid in ("b", "c", "a")
    ]
    result = get_occurrences(same_day, date(2024, 1, 1), date(2024, 1, 1))
    assert [occ.template_id for occ in result] == ["a", "b", "c"]


def test_cancellation_between_templates():
    cancel = Event()
    cancel.set()
    with pytest.raises(QueryCancelled):
        get_occurrences(_templates(), date(2023, 1, 1), date(2023, 12, 31), cancel=cancel)


def test_unset_signal_runs_to_completion():
    result = get_occurrences(_templates(), date(2023, 1, 1), date(2023, 1, 31), cancel=Event())
    assert len(result) == 5  # four Fridays + rent on the 31st


def test_strict_mode_raises_for_malformed_template():
    service = RangeQueryService(strict=True)
    with pytest.raises(MalformedTemplateError) as exc_info:
        service.get_occurrences(_templates(), date(2023, 1, 1), date(2023, 1, 31))
    assert exc_info.value.template_id == "broken"
    assert exc_info.value.missing_field == "day_of_week"


def test_max_range_days():
    service = RangeQueryService(max_range_days=31)
    service.get_occurrences(_templates(), date(2024, 1, 1), date(2024, 1, 31))
    with pytest.raises(RangeError):
        service.get_occurrences(_templates(), date(2024, 1, 1), date(2024, 2, 1))


def test_weekly_monday_scenario():
    template = Template(id="t", frequency=Frequency.WEEKLY, day_of_week=MONDAY)
    result = get_occurrences([template], date(2024, 1, 1), date(2024, 1, 31))
    assert [occ.date.isoformat() for occ in result] == [
        "2024-01-01",
        "2024-01-08",
        "2024-01-15",
        "2024-01-22",
        "2024-01-29",
    ]


def test_occurrence_id_wire_format():
    occ_id = OccurrenceId("import_1_abc", date(2024, 1, 8))
    assert occ_id.to_wire() == "import_1_abc_2024-01-08"
    assert OccurrenceId.from_wire(occ_id.to_wire()) == occ_id
    with pytest.raises(ValueError):
        OccurrenceId.from_wire("2024-01-08")


def test_legacy_day_of_month_zero_is_skipped_not_fatal():
    legacy = Template(id="legacy", frequency=Frequency.MONTHLY, day_of_month=0, payload={"type": "despesa"})
    result = get_occurrences(_templates() + [legacy], date(2023, 1, 1), date(2023, 1, 31))
    assert "legacy" not in {occ.template_id for occ in result}
    assert len(result) == 5

    with pytest.raises(MalformedTemplateError) as exc_info:
        RangeQueryService(strict=True).get_occurrences([legacy], date(2023, 1, 1), date(2023, 1, 31))
    assert exc_info.value.missing_field == "day_of_month"
