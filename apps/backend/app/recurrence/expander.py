"""Materialize the concrete dates of one template inside a closed range."""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Iterator

from loguru import logger

from .types import Frequency, Template
from .weekday import weekday_of


def _next_month(year: int, month: int) -> tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1


def _expand_unique(template: Template, start: date, end: date) -> Iterator[date]:
    anchor = template.anchor_date
    if start <= anchor <= end and not template.excluded_dates.contains(anchor):
        yield anchor


def _expand_weekly(template: Template, start: date, end: date) -> Iterator[date]:
    target = template.day_of_week
    current = start
    while current <= end:
        if weekday_of(current.day, current.month, current.year) == target:
            if not template.excluded_dates.contains(current):
                yield current
        current += timedelta(days=1)


def _expand_monthly(template: Template, start: date, end: date) -> Iterator[date]:
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        days_in_month = calendar.monthrange(year, month)[1]
        candidate = date(year, month, min(template.day_of_month, days_in_month))
        if start <= candidate <= end and not template.excluded_dates.contains(candidate):
            yield candidate
        year, month = _next_month(year, month)


_EXPANDERS = {
    Frequency.UNIQUE: _expand_unique,
    Frequency.WEEKLY: _expand_weekly,
    Frequency.MONTHLY: _expand_monthly,
}


def expand(template: Template, start: date, end: date) -> Iterator[date]:
    """Yield the occurrence dates of ``template`` within ``[start, end]``.

    The sequence is recomputed on every call. Exclusions are consulted as each
    date is produced, so dates excluded after the call started are still
    honored. A template lacking its frequency-required field yields nothing.
    """
    if end < start:
        return
    if not template.is_well_formed():
        logger.warning(
            f"Skipping template {template.id}: {template.frequency.value} rule without a valid {template.required_field}"
        )
        return
    yield from _EXPANDERS[template.frequency](template, start, end)
