from __future__ import annotations

from datetime import date
from typing import Iterable, Protocol

from loguru import logger

from .errors import MalformedTemplateError, QueryCancelled, RangeError
from .expander import expand
from .types import Occurrence, Template


class CancellationSignal(Protocol):
    def is_set(self) -> bool: ...


class RangeQueryService:
    """Materialize and merge the occurrences of many templates.

    Args:
        max_range_days: reject ranges spanning more days than this (inclusive)
        strict: raise ``MalformedTemplateError`` instead of skipping templates
            that lack their frequency-required field
    """

    def __init__(self, *, max_range_days: int | None = None, strict: bool = False) -> None:
        self.max_range_days = max_range_days
        self.strict = strict

    def validate_range(self, start: date, end: date) -> None:
        if start > end:
            raise RangeError(start, end)
        if self.max_range_days is not None and (end - start).days + 1 > self.max_range_days:
            raise RangeError(start, end, f"range must not exceed {self.max_range_days} days")

    def get_occurrences(
        self,
        templates: Iterable[Template],
        start: date,
        end: date,
        cancel: CancellationSignal | None = None,
    ) -> list[Occurrence]:
        self.validate_range(start, end)

        result: list[Occurrence] = []
        count = 0
        for template in templates:
            if cancel is not None and cancel.is_set():
                logger.info(f"Range query {start}..{end} cancelled after {count} templates")
                raise QueryCancelled(f"cancelled after {count} templates")
            if self.strict and not template.is_well_formed():
                raise MalformedTemplateError(template.id, template.required_field or "frequency")
            result.extend(Occurrence.from_template(template, d) for d in expand(template, start, end))
            count += 1

        result.sort(key=lambda occ: (occ.date, occ.template_id))
        logger.debug(f"Materialized {len(result)} occurrences from {count} templates for {start}..{end}")
        return result


def get_occurrences(
    templates: Iterable[Template],
    start: date,
    end: date,
    cancel: CancellationSignal | None = None,
) -> list[Occurrence]:
    return RangeQueryService().get_occurrences(templates, start, end, cancel)
