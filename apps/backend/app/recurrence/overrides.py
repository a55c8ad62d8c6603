"""Split one occurrence of a recurring template into a standalone template."""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping

from loguru import logger
from pydantic import BaseModel, ConfigDict

from .exclusions import ExclusionResult, normalize_date
from .types import Frequency, OccurrenceId, Template

# Recurrence fields never copied from an override payload
_RECURRENCE_KEYS = {"id", "frequency", "anchor_date", "day_of_week", "day_of_month", "excluded_dates", "date"}


class ExceptionOutcome(BaseModel):
    template: Template
    replacement: Template
    excluded_on: date
    already_excluded: bool

    model_config = ConfigDict(arbitrary_types_allowed=True)


def replacement_id(template_id: str, on: date) -> str:
    """Deterministic id of the standalone template replacing one occurrence."""
    return OccurrenceId(template_id, normalize_date(on)).to_wire()


def create_exception(
    template: Template,
    on: date,
    override: Mapping[str, Any],
    *,
    new_id: str | None = None,
) -> ExceptionOutcome:
    """Exclude ``on`` from ``template`` and build its one-off replacement.

    ``override`` carries the replacement's payload. An optional ``date`` key
    moves the replacement to another day; by default it lands on ``on``.
    The exclusion is applied even if already present, in which case the
    outcome reports ``already_excluded``. Persisting the replacement is left
    to the caller.
    """
    excluded_on = normalize_date(on)
    result = template.excluded_dates.add(excluded_on)
    already_excluded = result == ExclusionResult.ALREADY_EXCLUDED
    if already_excluded:
        logger.info(f"Occurrence {excluded_on.isoformat()} of template {template.id} was already excluded")

    anchor = override.get("date") or excluded_on
    if isinstance(anchor, str):
        anchor = date.fromisoformat(anchor)

    replacement = Template(
        id=new_id or replacement_id(template.id, excluded_on),
        frequency=Frequency.UNIQUE,
        anchor_date=anchor,
        payload={k: v for k, v in override.items() if k not in _RECURRENCE_KEYS},
    )
    logger.debug(f"Created exception {replacement.id} for template {template.id} on {excluded_on.isoformat()}")
    return ExceptionOutcome(
        template=template,
        replacement=replacement,
        excluded_on=excluded_on,
        already_excluded=already_excluded,
    )
