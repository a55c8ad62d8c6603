"""Input/output records of the recurrence engine.

Templates are opaque input records: the engine reads the recurrence fields
and copies ``payload`` verbatim into every occurrence it materializes.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exclusions import ExclusionSet, normalize_date


class Frequency(str, Enum):
    UNIQUE = "unique"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class OccurrenceId(NamedTuple):
    """Structured occurrence identity; serialized only at the wire boundary."""

    template_id: str
    date: dt.date

    def to_wire(self) -> str:
        return f"{self.template_id}_{self.date.isoformat()}"

    @classmethod
    def from_wire(cls, value: str) -> "OccurrenceId":
        template_id, sep, raw_date = value.rpartition("_")
        if not sep or not template_id:
            raise ValueError(f"Malformed occurrence id: {value!r}")
        return cls(template_id, dt.date.fromisoformat(raw_date))


class Template(BaseModel):
    id: str
    frequency: Frequency
    anchor_date: dt.date | None = None
    day_of_week: int | None = None
    day_of_month: int | None = None
    excluded_dates: ExclusionSet = Field(default_factory=ExclusionSet)
    payload: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @field_validator("anchor_date", mode="before")
    @classmethod
    def strip_time(cls, v: Any):
        if isinstance(v, dt.date):
            return normalize_date(v)
        return v

    @field_validator("excluded_dates", mode="before")
    @classmethod
    def coerce_exclusions(cls, v: Any):
        if v is None:
            return ExclusionSet()
        if isinstance(v, ExclusionSet):
            return v
        return ExclusionSet(dt.date.fromisoformat(d) if isinstance(d, str) else d for d in v)

    @property
    def required_field(self) -> str | None:
        """Name of the field this frequency cannot do without."""
        if self.frequency == Frequency.UNIQUE:
            return "anchor_date"
        if self.frequency == Frequency.WEEKLY:
            return "day_of_week"
        if self.frequency == Frequency.MONTHLY:
            return "day_of_month"
        return None

    def is_well_formed(self) -> bool:
        """True when the frequency-required field is present and in range."""
        field = self.required_field
        if field is None:
            return True
        value = getattr(self, field)
        if value is None:
            return False
        if field == "day_of_week":
            return 0 <= value <= 6
        if field == "day_of_month":
            return 1 <= value <= 31
        return True


class Occurrence(BaseModel):
    id: OccurrenceId
    date: dt.date
    frequency: Frequency
    day_of_week: int | None = None
    day_of_month: int | None = None
    payload: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def template_id(self) -> str:
        return self.id.template_id

    @classmethod
    def from_template(cls, template: Template, on: dt.date) -> "Occurrence":
        return cls(
            id=OccurrenceId(template.id, on),
            date=on,
            frequency=template.frequency,
            day_of_week=template.day_of_week,
            day_of_month=template.day_of_month,
            payload=dict(template.payload),
        )
