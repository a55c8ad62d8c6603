"""
Recurrence materialization engine

Pure, persistence-free expansion of recurring wallet transactions into dated
occurrences, plus exclusion and single-occurrence exception handling.
"""

from .errors import (
    ConflictError,
    IdConflictError,
    MalformedTemplateError,
    NotFoundError,
    QueryCancelled,
    RangeError,
    RecurrenceError,
)
from .exclusions import ExclusionResult, ExclusionSet, date_key, normalize_date
from .expander import expand
from .overrides import ExceptionOutcome, create_exception, replacement_id
from .query import CancellationSignal, RangeQueryService, get_occurrences
from .types import Frequency, Occurrence, OccurrenceId, Template
from .weekday import weekday_of, weekday_of_date

__all__ = [
    "ConflictError",
    "IdConflictError",
    "MalformedTemplateError",
    "NotFoundError",
    "QueryCancelled",
    "RangeError",
    "RecurrenceError",
    "ExclusionResult",
    "ExclusionSet",
    "date_key",
    "normalize_date",
    "expand",
    "ExceptionOutcome",
    "create_exception",
    "replacement_id",
    "CancellationSignal",
    "RangeQueryService",
    "get_occurrences",
    "Frequency",
    "Occurrence",
    "OccurrenceId",
    "Template",
    "weekday_of",
    "weekday_of_date",
]
