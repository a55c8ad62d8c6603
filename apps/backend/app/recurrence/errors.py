"""Error taxonomy of the recurrence engine."""

from __future__ import annotations

from datetime import date


class RecurrenceError(Exception):
    """Base class for every error raised by the recurrence engine."""


class RangeError(RecurrenceError):
    def __init__(self, start: date, end: date, detail: str | None = None) -> None:
        self.start = start
        self.end = end
        super().__init__(detail or f"start ({start.isoformat()}) must not be after end ({end.isoformat()})")


class MalformedTemplateError(RecurrenceError):
    def __init__(self, template_id: str, missing_field: str) -> None:
        self.template_id = template_id
        self.missing_field = missing_field
        super().__init__(f"Template {template_id} has no valid {missing_field}")


class ConflictError(RecurrenceError):
    def __init__(self, template_id: str, excluded_on: date) -> None:
        self.template_id = template_id
        self.excluded_on = excluded_on
        super().__init__(f"{excluded_on.isoformat()} is already excluded for template {template_id}")


class NotFoundError(RecurrenceError):
    def __init__(self, kind: str, identifier: object) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class QueryCancelled(RecurrenceError):
    """Raised when a range query observes its cancellation signal."""


class IdConflictError(RecurrenceError):
    def __init__(self, template_id: str) -> None:
        self.template_id = template_id
        super().__init__(f"Transaction id already in use: {template_id}")
