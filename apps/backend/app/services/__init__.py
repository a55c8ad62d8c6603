"""
Services package

Persistence and orchestration around the recurrence engine.
"""

from .template_repository import AppendResult, TemplateRepository, to_template
from .recurrence_service import RecurrenceService

__all__ = [
    "AppendResult",
    "TemplateRepository",
    "to_template",
    "RecurrenceService",
]
