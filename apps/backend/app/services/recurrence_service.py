from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional

from loguru import logger
from sqlalchemy.orm import Session

from app import models
from app.core.config import settings
from app.recurrence import (
    CancellationSignal,
    ConflictError,
    ExceptionOutcome,
    ExclusionResult,
    NotFoundError,
    Occurrence,
    RangeQueryService,
    create_exception,
    normalize_date,
)

from .template_repository import AppendResult, TemplateRepository


class RecurrenceService:
    """Wire the recurrence engine to the template repository.

    Every mutating call commits exactly once, so the two writes of an
    exception (exclusion + replacement) land in the same transaction.
    """

    def __init__(self, db: Session, query: Optional[RangeQueryService] = None) -> None:
        self.db = db
        self.repo = TemplateRepository(db)
        self.query = query or RangeQueryService(
            max_range_days=settings.MAX_RANGE_DAYS,
            strict=settings.STRICT_TEMPLATES,
        )

    def get_occurrences(
        self,
        wallet_id: int,
        start: date,
        end: date,
        cancel: CancellationSignal | None = None,
    ) -> list[Occurrence]:
        self.repo.get_wallet(wallet_id)
        # Fail on a bad range before touching the templates
        self.query.validate_range(start, end)
        templates = self.repo.load_templates(wallet_id)
        logger.info(f"Expanding {len(templates)} templates for wallet {wallet_id} over {start}..{end}")
        return self.query.get_occurrences(templates, start, end, cancel)

    def add_exclusion(
        self,
        wallet_id: int,
        template_id: str,
        on: date,
        reason: Optional[str] = None,
    ) -> models.TemplateExclusion:
        """Exclude one date from a template; a repeated date is a conflict."""
        on = normalize_date(on)
        template = self.repo.get_template(wallet_id, template_id)
        if template.excluded_dates.add(on) == ExclusionResult.ALREADY_EXCLUDED:
            raise ConflictError(template_id, on)

        result = self.repo.append_exclusion(template_id, on, reason)
        if result == AppendResult.NOT_FOUND:
            raise NotFoundError("Transaction", template_id)
        if result == AppendResult.ALREADY_EXCLUDED:
            raise ConflictError(template_id, on)
        self.db.commit()
        logger.info(f"Excluded {on.isoformat()} from template {template_id}")
        return next(x for x in self.repo.list_exclusions(template_id) if x.excluded_on == on)

    def remove_exclusion(self, wallet_id: int, template_id: str, on: date) -> None:
        self.repo.require(wallet_id, template_id)
        if not self.repo.remove_exclusion(template_id, on):
            raise NotFoundError("Exclusion", f"{template_id}@{on.isoformat()}")
        self.db.commit()

    def create_exception(
        self,
        wallet_id: int,
        template_id: str,
        on: date,
        override: Mapping[str, Any],
    ) -> tuple[ExceptionOutcome, models.TransactionTemplate]:
        """Replace one occurrence with a standalone template.

        Safe to retry: the exclusion insert tolerates an existing row and the
        replacement row is matched on ``(template_id, on)``, never on its id
        alone, so an unrelated transaction holding the derived id is left as is.
        """
        template = self.repo.get_template(wallet_id, template_id)
        outcome = create_exception(template, on, override)

        result = self.repo.append_exclusion(template_id, outcome.excluded_on)
        if result == AppendResult.NOT_FOUND:
            raise NotFoundError("Transaction", template_id)
        if result == AppendResult.ALREADY_EXCLUDED and not outcome.already_excluded:
            outcome = outcome.model_copy(update={"already_excluded": True})

        replacement_id = self.repo.insert_template(
            wallet_id,
            outcome.replacement,
            replaces=(template_id, outcome.excluded_on),
        )
        if replacement_id != outcome.replacement.id:
            replacement = outcome.replacement.model_copy(update={"id": replacement_id})
            outcome = outcome.model_copy(update={"replacement": replacement})
        self.db.commit()
        logger.info(
            f"Exception {replacement_id} replaces {template_id} on {outcome.excluded_on.isoformat()} "
            f"(already_excluded={outcome.already_excluded})"
        )
        return outcome, self.repo.require(wallet_id, replacement_id)
