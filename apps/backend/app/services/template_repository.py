from __future__ import annotations

import uuid
from datetime import date
from enum import Enum
from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app import models
from app.recurrence import ExclusionSet, IdConflictError, NotFoundError, Template, normalize_date


class AppendResult(str, Enum):
    SUCCESS = "success"
    ALREADY_EXCLUDED = "already_excluded"
    NOT_FOUND = "not_found"


# Template columns copied verbatim into occurrences
PAYLOAD_COLUMNS = ("type", "amount", "category", "description", "person", "expense_budget_category")


def _plain(value):
    if isinstance(value, Enum):
        return value.value
    return value


_ENUM_COLUMNS = {
    "type": models.TxnType,
    "expense_budget_category": models.ExpenseBudgetCategory,
}


def _column_value(name: str, value):
    enum_cls = _ENUM_COLUMNS.get(name)
    if enum_cls is not None and value is not None and not isinstance(value, enum_cls):
        return enum_cls(value)
    return value


def to_template(row: models.TransactionTemplate) -> Template:
    """Convert a stored row into the engine's input record."""
    payload = {name: _plain(getattr(row, name)) for name in PAYLOAD_COLUMNS}
    if payload["amount"] is not None:
        payload["amount"] = float(payload["amount"])
    return Template(
        id=row.id,
        frequency=row.frequency,
        anchor_date=row.anchor_date,
        day_of_week=row.day_of_week,
        day_of_month=row.day_of_month,
        excluded_dates=ExclusionSet(x.excluded_on for x in row.exclusions),
        payload=payload,
    )


class TemplateRepository:
    """SQLAlchemy persistence for wallets, templates and their exclusions.

    Methods flush but never commit; the calling service owns the transaction.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---- Wallets ---------------------------------------------------------
    def create_wallet(self, name: str) -> models.Wallet:
        row = models.Wallet(name=name)
        self.db.add(row)
        self.db.flush()
        return row

    def get_wallet(self, wallet_id: int) -> models.Wallet:
        row = self.db.get(models.Wallet, wallet_id)
        if row is None:
            raise NotFoundError("Wallet", wallet_id)
        return row

    def list_wallets(self) -> list[models.Wallet]:
        return self.db.query(models.Wallet).order_by(models.Wallet.id).all()

    def rename_wallet(self, wallet_id: int, name: str) -> models.Wallet:
        row = self.get_wallet(wallet_id)
        row.name = name
        self.db.flush()
        return row

    def delete_wallet(self, wallet_id: int) -> None:
        # Templates and their exclusions go with the wallet (ORM cascade)
        self.db.delete(self.get_wallet(wallet_id))
        self.db.flush()

    # ---- Templates -------------------------------------------------------
    def get_all(self, wallet_id: int) -> list[models.TransactionTemplate]:
        return (
            self.db.query(models.TransactionTemplate)
            .options(selectinload(models.TransactionTemplate.exclusions))
            .filter(models.TransactionTemplate.wallet_id == wallet_id)
            .order_by(models.TransactionTemplate.anchor_date, models.TransactionTemplate.id)
            .all()
        )

    def get_by_id(self, wallet_id: int, template_id: str) -> models.TransactionTemplate | None:
        return (
            self.db.query(models.TransactionTemplate)
            .options(selectinload(models.TransactionTemplate.exclusions))
            .filter(
                models.TransactionTemplate.wallet_id == wallet_id,
                models.TransactionTemplate.id == template_id,
            )
            .first()
        )

    def require(self, wallet_id: int, template_id: str) -> models.TransactionTemplate:
        row = self.get_by_id(wallet_id, template_id)
        if row is None:
            raise NotFoundError("Transaction", template_id)
        return row

    def load_templates(self, wallet_id: int) -> list[Template]:
        return [to_template(row) for row in self.get_all(wallet_id)]

    def get_template(self, wallet_id: int, template_id: str) -> Template:
        return to_template(self.require(wallet_id, template_id))

    def create(self, wallet_id: int, data: dict) -> models.TransactionTemplate:
        data = dict(data)
        data["id"] = data.get("id") or uuid.uuid4().hex
        data["wallet_id"] = wallet_id
        if "date" in data:
            data["anchor_date"] = data.pop("date")
        row = models.TransactionTemplate(**data)
        self.db.add(row)
        self.db.flush()
        return row

    def update(self, row: models.TransactionTemplate, patch: dict) -> models.TransactionTemplate:
        patch = dict(patch)
        if "date" in patch:
            patch["anchor_date"] = patch.pop("date")
        for key, value in patch.items():
            setattr(row, key, value)
        self.db.flush()
        return row

    def delete(self, row: models.TransactionTemplate) -> None:
        self.db.delete(row)
        self.db.flush()

    def find_replacement(self, wallet_id: int, source_template_id: str, on: date) -> models.TransactionTemplate | None:
        return (
            self.db.query(models.TransactionTemplate)
            .options(selectinload(models.TransactionTemplate.exclusions))
            .filter(
                models.TransactionTemplate.wallet_id == wallet_id,
                models.TransactionTemplate.source_template_id == source_template_id,
                models.TransactionTemplate.replaces_on == normalize_date(on),
            )
            .first()
        )

    def insert_template(
        self,
        wallet_id: int,
        template: Template,
        *,
        replaces: tuple[str, date] | None = None,
    ) -> str:
        """Persist an engine template and return the id it was stored under.

        With ``replaces=(source_template_id, date)`` the row is recorded as the
        replacement of that occurrence; a later call for the same occurrence
        updates that row. An id already taken by any other row is never
        overwritten: replacements fall back to a fresh id, plain inserts raise
        ``IdConflictError``.
        """
        values = dict(
            frequency=template.frequency,
            anchor_date=template.anchor_date,
            day_of_week=template.day_of_week,
            day_of_month=template.day_of_month,
            **{k: _column_value(k, v) for k, v in template.payload.items() if k in PAYLOAD_COLUMNS},
        )
        if replaces is not None:
            values["source_template_id"] = replaces[0]
            values["replaces_on"] = normalize_date(replaces[1])
            row = self.find_replacement(wallet_id, *replaces)
        else:
            row = self.get_by_id(wallet_id, template.id)

        if row is None:
            template_id = template.id
            if self.db.get(models.TransactionTemplate, template_id) is not None:
                if replaces is None:
                    raise IdConflictError(template_id)
                template_id = f"{template.id}_{uuid.uuid4().hex[:8]}"
                logger.info(f"Id {template.id} is taken by another transaction, storing replacement as {template_id}")
            row = models.TransactionTemplate(id=template_id, wallet_id=wallet_id, **values)
            self.db.add(row)
        else:
            logger.info(f"Template {row.id} already stored, overwriting its payload")
            for key, value in values.items():
                setattr(row, key, value)
        for excluded_on in template.excluded_dates:
            if not any(x.excluded_on == excluded_on for x in row.exclusions):
                row.exclusions.append(models.TemplateExclusion(excluded_on=excluded_on))
        row_id = row.id
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            logger.info(f"Lost insert race for template id {row_id}")
            raise IdConflictError(row_id)
        return row_id

    # ---- Exclusions ------------------------------------------------------
    def list_exclusions(self, template_id: str) -> list[models.TemplateExclusion]:
        return (
            self.db.query(models.TemplateExclusion)
            .filter(models.TemplateExclusion.template_id == template_id)
            .order_by(models.TemplateExclusion.excluded_on)
            .all()
        )

    def append_exclusion(self, template_id: str, on: date, reason: Optional[str] = None) -> AppendResult:
        """Insert-or-conflict on ``(template_id, excluded_on)``.

        The unique constraint makes this the compare-and-insert point: a
        concurrent loser hits ``IntegrityError`` and reports ALREADY_EXCLUDED.
        """
        on = normalize_date(on)
        if self.db.get(models.TransactionTemplate, template_id) is None:
            return AppendResult.NOT_FOUND
        existing = (
            self.db.query(models.TemplateExclusion.id)
            .filter(
                models.TemplateExclusion.template_id == template_id,
                models.TemplateExclusion.excluded_on == on,
            )
            .first()
        )
        if existing:
            return AppendResult.ALREADY_EXCLUDED
        self.db.add(models.TemplateExclusion(template_id=template_id, excluded_on=on, reason=reason))
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            logger.info(f"Lost exclusion race for template {template_id} on {on.isoformat()}")
            return AppendResult.ALREADY_EXCLUDED
        return AppendResult.SUCCESS

    def remove_exclusion(self, template_id: str, on: date) -> bool:
        row = (
            self.db.query(models.TemplateExclusion)
            .filter(
                models.TemplateExclusion.template_id == template_id,
                models.TemplateExclusion.excluded_on == normalize_date(on),
            )
            .first()
        )
        if row is None:
            return False
        self.db.delete(row)
        self.db.flush()
        return True
