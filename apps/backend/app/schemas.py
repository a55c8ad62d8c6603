from __future__ import annotations

import math
import datetime as dt
from typing import Optional

from pydantic import (
    AliasGenerator,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .models import CATEGORIES, ExpenseBudgetCategory, TxnType
from .recurrence import ExceptionOutcome, Frequency, Occurrence


class CamelModel(BaseModel):
    """Accept and emit camelCase keys while keeping snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CamelOutModel(BaseModel):
    """Emit camelCase keys; validate from snake_case attributes (ORM rows)."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )


# ===== Wallets =====

class WalletCreate(BaseModel):
    name: str

    @field_validator("name")
    def name_not_blank(cls, v: str):
        trimmed = v.strip()
        if not trimmed:
            raise ValueError("name must not be empty")
        return trimmed


class WalletUpdate(WalletCreate):
    pass


class WalletOut(CamelOutModel):
    id: int
    name: str
    created_at: dt.datetime
    updated_at: dt.datetime


# ===== Transaction templates =====

class TransactionPayload(CamelModel):
    type: TxnType
    amount: float
    category: str
    description: Optional[str] = None
    person: Optional[str] = None
    expense_budget_category: Optional[ExpenseBudgetCategory] = None

    @field_validator("amount")
    def amount_positive(cls, v: float):
        if not math.isfinite(v):
            raise ValueError("amount must be finite")
        if v <= 0:
            raise ValueError("amount must be positive")
        return v

    @field_validator("category")
    def category_known(cls, v: str):
        if v not in CATEGORIES:
            raise ValueError(f"unknown category: {v}")
        return v

    @field_validator("description")
    def description_len(cls, v: str | None):
        if v is not None and len(v) > 500:
            raise ValueError("description must be at most 500 characters")
        return v

    @field_validator("person")
    def person_len(cls, v: str | None):
        if v is not None and len(v) > 100:
            raise ValueError("person must be at most 100 characters")
        return v

    @model_validator(mode="after")
    def require_budget_category_for_expenses(self):
        if self.type == TxnType.DESPESA and self.expense_budget_category is None:
            raise ValueError("expense_budget_category is required for despesa")
        return self


class TemplateBase(TransactionPayload):
    date: dt.date
    frequency: Frequency = Frequency.UNIQUE
    day_of_week: Optional[int] = None
    day_of_month: Optional[int] = None

    @field_validator("day_of_week")
    def validate_weekday(cls, v: int | None):
        if v is not None and not (0 <= v <= 6):
            raise ValueError("day_of_week must be between 0 and 6")
        return v

    @field_validator("day_of_month")
    def validate_day(cls, v: int | None):
        if v is not None and not (1 <= v <= 31):
            raise ValueError("day_of_month must be between 1 and 31")
        return v

    @model_validator(mode="after")
    def require_frequency_field(self):
        if self.frequency == Frequency.WEEKLY and self.day_of_week is None:
            raise ValueError("day_of_week is required for weekly transactions")
        if self.frequency == Frequency.MONTHLY and self.day_of_month is None:
            raise ValueError("day_of_month is required for monthly transactions")
        return self


# Path segments routed ahead of /transactions/{template_id}
RESERVED_TEMPLATE_IDS = frozenset({"range"})


class TemplateCreate(TemplateBase):
    id: Optional[str] = Field(default=None, min_length=1, max_length=200)

    @field_validator("id")
    def id_not_reserved(cls, v: str | None):
        if v is not None and v in RESERVED_TEMPLATE_IDS:
            raise ValueError(f"'{v}' is reserved and cannot be used as a transaction id")
        return v


class TemplateUpdate(TemplateBase):
    pass


class TemplateOut(CamelOutModel):
    id: str
    wallet_id: int
    type: TxnType
    amount: float
    category: str
    description: Optional[str]
    person: Optional[str]
    expense_budget_category: Optional[ExpenseBudgetCategory]
    frequency: Frequency
    date: Optional[dt.date] = Field(default=None, validation_alias="anchor_date")
    day_of_week: Optional[int]
    day_of_month: Optional[int]
    source_template_id: Optional[str] = None
    replaces_on: Optional[dt.date] = None
    excluded_dates: list[dt.date] = Field(default_factory=list)
    created_at: dt.datetime
    updated_at: dt.datetime

    @model_validator(mode="before")
    @classmethod
    def collect_exclusions(cls, data):
        exclusions = getattr(data, "exclusions", None)
        if exclusions is None:
            return data
        values = {name: getattr(data, name) for name in (
            "id", "wallet_id", "type", "amount", "category", "description", "person",
            "expense_budget_category", "frequency", "anchor_date", "day_of_week",
            "day_of_month", "source_template_id", "replaces_on", "created_at", "updated_at",
        )}
        values["excluded_dates"] = [row.excluded_on for row in exclusions]
        return values


# ===== Occurrences =====

class OccurrenceOut(CamelOutModel):
    id: str
    template_id: str
    date: dt.date
    type: TxnType
    amount: float
    category: str
    frequency: Frequency
    day_of_week: Optional[int] = None
    day_of_month: Optional[int] = None
    description: Optional[str] = None
    person: Optional[str] = None
    expense_budget_category: Optional[ExpenseBudgetCategory] = None

    @classmethod
    def from_occurrence(cls, occ: Occurrence) -> "OccurrenceOut":
        payload = occ.payload
        return cls(
            id=occ.id.to_wire(),
            template_id=occ.template_id,
            date=occ.date,
            type=payload["type"],
            amount=payload["amount"],
            category=payload["category"],
            frequency=occ.frequency,
            day_of_week=occ.day_of_week,
            day_of_month=occ.day_of_month,
            description=payload.get("description"),
            person=payload.get("person"),
            expense_budget_category=payload.get("expense_budget_category"),
        )


# ===== Exclusions / exceptions =====

class ExclusionCreate(CamelModel):
    date: dt.date
    reason: Optional[str] = None


class ExclusionOut(CamelOutModel):
    template_id: str
    date: dt.date = Field(validation_alias="excluded_on")
    reason: Optional[str] = None
    created_at: dt.datetime


class ExceptionOverride(TransactionPayload):
    date: Optional[dt.date] = None


class ExceptionCreate(CamelModel):
    date: dt.date
    override: ExceptionOverride


class ExceptionOut(CamelOutModel):
    excluded_on: dt.date
    already_excluded: bool
    replacement: TemplateOut

    @classmethod
    def build(cls, outcome: ExceptionOutcome, replacement: TemplateOut) -> "ExceptionOut":
        return cls(
            excluded_on=outcome.excluded_on,
            already_excluded=outcome.already_excluded,
            replacement=replacement,
        )
