from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from sqlalchemy import (
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .core.database import Base
from .recurrence import Frequency


def now_naive() -> datetime:
    """Naive wall-clock timestamp; the backend does not resolve timezones."""
    return datetime.now().replace(microsecond=0)


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, default=now_naive, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=now_naive, onupdate=now_naive, nullable=False)


class TxnType(str, Enum):
    GANHO = "ganho"
    DESPESA = "despesa"


class ExpenseBudgetCategory(str, Enum):
    GASTOS = "gastos"
    LAZER = "lazer"
    POUPANCA = "poupanca"


EXPENSE_CATEGORIES = (
    "compras",
    "cafe",
    "combustivel",
    "subscricao",
    "dizimo",
    "carro",
    "multibanco",
    "saude",
    "comerFora",
    "miscelaneos",
    "prendas",
    "extras",
    "snacks",
    "comprasOnline",
    "comprasRoupa",
    "animais",
    "comunicacoes",
)
INCOME_CATEGORIES = ("salario", "alimentacao", "outro")
CATEGORIES = EXPENSE_CATEGORIES + INCOME_CATEGORIES


class Wallet(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)

    templates: Mapped[list["TransactionTemplate"]] = relationship(
        back_populates="wallet",
        cascade="all, delete-orphan",
    )


class TransactionTemplate(Base, TimestampMixin):
    id: Mapped[str] = mapped_column(String(200), primary_key=True)
    wallet_id: Mapped[int] = mapped_column(ForeignKey("wallet.id", ondelete="CASCADE"), nullable=False)
    type: Mapped[TxnType] = mapped_column(SAEnum(TxnType), nullable=False)
    amount: Mapped[float] = mapped_column(Numeric(18, 4), nullable=False)
    category: Mapped[str] = mapped_column(String(40), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    person: Mapped[str | None] = mapped_column(String(100))
    expense_budget_category: Mapped[ExpenseBudgetCategory | None] = mapped_column(SAEnum(ExpenseBudgetCategory))
    frequency: Mapped[Frequency] = mapped_column(SAEnum(Frequency), nullable=False, default=Frequency.UNIQUE)
    anchor_date: Mapped[date | None] = mapped_column(Date)
    day_of_week: Mapped[int | None] = mapped_column(Integer)  # 0=Sat .. 6=Fri
    day_of_month: Mapped[int | None] = mapped_column(Integer)  # 1-31, clamped to month end
    # Set only on exception replacements: the occurrence this row stands in for
    source_template_id: Mapped[str | None] = mapped_column(String(200))
    replaces_on: Mapped[date | None] = mapped_column(Date)

    wallet: Mapped[Wallet] = relationship(back_populates="templates")
    exclusions: Mapped[list["TemplateExclusion"]] = relationship(
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="TemplateExclusion.excluded_on",
    )

    __table_args__ = (
        Index("ix_template_wallet_frequency", "wallet_id", "frequency"),
        Index("ix_template_wallet_date", "wallet_id", "anchor_date"),
        UniqueConstraint("wallet_id", "source_template_id", "replaces_on", name="uq_template_replacement"),
    )


class TemplateExclusion(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    template_id: Mapped[str] = mapped_column(
        ForeignKey("transactiontemplate.id", ondelete="CASCADE"),
        nullable=False,
    )
    excluded_on: Mapped[date] = mapped_column(Date, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    template: Mapped[TransactionTemplate] = relationship(back_populates="exclusions")

    __table_args__ = (
        UniqueConstraint("template_id", "excluded_on", name="uq_template_exclusion_date"),
    )
