"""Initial wallet schema: wallets, transaction templates, exclusions

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 10:00:00.000000
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "wallet",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "transactiontemplate",
        sa.Column("id", sa.String(length=200), primary_key=True),
        sa.Column("wallet_id", sa.Integer(), sa.ForeignKey("wallet.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.Enum("GANHO", "DESPESA", name="txntype"), nullable=False),
        sa.Column("amount", sa.Numeric(18, 4), nullable=False),
        sa.Column("category", sa.String(length=40), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("person", sa.String(length=100), nullable=True),
        sa.Column(
            "expense_budget_category",
            sa.Enum("GASTOS", "LAZER", "POUPANCA", name="expensebudgetcategory"),
            nullable=True,
        ),
        sa.Column("frequency", sa.Enum("UNIQUE", "WEEKLY", "MONTHLY", name="frequency"), nullable=False),
        sa.Column("anchor_date", sa.Date(), nullable=True),
        sa.Column("day_of_week", sa.Integer(), nullable=True),
        sa.Column("day_of_month", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_template_wallet_frequency", "transactiontemplate", ["wallet_id", "frequency"], unique=False)
    op.create_index("ix_template_wallet_date", "transactiontemplate", ["wallet_id", "anchor_date"], unique=False)
    op.create_table(
        "templateexclusion",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "template_id",
            sa.String(length=200),
            sa.ForeignKey("transactiontemplate.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("excluded_on", sa.Date(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("template_id", "excluded_on", name="uq_template_exclusion_date"),
    )


def downgrade() -> None:
    op.drop_table("templateexclusion")
    op.drop_index("ix_template_wallet_date", table_name="transactiontemplate")
    op.drop_index("ix_template_wallet_frequency", table_name="transactiontemplate")
    op.drop_table("transactiontemplate")
    op.drop_table("wallet")
