"""track which occurrence an exception replacement stands in for

Revision ID: 0002_replacement_source
Revises: 0001_initial
Create Date: 2026-10-20 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0002_replacement_source"
down_revision: Union[str, None] = "0001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    columns = {col["name"] for col in inspector.get_columns("transactiontemplate")}
    with op.batch_alter_table("transactiontemplate") as batch:
        if "source_template_id" not in columns:
            batch.add_column(sa.Column("source_template_id", sa.String(length=200), nullable=True))
        if "replaces_on" not in columns:
            batch.add_column(sa.Column("replaces_on", sa.Date(), nullable=True))
        batch.create_unique_constraint(
            "uq_template_replacement",
            ["wallet_id", "source_template_id", "replaces_on"],
        )


def downgrade() -> None:
    with op.batch_alter_table("transactiontemplate") as batch:
        batch.drop_constraint("uq_template_replacement", type_="unique")
        batch.drop_column("replaces_on")
        batch.drop_column("source_template_id")
