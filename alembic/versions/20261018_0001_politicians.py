"""politicians, mandates and external ids

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 00:00:01
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261018_0001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "politicians",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("first_name", sa.String(length=128), nullable=False),
        sa.Column("last_name", sa.String(length=128), nullable=False),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_politicians_first_name", "politicians", ["first_name"], unique=False)
    op.create_index("ix_politicians_last_name", "politicians", ["last_name"], unique=False)

    op.create_table(
        "mandates",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("politician_id", sa.String(length=32), nullable=False),
        sa.Column("mandate_type", sa.String(length=64), nullable=False),
        sa.Column("department_code", sa.String(length=8), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(["politician_id"], ["politicians.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_mandates_politician_id", "mandates", ["politician_id"], unique=False)
    op.create_index("ix_mandates_department_code", "mandates", ["department_code"], unique=False)

    op.create_table(
        "external_ids",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("source", sa.String(length=64), nullable=False),
        sa.Column("external_id", sa.String(length=255), nullable=False),
        sa.Column("politician_id", sa.String(length=32), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["politician_id"], ["politicians.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("source", "external_id", name="uq_external_ids_source_external_id"),
    )
    op.create_index("ix_external_ids_politician_id", "external_ids", ["politician_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_external_ids_politician_id", table_name="external_ids")
    op.drop_table("external_ids")
    op.drop_index("ix_mandates_department_code", table_name="mandates")
    op.drop_index("ix_mandates_politician_id", table_name="mandates")
    op.drop_table("mandates")
    op.drop_index("ix_politicians_last_name", table_name="politicians")
    op.drop_index("ix_politicians_first_name", table_name="politicians")
    op.drop_table("politicians")
