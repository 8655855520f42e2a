"""append-only identity decision log

Revision ID: 20261018_0002
Revises: 20261018_0001
Create Date: 2026-10-18 00:00:02
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261018_0002"
down_revision: str | None = "20261018_0001"
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "identity_decisions",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("source_type", sa.String(length=64), nullable=False),
        sa.Column("source_id", sa.String(length=255), nullable=False),
        sa.Column("politician_id", sa.String(length=32), nullable=False),
        sa.Column("judgement", sa.String(length=16), nullable=False),
        sa.Column("confidence", sa.Float(), nullable=False),
        sa.Column("method", sa.String(length=32), nullable=False),
        sa.Column("evidence_json", sa.JSON(), nullable=False),
        sa.Column("decided_by", sa.String(length=128), nullable=False),
        sa.Column("decided_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("superseded_by_id", sa.String(length=32), nullable=True),
        sa.ForeignKeyConstraint(["politician_id"], ["politicians.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["superseded_by_id"], ["identity_decisions.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_identity_decisions_source",
        "identity_decisions",
        ["source_type", "source_id"],
        unique=False,
    )
    op.create_index("ix_identity_decisions_politician_id", "identity_decisions", ["politician_id"], unique=False)
    op.create_index(
        "ix_identity_decisions_superseded_by_id",
        "identity_decisions",
        ["superseded_by_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_identity_decisions_superseded_by_id", table_name="identity_decisions")
    op.drop_index("ix_identity_decisions_politician_id", table_name="identity_decisions")
    op.drop_index("ix_identity_decisions_source", table_name="identity_decisions")
    op.drop_table("identity_decisions")
