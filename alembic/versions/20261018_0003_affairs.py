"""affairs, sources, dismissed duplicates and merge audits

Revision ID: 20261018_0003
Revises: 20261018_0002
Create Date: 2026-10-18 00:00:03
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261018_0003"
down_revision: str | None = "20261018_0002"
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "affairs",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("politician_id", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(length=512), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=64), nullable=False),
        sa.Column("ecli", sa.String(length=128), nullable=True),
        sa.Column("pourvoi_number", sa.String(length=64), nullable=True),
        sa.Column("case_numbers_json", sa.JSON(), nullable=False),
        sa.Column("verdict_date", sa.Date(), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["politician_id"], ["politicians.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("ecli"),
    )
    op.create_index("ix_affairs_politician_id", "affairs", ["politician_id"], unique=False)

    op.create_table(
        "affair_sources",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("affair_id", sa.String(length=32), nullable=False),
        sa.Column("source_type", sa.String(length=32), nullable=False),
        sa.Column("url", sa.String(length=1024), nullable=False),
        sa.Column("title", sa.String(length=512), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["affair_id"], ["affairs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_affair_sources_affair_id", "affair_sources", ["affair_id"], unique=False)

    op.create_table(
        "dismissed_duplicates",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("affair_id_a", sa.String(length=32), nullable=False),
        sa.Column("affair_id_b", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("affair_id_a", "affair_id_b", name="uq_dismissed_duplicates_pair"),
    )
    op.create_index("ix_dismissed_duplicates_affair_id_a", "dismissed_duplicates", ["affair_id_a"], unique=False)
    op.create_index("ix_dismissed_duplicates_affair_id_b", "dismissed_duplicates", ["affair_id_b"], unique=False)

    op.create_table(
        "affair_merge_audits",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("kept_affair_id", sa.String(length=32), nullable=False),
        sa.Column("removed_affair_id", sa.String(length=32), nullable=False),
        sa.Column("merged_by", sa.String(length=128), nullable=False),
        sa.Column("details_json", sa.JSON(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_affair_merge_audits_kept_affair_id",
        "affair_merge_audits",
        ["kept_affair_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_affair_merge_audits_kept_affair_id", table_name="affair_merge_audits")
    op.drop_table("affair_merge_audits")
    op.drop_index("ix_dismissed_duplicates_affair_id_b", table_name="dismissed_duplicates")
    op.drop_index("ix_dismissed_duplicates_affair_id_a", table_name="dismissed_duplicates")
    op.drop_table("dismissed_duplicates")
    op.drop_index("ix_affair_sources_affair_id", table_name="affair_sources")
    op.drop_table("affair_sources")
    op.drop_index("ix_affairs_politician_id", table_name="affairs")
    op.drop_table("affairs")
