"""Judicial affair and attached source ORM models."""

from datetime import date, datetime

from sqlalchemy import JSON, Date, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from poligraph.models.base import Base, CreatedAtMixin, IdMixin


class Affair(Base, IdMixin, CreatedAtMixin):
    """Documented judicial case tied to one politician."""

    __tablename__ = "affairs"

    politician_id: Mapped[str] = mapped_column(
        ForeignKey("politicians.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(64), nullable=False)
    ecli: Mapped[str | None] = mapped_column(String(128), unique=True, nullable=True)
    pourvoi_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    case_numbers_json: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    verdict_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    sources: Mapped[list["AffairSource"]] = relationship(
        back_populates="affair",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="AffairSource.created_at",
    )


class AffairSource(Base, IdMixin, CreatedAtMixin):
    """Press article, database record or ruling documenting an affair."""

    __tablename__ = "affair_sources"

    affair_id: Mapped[str] = mapped_column(
        ForeignKey("affairs.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    source_type: Mapped[str] = mapped_column(String(32), nullable=False)
    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    title: Mapped[str | None] = mapped_column(String(512), nullable=True)

    affair: Mapped[Affair] = relationship(back_populates="sources")


class DismissedDuplicate(Base, IdMixin, CreatedAtMixin):
    """Pair of affairs confirmed distinct; ids are stored sorted."""

    __tablename__ = "dismissed_duplicates"
    __table_args__ = (
        UniqueConstraint("affair_id_a", "affair_id_b", name="uq_dismissed_duplicates_pair"),
    )

    affair_id_a: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    affair_id_b: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
