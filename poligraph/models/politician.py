"""Politician, mandate and external id ORM models."""

from datetime import date

from sqlalchemy import Date, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from poligraph.models.base import Base, CreatedAtMixin, IdMixin


class Politician(Base, IdMixin, CreatedAtMixin):
    """Canonical person; enriched over time, never merged implicitly."""

    __tablename__ = "politicians"

    first_name: Mapped[str] = mapped_column(String(128), index=True, nullable=False)
    last_name: Mapped[str] = mapped_column(String(128), index=True, nullable=False)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    mandates: Mapped[list["Mandate"]] = relationship(
        back_populates="politician",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class Mandate(Base, IdMixin):
    """Current or past mandate held by a politician."""

    __tablename__ = "mandates"

    politician_id: Mapped[str] = mapped_column(
        ForeignKey("politicians.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    mandate_type: Mapped[str] = mapped_column(String(64), nullable=False)
    department_code: Mapped[str | None] = mapped_column(String(8), index=True, nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    politician: Mapped[Politician] = relationship(back_populates="mandates")


class ExternalId(Base, IdMixin, CreatedAtMixin):
    """Identifier of a politician in one external source."""

    __tablename__ = "external_ids"
    __table_args__ = (UniqueConstraint("source", "external_id", name="uq_external_ids_source_external_id"),)

    source: Mapped[str] = mapped_column(String(64), nullable=False)
    external_id: Mapped[str] = mapped_column(String(255), nullable=False)
    politician_id: Mapped[str | None] = mapped_column(
        ForeignKey("politicians.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )
