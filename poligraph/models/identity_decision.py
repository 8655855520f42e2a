"""Identity decision log model."""

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from poligraph.models.base import Base, IdMixin


class IdentityDecision(Base, IdMixin):
    """Append-only resolution outcome; ``superseded_by_id`` points to the newer row."""

    __tablename__ = "identity_decisions"
    __table_args__ = (
        Index("ix_identity_decisions_source", "source_type", "source_id"),
    )

    source_type: Mapped[str] = mapped_column(String(64), nullable=False)
    source_id: Mapped[str] = mapped_column(String(255), nullable=False)
    politician_id: Mapped[str] = mapped_column(
        ForeignKey("politicians.id", ondelete="RESTRICT"),
        index=True,
        nullable=False,
    )
    judgement: Mapped[str] = mapped_column(String(16), nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    method: Mapped[str] = mapped_column(String(32), nullable=False)
    evidence_json: Mapped[dict[str, object]] = mapped_column(JSON, default=dict, nullable=False)
    decided_by: Mapped[str] = mapped_column(String(128), nullable=False)
    decided_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    superseded_by_id: Mapped[str | None] = mapped_column(
        ForeignKey("identity_decisions.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )
