"""Affair merge audit log model."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from poligraph.models.base import Base, IdMixin


class AffairMergeAudit(Base, IdMixin):
    """Immutable record of one destructive affair merge."""

    __tablename__ = "affair_merge_audits"

    kept_affair_id: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    removed_affair_id: Mapped[str] = mapped_column(String(32), nullable=False)
    merged_by: Mapped[str] = mapped_column(String(128), nullable=False)
    details_json: Mapped[dict[str, object]] = mapped_column(JSON, default=dict, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
