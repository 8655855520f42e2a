"""SQLAlchemy metadata registry import for Alembic."""

from poligraph.models import (
    Affair,
    AffairMergeAudit,
    AffairSource,
    DismissedDuplicate,
    ExternalId,
    IdentityDecision,
    Mandate,
    Politician,
)
from poligraph.models.base import Base

__all__ = [
    "Base",
    "Politician",
    "Mandate",
    "ExternalId",
    "IdentityDecision",
    "Affair",
    "AffairSource",
    "DismissedDuplicate",
    "AffairMergeAudit",
]
