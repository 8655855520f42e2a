"""ORM models package exports."""

from poligraph.models.affair import Affair, AffairSource, DismissedDuplicate
from poligraph.models.affair_merge_audit import AffairMergeAudit
from poligraph.models.identity_decision import IdentityDecision
from poligraph.models.politician import ExternalId, Mandate, Politician

__all__ = [
    "Politician",
    "Mandate",
    "ExternalId",
    "IdentityDecision",
    "Affair",
    "AffairSource",
    "DismissedDuplicate",
    "AffairMergeAudit",
]
