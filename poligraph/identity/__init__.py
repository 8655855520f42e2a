"""Identity resolution package."""

from poligraph.identity.resolver import RESOLVER_VERSION, IdentityResolver
from poligraph.identity.stores import DecisionLogStore, PoliticianStore
from poligraph.identity.types import (
    AUTO_MATCH_THRESHOLD,
    BIRTHDATE_TOLERANCE,
    REVIEW_THRESHOLD,
    ActiveDecision,
    CandidateMatch,
    Decision,
    DecisionRecord,
    IdentityThresholds,
    Judgement,
    MatchMethod,
    Observation,
    PoliticianSnapshot,
    ResolveResult,
)

__all__ = [
    "AUTO_MATCH_THRESHOLD",
    "BIRTHDATE_TOLERANCE",
    "REVIEW_THRESHOLD",
    "RESOLVER_VERSION",
    "ActiveDecision",
    "CandidateMatch",
    "Decision",
    "DecisionLogStore",
    "DecisionRecord",
    "IdentityResolver",
    "IdentityThresholds",
    "Judgement",
    "MatchMethod",
    "Observation",
    "PoliticianSnapshot",
    "PoliticianStore",
    "ResolveResult",
]
