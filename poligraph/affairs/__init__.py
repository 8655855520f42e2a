"""Affair deduplication package."""

from poligraph.affairs.matching import (
    AFFAIR_DATE_WINDOW,
    find_matching_affairs,
    is_duplicate,
    match_affair_pair,
    normalize_affair_title,
)
from poligraph.affairs.reconciliation import AffairReconciler, choose_keeper, group_by_politician
from poligraph.affairs.stores import AffairStore
from poligraph.affairs.types import (
    AUTO_MERGE_TIERS,
    AffairMatch,
    AffairSnapshot,
    AffairSummary,
    MatchConfidence,
    MergeOutcome,
    PotentialDuplicate,
    ReconciliationResult,
    ReconciliationStats,
)

__all__ = [
    "AFFAIR_DATE_WINDOW",
    "AUTO_MERGE_TIERS",
    "AffairMatch",
    "AffairReconciler",
    "AffairSnapshot",
    "AffairStore",
    "AffairSummary",
    "MatchConfidence",
    "MergeOutcome",
    "PotentialDuplicate",
    "ReconciliationResult",
    "ReconciliationStats",
    "choose_keeper",
    "find_matching_affairs",
    "group_by_politician",
    "is_duplicate",
    "match_affair_pair",
    "normalize_affair_title",
]
