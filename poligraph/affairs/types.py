"""Typed snapshots and results for affair deduplication."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class MatchConfidence(str, Enum):
    """Confidence tier of a potential duplicate pair."""

    CERTAIN = "CERTAIN"
    HIGH = "HIGH"
    POSSIBLE = "POSSIBLE"


# Tiers eligible for unattended merges.
AUTO_MERGE_TIERS = frozenset({MatchConfidence.CERTAIN, MatchConfidence.HIGH})


@dataclass(frozen=True, slots=True)
class AffairSnapshot:
    """Affair fields used by pair scoring and keeper selection."""

    id: str
    politician_id: str
    title: str
    category: str | None = None
    ecli: str | None = None
    pourvoi_number: str | None = None
    case_numbers: tuple[str, ...] = ()
    verdict_date: date | None = None
    source_types: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class AffairMatch:
    """Score of an existing affair against a candidate."""

    affair_id: str
    confidence: MatchConfidence
    score: float
    matched_by: str


@dataclass(frozen=True, slots=True)
class AffairSummary:
    """Compact affair view attached to a duplicate pair."""

    id: str
    title: str
    sources: tuple[str, ...]

    @classmethod
    def from_snapshot(cls, affair: AffairSnapshot) -> "AffairSummary":
        return cls(id=affair.id, title=affair.title, sources=tuple(dict.fromkeys(affair.source_types)))


@dataclass(frozen=True, slots=True)
class PotentialDuplicate:
    """Two affairs of the same politician that likely describe one case."""

    affair_a: AffairSummary
    affair_b: AffairSummary
    score: float
    confidence: MatchConfidence
    matched_by: str


@dataclass(slots=True)
class MergeOutcome:
    """Summary of one applied merge."""

    keep_id: str
    remove_id: str
    sources_moved: int
    identifiers_merged: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ReconciliationResult:
    """Aggregate counts of one reconciliation run."""

    duplicates_found: int = 0
    mergeable: int = 0
    merged: int = 0
    errors: int = 0
    skipped: int = 0
    remaining_possible: int = 0
    dry_run: bool = False


@dataclass(slots=True)
class ReconciliationStats:
    """Snapshot of the deduplication backlog."""

    total_unverified: int
    total_duplicates: int
    duplicates_by_certainty: dict[MatchConfidence, int]
    total_dismissed: int
