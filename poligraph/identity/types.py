"""Typed inputs, outputs and policy constants for identity resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any


AUTO_MATCH_THRESHOLD = 0.95
REVIEW_THRESHOLD = 0.70
BIRTHDATE_TOLERANCE = timedelta(days=1)

# Per-signal candidate scores.
NAME_ONLY_SCORE = 0.5
BIRTHDATE_MATCH_SCORE = 0.9
BIRTHDATE_MISMATCH_SCORE = 0.1
DEPARTMENT_MATCH_SCORE = 0.7


class Judgement(str, Enum):
    """Persisted outcome of one identity decision."""

    SAME = "SAME"
    NOT_SAME = "NOT_SAME"
    UNDECIDED = "UNDECIDED"


class Decision(str, Enum):
    """Outcome returned to callers; ``NEW`` means no canonical match."""

    SAME = "SAME"
    NOT_SAME = "NOT_SAME"
    UNDECIDED = "UNDECIDED"
    NEW = "NEW"


class MatchMethod(str, Enum):
    """Signal that produced a candidate score."""

    EXTERNAL_ID = "EXTERNAL_ID"
    BIRTHDATE = "BIRTHDATE"
    DEPARTMENT = "DEPARTMENT"
    NAME_ONLY = "NAME_ONLY"
    MANUAL = "MANUAL"


@dataclass(frozen=True, slots=True)
class IdentityThresholds:
    """Business policy for auto-matching and review routing."""

    auto_match: float = AUTO_MATCH_THRESHOLD
    review: float = REVIEW_THRESHOLD
    birthdate_tolerance: timedelta = BIRTHDATE_TOLERANCE

    def __post_init__(self) -> None:
        if not 0.0 <= self.review <= self.auto_match <= 1.0:
            raise ValueError("Thresholds must satisfy 0 <= review <= auto_match <= 1.")
        if self.birthdate_tolerance < timedelta(0):
            raise ValueError("Birthdate tolerance must not be negative.")


@dataclass(slots=True)
class Observation:
    """One incoming record from a sync source."""

    first_name: str
    last_name: str
    source: str
    source_id: str
    birth_date: date | None = None
    department: str | None = None
    mandate_type: str | None = None
    context: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class PoliticianSnapshot:
    """Politician fields needed to score a candidate."""

    id: str
    first_name: str
    last_name: str
    birth_date: date | None = None
    department_codes: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class ActiveDecision:
    """Non-superseded decision for one (source, source id) pair."""

    politician_id: str
    judgement: Judgement
    confidence: float
    method: MatchMethod


@dataclass(frozen=True, slots=True)
class DecisionRecord:
    """Decision row to append to the log."""

    source_type: str
    source_id: str
    politician_id: str
    judgement: Judgement
    confidence: float
    method: MatchMethod
    evidence: dict[str, Any]
    decided_by: str


@dataclass(slots=True)
class CandidateMatch:
    """Scored politician considered for one observation."""

    politician_id: str
    first_name: str
    last_name: str
    birth_date: date | None
    score: float
    method: MatchMethod
    blocked: bool = False

    def to_evidence(self) -> dict[str, Any]:
        return {
            "politicianId": self.politician_id,
            "score": self.score,
            "method": self.method.value,
            "blocked": self.blocked,
        }


@dataclass(slots=True)
class ResolveResult:
    """Resolution output for one observation."""

    politician_id: str | None
    confidence: float
    method: MatchMethod
    decision: Decision
    candidates: list[CandidateMatch] = field(default_factory=list)
    blocked: bool = False


def as_date(value: date | None) -> date | None:
    """Drop the time part of datetimes so birth dates compare as calendar days."""

    if isinstance(value, datetime):
        return value.date()
    return value
