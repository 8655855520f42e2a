"""Multi-criteria pair scoring for judicial affairs.

Judicial identifiers win over text: ECLI, then pourvoi number, then case
numbers. Without identifiers the normalized titles are compared, and as a last
resort the category plus a verdict date window.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import timedelta

from poligraph.affairs.types import AffairMatch, AffairSnapshot, MatchConfidence

AFFAIR_DATE_WINDOW = timedelta(days=30)

_REVIEW_MARKER_RE = re.compile(r"^\[À VÉRIFIER\]\s*", re.IGNORECASE)
_MULTISPACE_RE = re.compile(r"\s+")


def normalize_affair_title(title: str) -> str:
    """Strip the review marker, collapse whitespace and lowercase."""

    stripped = _REVIEW_MARKER_RE.sub("", title.strip())
    return _MULTISPACE_RE.sub(" ", stripped).strip().lower()


def match_affair_pair(
    candidate: AffairSnapshot,
    existing: AffairSnapshot,
    *,
    date_window: timedelta = AFFAIR_DATE_WINDOW,
) -> AffairMatch | None:
    """Return the strongest applicable match of ``existing`` for ``candidate``."""

    if candidate.ecli and candidate.ecli == existing.ecli:
        return AffairMatch(existing.id, MatchConfidence.CERTAIN, 1.0, "ecli")

    if candidate.pourvoi_number and candidate.pourvoi_number == existing.pourvoi_number:
        return AffairMatch(existing.id, MatchConfidence.HIGH, 0.95, "pourvoiNumber")

    if set(candidate.case_numbers) & set(existing.case_numbers):
        return AffairMatch(existing.id, MatchConfidence.HIGH, 0.8, "caseNumbers")

    candidate_title = normalize_affair_title(candidate.title)
    existing_title = normalize_affair_title(existing.title)
    if candidate_title and existing_title:
        if candidate_title == existing_title:
            return AffairMatch(existing.id, MatchConfidence.HIGH, 0.85, "title-exact")
        if candidate_title in existing_title or existing_title in candidate_title:
            if candidate.category and candidate.category == existing.category:
                return AffairMatch(existing.id, MatchConfidence.HIGH, 0.75, "title+category")
            return AffairMatch(existing.id, MatchConfidence.POSSIBLE, 0.5, "title-partial")

    if (
        candidate.category
        and candidate.category == existing.category
        and candidate.verdict_date is not None
        and existing.verdict_date is not None
        and abs(candidate.verdict_date - existing.verdict_date) <= date_window
    ):
        return AffairMatch(existing.id, MatchConfidence.POSSIBLE, 0.4, "category+date")

    return None


def find_matching_affairs(
    candidate: AffairSnapshot,
    affairs: Iterable[AffairSnapshot],
    *,
    date_window: timedelta = AFFAIR_DATE_WINDOW,
) -> list[AffairMatch]:
    """Match a candidate against affairs of the same politician, best first."""

    matches: list[AffairMatch] = []
    for existing in affairs:
        if existing.id == candidate.id or existing.politician_id != candidate.politician_id:
            continue
        match = match_affair_pair(candidate, existing, date_window=date_window)
        if match is not None:
            matches.append(match)
    matches.sort(key=lambda match: match.score, reverse=True)
    return matches


def is_duplicate(
    candidate: AffairSnapshot,
    affairs: Iterable[AffairSnapshot],
    *,
    date_window: timedelta = AFFAIR_DATE_WINDOW,
) -> bool:
    """True when any existing affair matches with CERTAIN or HIGH confidence."""

    return any(
        match.confidence in (MatchConfidence.CERTAIN, MatchConfidence.HIGH)
        for match in find_matching_affairs(candidate, affairs, date_window=date_window)
    )
