"""Decision-log-first identity resolution for incoming observations."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from poligraph.identity.stores import DecisionLogStore, PoliticianStore
from poligraph.identity.types import (
    BIRTHDATE_MATCH_SCORE,
    BIRTHDATE_MISMATCH_SCORE,
    DEPARTMENT_MATCH_SCORE,
    NAME_ONLY_SCORE,
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
    as_date,
)

logger = logging.getLogger(__name__)

RESOLVER_VERSION = "identity-v1"


class IdentityResolver:
    """Resolve observations to canonical politicians with an audit trail.

    Steps, first applicable wins:

    1. active decisions for ``(source, source_id)``: ``NOT_SAME`` rows build the
       blocked set, a confident ``SAME`` row is returned as-is
    2. deterministic ``ExternalId`` link, unless blocked
    3. name candidates scored by birth date and department signals
    4. threshold routing into ``SAME`` / ``UNDECIDED`` / ``NEW``

    Every outcome carrying a politician id is appended to the decision log.
    """

    def __init__(
        self,
        politicians: PoliticianStore,
        decisions: DecisionLogStore,
        *,
        thresholds: IdentityThresholds | None = None,
    ) -> None:
        self._politicians = politicians
        self._decisions = decisions
        self.thresholds = thresholds or IdentityThresholds()

    def resolve(self, observation: Observation) -> ResolveResult:
        prior_decisions = self._decisions.find_active_decisions(observation.source, observation.source_id)
        blocked_ids = {
            decision.politician_id
            for decision in prior_decisions
            if decision.judgement == Judgement.NOT_SAME
        }

        confirmed = _find_confirmed_same(prior_decisions, self.thresholds.auto_match)
        if confirmed is not None:
            return ResolveResult(
                politician_id=confirmed.politician_id,
                confidence=confirmed.confidence,
                method=confirmed.method,
                decision=Decision.SAME,
            )

        linked_id = self._politicians.find_external_id(observation.source, observation.source_id)
        if linked_id is not None and linked_id not in blocked_ids:
            result = ResolveResult(
                politician_id=linked_id,
                confidence=1.0,
                method=MatchMethod.EXTERNAL_ID,
                decision=Decision.SAME,
            )
            self._log_decision(observation, result)
            return result

        politicians = self._politicians.find_many_by_name(observation.first_name, observation.last_name)
        candidates = [
            self.score_candidate(observation, politician, blocked=politician.id in blocked_ids)
            for politician in politicians
        ]
        result = self._decide(candidates)
        self._log_decision(observation, result)
        return result

    def score_candidate(
        self,
        observation: Observation,
        politician: PoliticianSnapshot,
        *,
        blocked: bool = False,
    ) -> CandidateMatch:
        """Score one name-matched politician against the observation."""

        score = NAME_ONLY_SCORE
        method = MatchMethod.NAME_ONLY

        observed_birth = as_date(observation.birth_date)
        known_birth = as_date(politician.birth_date)
        if observed_birth is not None and known_birth is not None:
            if abs(known_birth - observed_birth) <= self.thresholds.birthdate_tolerance:
                score = BIRTHDATE_MATCH_SCORE
                method = MatchMethod.BIRTHDATE
            else:
                score = BIRTHDATE_MISMATCH_SCORE

        # Only upgrades: a birth date verdict is never overridden.
        if (
            observation.department
            and observation.department in politician.department_codes
            and score < DEPARTMENT_MATCH_SCORE
        ):
            score = DEPARTMENT_MATCH_SCORE
            method = MatchMethod.DEPARTMENT

        return CandidateMatch(
            politician_id=politician.id,
            first_name=politician.first_name,
            last_name=politician.last_name,
            birth_date=politician.birth_date,
            score=score,
            method=method,
            blocked=blocked,
        )

    def _decide(self, candidates: list[CandidateMatch]) -> ResolveResult:
        active = sorted(
            (candidate for candidate in candidates if not candidate.blocked),
            key=lambda candidate: candidate.score,
            reverse=True,
        )
        all_blocked = bool(candidates) and not active
        best = active[0] if active else None

        if best is None or best.score < self.thresholds.review:
            return ResolveResult(
                politician_id=None,
                confidence=best.score if best is not None else 0.0,
                method=best.method if best is not None else MatchMethod.NAME_ONLY,
                decision=Decision.NEW,
                candidates=candidates,
                blocked=all_blocked,
            )
        if best.score >= self.thresholds.auto_match:
            decision = Decision.SAME
        else:
            decision = Decision.UNDECIDED
        return ResolveResult(
            politician_id=best.politician_id,
            confidence=best.score,
            method=best.method,
            decision=decision,
            candidates=candidates,
        )

    def _log_decision(self, observation: Observation, result: ResolveResult) -> None:
        if result.politician_id is None:
            return

        record = DecisionRecord(
            source_type=observation.source,
            source_id=observation.source_id,
            politician_id=result.politician_id,
            judgement=Judgement(result.decision.value),
            confidence=result.confidence,
            method=result.method,
            evidence=_build_evidence(observation, result),
            decided_by=f"system:sync-{observation.source.lower()}",
        )
        try:
            self._decisions.append(record)
        except Exception:
            logger.exception(
                "identity.decision_log_failed source=%s source_id=%s politician_id=%s",
                observation.source,
                observation.source_id,
                result.politician_id,
            )


def _find_confirmed_same(
    decisions: Sequence[ActiveDecision],
    auto_match_threshold: float,
) -> ActiveDecision | None:
    for decision in decisions:
        if decision.judgement == Judgement.SAME and decision.confidence >= auto_match_threshold:
            return decision
    return None


def _build_evidence(observation: Observation, result: ResolveResult) -> dict[str, Any]:
    birth_date = as_date(observation.birth_date)
    return {
        "firstName": observation.first_name,
        "lastName": observation.last_name,
        "birthDate": birth_date.isoformat() if birth_date is not None else None,
        "department": observation.department,
        "mandateType": observation.mandate_type,
        "candidateCount": len(result.candidates),
        "candidates": [candidate.to_evidence() for candidate in result.candidates],
        "context": dict(observation.context) if observation.context else None,
        "resolverVersion": RESOLVER_VERSION,
    }
