"""SQLAlchemy-backed identity resolution services."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from poligraph.config import get_settings
from poligraph.identity.resolver import IdentityResolver
from poligraph.identity.types import (
    ActiveDecision,
    Decision,
    DecisionRecord,
    IdentityThresholds,
    Judgement,
    MatchMethod,
    Observation,
    PoliticianSnapshot,
    ResolveResult,
)
from poligraph.models.identity_decision import IdentityDecision
from poligraph.models.politician import ExternalId, Politician

logger = logging.getLogger(__name__)


class SqlAlchemyPoliticianStore:
    """``PoliticianStore`` reading politicians, mandates and external ids."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_many_by_name(self, first_name: str, last_name: str) -> list[PoliticianSnapshot]:
        stmt = (
            select(Politician)
            .where(
                func.lower(Politician.first_name) == func.lower(first_name.strip()),
                func.lower(Politician.last_name) == func.lower(last_name.strip()),
            )
            .order_by(Politician.created_at.asc(), Politician.id.asc())
        )
        return [
            PoliticianSnapshot(
                id=politician.id,
                first_name=politician.first_name,
                last_name=politician.last_name,
                birth_date=politician.birth_date,
                department_codes=frozenset(
                    mandate.department_code for mandate in politician.mandates if mandate.department_code
                ),
            )
            for politician in self._db.scalars(stmt).all()
        ]

    def find_external_id(self, source: str, source_id: str) -> str | None:
        return self._db.scalar(
            select(ExternalId.politician_id)
            .where(
                ExternalId.source == source,
                ExternalId.external_id == source_id,
                ExternalId.politician_id.is_not(None),
            )
            .limit(1)
        )


class SqlAlchemyDecisionLogStore:
    """``DecisionLogStore`` over the ``identity_decisions`` table."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_active_decisions(self, source_type: str, source_id: str) -> list[ActiveDecision]:
        return [
            ActiveDecision(
                politician_id=row.politician_id,
                judgement=Judgement(row.judgement),
                confidence=row.confidence,
                method=MatchMethod(row.method),
            )
            for row in list_active_decisions(self._db, source_type, source_id)
        ]

    def append(self, record: DecisionRecord) -> None:
        # SAVEPOINT keeps a failed insert from poisoning the caller's transaction.
        with self._db.begin_nested():
            self._db.add(
                IdentityDecision(
                    source_type=record.source_type,
                    source_id=record.source_id,
                    politician_id=record.politician_id,
                    judgement=record.judgement.value,
                    confidence=record.confidence,
                    method=record.method.value,
                    evidence_json=record.evidence,
                    decided_by=record.decided_by,
                )
            )


def build_resolver(db: Session, *, thresholds: IdentityThresholds | None = None) -> IdentityResolver:
    """Wire the resolver to SQLAlchemy stores and configured thresholds."""

    return IdentityResolver(
        SqlAlchemyPoliticianStore(db),
        SqlAlchemyDecisionLogStore(db),
        thresholds=thresholds or get_settings().identity_thresholds(),
    )


def resolve_observation(
    db: Session,
    observation: Observation,
    *,
    thresholds: IdentityThresholds | None = None,
    link_external_id: bool = True,
) -> ResolveResult:
    """Resolve one observation, link its external id on ``SAME`` and commit."""

    result = build_resolver(db, thresholds=thresholds).resolve(observation)
    if link_external_id and result.decision == Decision.SAME and result.politician_id is not None:
        upsert_external_id(db, observation.source, observation.source_id, result.politician_id)
    db.commit()
    return result


def upsert_external_id(db: Session, source: str, source_id: str, politician_id: str) -> ExternalId:
    """Create or re-point the external id row for ``(source, source_id)``."""

    row = db.scalar(
        select(ExternalId).where(ExternalId.source == source, ExternalId.external_id == source_id)
    )
    if row is None:
        row = ExternalId(source=source, external_id=source_id, politician_id=politician_id)
        db.add(row)
    elif row.politician_id != politician_id:
        logger.info(
            "identity.external_id_repointed source=%s source_id=%s from=%s to=%s",
            source,
            source_id,
            row.politician_id,
            politician_id,
        )
        row.politician_id = politician_id
    db.flush()
    return row


def record_manual_decision(
    db: Session,
    *,
    source_type: str,
    source_id: str,
    politician_id: str,
    judgement: Judgement,
    decided_by: str,
    note: str | None = None,
) -> IdentityDecision | None:
    """Append a human judgement and supersede active rows for the same pairing.

    Returns ``None`` when the politician does not exist.
    """

    if db.scalar(select(Politician.id).where(Politician.id == politician_id)) is None:
        return None

    previous = list(
        db.scalars(
            select(IdentityDecision).where(
                IdentityDecision.source_type == source_type,
                IdentityDecision.source_id == source_id,
                IdentityDecision.politician_id == politician_id,
                IdentityDecision.superseded_by_id.is_(None),
            )
        ).all()
    )
    decision = IdentityDecision(
        source_type=source_type,
        source_id=source_id,
        politician_id=politician_id,
        judgement=judgement.value,
        confidence=1.0,
        method=MatchMethod.MANUAL.value,
        evidence_json={
            "note": note,
            "supersedes": [row.id for row in previous],
        },
        decided_by=decided_by,
    )
    db.add(decision)
    db.flush()
    for row in previous:
        row.superseded_by_id = decision.id

    db.commit()
    db.refresh(decision)
    logger.info(
        "identity.manual_decision source=%s source_id=%s politician_id=%s judgement=%s superseded=%d",
        source_type,
        source_id,
        politician_id,
        judgement.value,
        len(previous),
    )
    return decision


def list_active_decisions(db: Session, source_type: str, source_id: str) -> list[IdentityDecision]:
    """List non-superseded decisions for one source record, most recent first."""

    stmt = (
        select(IdentityDecision)
        .where(
            IdentityDecision.source_type == source_type,
            IdentityDecision.source_id == source_id,
            IdentityDecision.superseded_by_id.is_(None),
        )
        .order_by(IdentityDecision.decided_at.desc())
    )
    return list(db.scalars(stmt).all())


def list_decision_history(db: Session, source_type: str, source_id: str) -> list[IdentityDecision]:
    """List every decision for one source record, oldest first."""

    stmt = (
        select(IdentityDecision)
        .where(
            IdentityDecision.source_type == source_type,
            IdentityDecision.source_id == source_id,
        )
        .order_by(IdentityDecision.decided_at.asc())
    )
    return list(db.scalars(stmt).all())


def list_review_queue(db: Session, *, limit: int = 50, offset: int = 0) -> Sequence[IdentityDecision]:
    """List active ``UNDECIDED`` decisions awaiting a human verdict."""

    stmt = (
        select(IdentityDecision)
        .where(
            IdentityDecision.judgement == Judgement.UNDECIDED.value,
            IdentityDecision.superseded_by_id.is_(None),
        )
        .order_by(IdentityDecision.decided_at.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(db.scalars(stmt).all())
