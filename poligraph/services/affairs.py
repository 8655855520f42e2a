"""SQLAlchemy-backed affair reconciliation services."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import timedelta
from typing import Any

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import Session

from poligraph.affairs.reconciliation import SYSTEM_ACTOR, AffairReconciler, group_by_politician
from poligraph.affairs.types import (
    AffairSnapshot,
    MergeOutcome,
    PotentialDuplicate,
    ReconciliationResult,
    ReconciliationStats,
)
from poligraph.config import get_settings
from poligraph.models.affair import Affair, AffairSource, DismissedDuplicate
from poligraph.models.affair_merge_audit import AffairMergeAudit


class SqlAlchemyAffairStore:
    """``AffairStore`` over the affair, source and dismissal tables."""

    def __init__(self, db: Session) -> None:
        self._db = db

    @contextmanager
    def atomic(self) -> Iterator[None]:
        try:
            yield
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise

    def find_unverified_grouped_by_politician(self) -> dict[str, list[AffairSnapshot]]:
        stmt = (
            select(Affair)
            .where(Affair.verified_at.is_(None))
            .order_by(Affair.politician_id.asc(), Affair.created_at.asc(), Affair.id.asc())
        )
        return group_by_politician([_snapshot(affair) for affair in self._db.scalars(stmt).all()])

    def list_dismissed_pairs(self) -> set[tuple[str, str]]:
        rows = self._db.execute(select(DismissedDuplicate.affair_id_a, DismissedDuplicate.affair_id_b)).all()
        return {(str(id_a), str(id_b)) for id_a, id_b in rows}

    def get_affair(self, affair_id: str) -> AffairSnapshot | None:
        affair = self._db.scalar(select(Affair).where(Affair.id == affair_id))
        return _snapshot(affair) if affair is not None else None

    def transfer_sources(self, from_affair_id: str, to_affair_id: str) -> int:
        existing_urls = set(
            self._db.scalars(select(AffairSource.url).where(AffairSource.affair_id == to_affair_id)).all()
        )
        movable_ids = [
            source_id
            for source_id, url in self._db.execute(
                select(AffairSource.id, AffairSource.url).where(AffairSource.affair_id == from_affair_id)
            ).all()
            if url not in existing_urls
        ]
        if movable_ids:
            self._db.execute(
                update(AffairSource).where(AffairSource.id.in_(movable_ids)).values(affair_id=to_affair_id)
            )
        return len(movable_ids)

    def absorb_identifiers(self, keep_id: str, remove_id: str) -> list[str]:
        keep = self._db.scalar(select(Affair).where(Affair.id == keep_id))
        remove = self._db.scalar(select(Affair).where(Affair.id == remove_id))
        if keep is None or remove is None:
            return []

        merged: list[str] = []
        if not keep.ecli and remove.ecli:
            # ECLI is unique: free it on the loser before copying.
            ecli = remove.ecli
            remove.ecli = None
            self._db.flush()
            keep.ecli = ecli
            merged.append("ecli")
        if not keep.pourvoi_number and remove.pourvoi_number:
            keep.pourvoi_number = remove.pourvoi_number
            merged.append("pourvoiNumber")
        if remove.case_numbers_json:
            union = list(dict.fromkeys([*keep.case_numbers_json, *remove.case_numbers_json]))
            if union != list(keep.case_numbers_json):
                keep.case_numbers_json = union
                merged.append("caseNumbers")
        if keep.verdict_date is None and remove.verdict_date is not None:
            keep.verdict_date = remove.verdict_date
            merged.append("verdictDate")
        self._db.flush()
        return merged

    def delete_affair(self, affair_id: str) -> None:
        self._db.execute(delete(AffairSource).where(AffairSource.affair_id == affair_id))
        self._db.execute(delete(Affair).where(Affair.id == affair_id))

    def forget_dismissals(self, affair_id: str) -> None:
        self._db.execute(
            delete(DismissedDuplicate).where(
                or_(DismissedDuplicate.affair_id_a == affair_id, DismissedDuplicate.affair_id_b == affair_id)
            )
        )

    def record_merge(self, keep_id: str, remove_id: str, details: dict[str, Any]) -> None:
        self._db.add(
            AffairMergeAudit(
                kept_affair_id=keep_id,
                removed_affair_id=remove_id,
                merged_by=str(details.get("mergedBy") or SYSTEM_ACTOR),
                details_json=details,
            )
        )
        self._db.flush()

    def add_dismissed_pair(self, affair_id_a: str, affair_id_b: str) -> None:
        existing = self._db.scalar(
            select(DismissedDuplicate.id).where(
                DismissedDuplicate.affair_id_a == affair_id_a,
                DismissedDuplicate.affair_id_b == affair_id_b,
            )
        )
        if existing is None:
            self._db.add(DismissedDuplicate(affair_id_a=affair_id_a, affair_id_b=affair_id_b))
            self._db.flush()

    def count_unverified(self) -> int:
        return int(self._db.scalar(select(func.count(Affair.id)).where(Affair.verified_at.is_(None))) or 0)

    def count_dismissed(self) -> int:
        return int(self._db.scalar(select(func.count(DismissedDuplicate.id))) or 0)


def build_reconciler(db: Session) -> AffairReconciler:
    """Wire the reconciler to the SQLAlchemy store and configured date window."""

    window = timedelta(days=get_settings().affair_date_window_days)
    return AffairReconciler(SqlAlchemyAffairStore(db), date_window=window)


def list_potential_duplicates(db: Session) -> list[PotentialDuplicate]:
    return build_reconciler(db).find_potential_duplicates()


def merge_affairs(db: Session, keep_id: str, remove_id: str, *, merged_by: str = SYSTEM_ACTOR) -> MergeOutcome:
    """Merge ``remove_id`` into ``keep_id`` in one transaction."""

    return build_reconciler(db).merge_affairs(keep_id, remove_id, merged_by=merged_by)


def dismiss_duplicate(db: Session, affair_id_a: str, affair_id_b: str) -> None:
    build_reconciler(db).dismiss_duplicate(affair_id_a, affair_id_b)


def reconcile_affairs(db: Session, *, auto_merge: bool = False, dry_run: bool = False) -> ReconciliationResult:
    return build_reconciler(db).reconcile_affairs(auto_merge=auto_merge, dry_run=dry_run)


def get_reconciliation_stats(db: Session) -> ReconciliationStats:
    return build_reconciler(db).get_reconciliation_stats()


def list_affair_merge_audits(db: Session, affair_id: str) -> list[AffairMergeAudit]:
    """List merge audits where the affair was kept, oldest first."""

    stmt = (
        select(AffairMergeAudit)
        .where(AffairMergeAudit.kept_affair_id == affair_id)
        .order_by(AffairMergeAudit.timestamp.asc(), AffairMergeAudit.id.asc())
    )
    return list(db.scalars(stmt).all())


def _snapshot(affair: Affair) -> AffairSnapshot:
    return AffairSnapshot(
        id=affair.id,
        politician_id=affair.politician_id,
        title=affair.title,
        category=affair.category,
        ecli=affair.ecli,
        pourvoi_number=affair.pourvoi_number,
        case_numbers=tuple(affair.case_numbers_json or ()),
        verdict_date=affair.verdict_date,
        source_types=tuple(dict.fromkeys(source.source_type for source in affair.sources)),
    )
