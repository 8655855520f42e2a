"""Detection and merging of duplicate affairs created by independent syncs."""

from __future__ import annotations

import logging
from datetime import timedelta

from poligraph.affairs.matching import AFFAIR_DATE_WINDOW, match_affair_pair
from poligraph.affairs.stores import AffairStore
from poligraph.affairs.types import (
    AUTO_MERGE_TIERS,
    AffairSnapshot,
    AffairSummary,
    MatchConfidence,
    MergeOutcome,
    PotentialDuplicate,
    ReconciliationResult,
    ReconciliationStats,
)
from poligraph.errors import AffairNotFoundError, InvalidMergeError

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system:reconcile-affairs"


class AffairReconciler:
    """Find, merge and dismiss duplicate affairs through an ``AffairStore``."""

    def __init__(self, store: AffairStore, *, date_window: timedelta = AFFAIR_DATE_WINDOW) -> None:
        self._store = store
        self._date_window = date_window

    def find_potential_duplicates(self) -> list[PotentialDuplicate]:
        """Compare unverified affairs pairwise within each politician, best first."""

        dismissed = self._store.list_dismissed_pairs()
        duplicates: list[PotentialDuplicate] = []
        for group in self._store.find_unverified_grouped_by_politician().values():
            if len(group) < 2:
                continue
            for index, affair_a in enumerate(group):
                for affair_b in group[index + 1 :]:
                    if _pair_key(affair_a.id, affair_b.id) in dismissed:
                        continue
                    match = match_affair_pair(affair_b, affair_a, date_window=self._date_window)
                    if match is None:
                        continue
                    duplicates.append(
                        PotentialDuplicate(
                            affair_a=AffairSummary.from_snapshot(affair_a),
                            affair_b=AffairSummary.from_snapshot(affair_b),
                            score=match.score,
                            confidence=match.confidence,
                            matched_by=match.matched_by,
                        )
                    )
        duplicates.sort(key=lambda duplicate: duplicate.score, reverse=True)
        return duplicates

    def merge_affairs(self, keep_id: str, remove_id: str, *, merged_by: str = SYSTEM_ACTOR) -> MergeOutcome:
        """Move sources and identifiers of ``remove_id`` onto ``keep_id`` and delete it.

        Destructive and not idempotent: once the loser is gone, a repeated call
        raises ``AffairNotFoundError`` and leaves the keeper untouched.
        """

        if keep_id == remove_id:
            raise InvalidMergeError("Cannot merge an affair into itself.")

        with self._store.atomic():
            keep = self._store.get_affair(keep_id)
            if keep is None:
                raise AffairNotFoundError(keep_id, "keep")
            remove = self._store.get_affair(remove_id)
            if remove is None:
                raise AffairNotFoundError(remove_id, "remove")

            sources_moved = self._store.transfer_sources(remove_id, keep_id)
            identifiers_merged = self._store.absorb_identifiers(keep_id, remove_id)
            self._store.delete_affair(remove_id)
            self._store.forget_dismissals(remove_id)
            self._store.record_merge(
                keep_id,
                remove_id,
                {
                    "mergedFrom": remove_id,
                    "removedTitle": remove.title,
                    "sourcesMoved": sources_moved,
                    "identifiersMerged": identifiers_merged,
                    "mergedBy": merged_by,
                },
            )

        logger.info(
            "affairs.merged keep_id=%s remove_id=%s sources_moved=%d identifiers=%s",
            keep_id,
            remove_id,
            sources_moved,
            ",".join(identifiers_merged) or "-",
        )
        return MergeOutcome(
            keep_id=keep_id,
            remove_id=remove_id,
            sources_moved=sources_moved,
            identifiers_merged=identifiers_merged,
        )

    def dismiss_duplicate(self, affair_id_a: str, affair_id_b: str) -> None:
        """Mark a pair as distinct affairs so it is never proposed again."""

        if affair_id_a == affair_id_b:
            raise InvalidMergeError("A dismissed pair needs two distinct affairs.")
        with self._store.atomic():
            self._store.add_dismissed_pair(*_pair_key(affair_id_a, affair_id_b))

    def reconcile_affairs(self, *, auto_merge: bool = False, dry_run: bool = False) -> ReconciliationResult:
        """Detect duplicates and, with ``auto_merge``, merge CERTAIN/HIGH pairs.

        POSSIBLE pairs are always left for manual review.
        """

        duplicates = self.find_potential_duplicates()
        result = ReconciliationResult(duplicates_found=len(duplicates), dry_run=dry_run)
        remaining_possible = _count_possible(duplicates)

        if auto_merge:
            mergeable = [duplicate for duplicate in duplicates if duplicate.confidence in AUTO_MERGE_TIERS]
            result.mergeable = len(mergeable)
            removed: set[str] = set()
            for duplicate in mergeable:
                keep_id, remove_id = choose_keeper(duplicate)
                if keep_id in removed or remove_id in removed:
                    result.skipped += 1
                    logger.info(
                        "affairs.merge_skipped keep_id=%s remove_id=%s reason=already_merged",
                        keep_id,
                        remove_id,
                    )
                    continue
                if dry_run:
                    logger.info("affairs.merge_dry_run keep_id=%s remove_id=%s", keep_id, remove_id)
                    result.merged += 1
                    removed.add(remove_id)
                    continue
                try:
                    self.merge_affairs(keep_id, remove_id)
                except Exception:
                    result.errors += 1
                    logger.exception("affairs.merge_failed keep_id=%s remove_id=%s", keep_id, remove_id)
                    continue
                result.merged += 1
                removed.add(remove_id)

            if result.merged and not dry_run:
                remaining_possible = _count_possible(self.find_potential_duplicates())

        result.remaining_possible = remaining_possible
        logger.info(
            "affairs.reconcile_summary duplicates=%d mergeable=%d merged=%d errors=%d skipped=%d "
            "remaining_possible=%d dry_run=%s",
            result.duplicates_found,
            result.mergeable,
            result.merged,
            result.errors,
            result.skipped,
            result.remaining_possible,
            dry_run,
        )
        return result

    def get_reconciliation_stats(self) -> ReconciliationStats:
        duplicates = self.find_potential_duplicates()
        by_certainty = {confidence: 0 for confidence in MatchConfidence}
        for duplicate in duplicates:
            by_certainty[duplicate.confidence] += 1
        return ReconciliationStats(
            total_unverified=self._store.count_unverified(),
            total_duplicates=len(duplicates),
            duplicates_by_certainty=by_certainty,
            total_dismissed=self._store.count_dismissed(),
        )


def choose_keeper(duplicate: PotentialDuplicate) -> tuple[str, str]:
    """Return ``(keep_id, remove_id)``: more source types wins, then the smaller id."""

    first, second = sorted((duplicate.affair_a, duplicate.affair_b), key=lambda summary: summary.id)
    if len(second.sources) > len(first.sources):
        return second.id, first.id
    return first.id, second.id


def group_by_politician(affairs: list[AffairSnapshot]) -> dict[str, list[AffairSnapshot]]:
    """Group snapshots by politician, keeping input order inside each group."""

    grouped: dict[str, list[AffairSnapshot]] = {}
    for affair in affairs:
        grouped.setdefault(affair.politician_id, []).append(affair)
    return grouped


def _pair_key(affair_id_a: str, affair_id_b: str) -> tuple[str, str]:
    first, second = sorted((affair_id_a, affair_id_b))
    return first, second


def _count_possible(duplicates: list[PotentialDuplicate]) -> int:
    return sum(1 for duplicate in duplicates if duplicate.confidence == MatchConfidence.POSSIBLE)
