"""Unit tests for affair duplicate detection and merging."""

from __future__ import annotations

import unittest
from contextlib import contextmanager
from dataclasses import replace
from typing import Any

from poligraph.affairs.reconciliation import SYSTEM_ACTOR, AffairReconciler, choose_keeper, group_by_politician
from poligraph.affairs.types import AffairSnapshot, AffairSummary, MatchConfidence, PotentialDuplicate
from poligraph.errors import AffairNotFoundError, InvalidMergeError


class _InMemoryAffairStore:
    """Dict-backed store; ``atomic`` restores a snapshot on failure."""

    def __init__(self, affairs: list[AffairSnapshot], sources: dict[str, list[tuple[str, str]]]) -> None:
        self.affairs = {affair.id: affair for affair in affairs}
        self.sources = sources
        self.dismissed: set[tuple[str, str]] = set()
        self.merges: list[dict[str, Any]] = []
        self.fail_on_transfer: set[str] = set()

    @contextmanager
    def atomic(self):
        saved = (
            dict(self.affairs),
            {affair_id: list(rows) for affair_id, rows in self.sources.items()},
            set(self.dismissed),
            list(self.merges),
        )
        try:
            yield
        except Exception:
            self.affairs, self.sources, self.dismissed, self.merges = saved
            raise

    def find_unverified_grouped_by_politician(self) -> dict[str, list[AffairSnapshot]]:
        return group_by_politician([self._with_sources(affair) for affair in self.affairs.values()])

    def list_dismissed_pairs(self) -> set[tuple[str, str]]:
        return set(self.dismissed)

    def get_affair(self, affair_id: str) -> AffairSnapshot | None:
        affair = self.affairs.get(affair_id)
        return self._with_sources(affair) if affair is not None else None

    def transfer_sources(self, from_affair_id: str, to_affair_id: str) -> int:
        if from_affair_id in self.fail_on_transfer:
            raise RuntimeError("transfer failed")
        target = self.sources.setdefault(to_affair_id, [])
        existing_urls = {url for _, url in target}
        moved = [source for source in self.sources.pop(from_affair_id, []) if source[1] not in existing_urls]
        target.extend(moved)
        return len(moved)

    def absorb_identifiers(self, keep_id: str, remove_id: str) -> list[str]:
        keep = self.affairs[keep_id]
        remove = self.affairs[remove_id]
        merged: list[str] = []
        if not keep.ecli and remove.ecli:
            keep = replace(keep, ecli=remove.ecli)
            merged.append("ecli")
        self.affairs[keep_id] = keep
        return merged

    def delete_affair(self, affair_id: str) -> None:
        del self.affairs[affair_id]

    def forget_dismissals(self, affair_id: str) -> None:
        self.dismissed = {pair for pair in self.dismissed if affair_id not in pair}

    def record_merge(self, keep_id: str, remove_id: str, details: dict[str, Any]) -> None:
        self.merges.append({"keep": keep_id, "remove": remove_id, **details})

    def add_dismissed_pair(self, affair_id_a: str, affair_id_b: str) -> None:
        self.dismissed.add((affair_id_a, affair_id_b))

    def count_unverified(self) -> int:
        return len(self.affairs)

    def count_dismissed(self) -> int:
        return len(self.dismissed)

    def _with_sources(self, affair: AffairSnapshot) -> AffairSnapshot:
        return replace(
            affair,
            source_types=tuple(dict.fromkeys(source_type for source_type, _ in self.sources.get(affair.id, []))),
        )


def _affair(affair_id: str, title: str, **overrides) -> AffairSnapshot:
    values = {"id": affair_id, "politician_id": "pol-1", "title": title}
    values.update(overrides)
    return AffairSnapshot(**values)


def _build_store() -> _InMemoryAffairStore:
    affairs = [
        _affair("a1", "Emplois fictifs", ecli="ECLI:FR:1", category="DETOURNEMENT_FONDS_PUBLICS"),
        _affair("a2", "[À VÉRIFIER] Emplois fictifs", category="DETOURNEMENT_FONDS_PUBLICS"),
        _affair("a3", "Emplois fictifs et recel", category="RECEL"),
        _affair("b1", "Harcèlement moral", politician_id="pol-2"),
    ]
    sources = {
        "a1": [("WIKIDATA", "https://wikidata.example/q1")],
        "a2": [("PRESSE", "https://press.example/1"), ("JUDILIBRE", "https://judilibre.example/1")],
        "a3": [("PRESSE", "https://press.example/2")],
        "b1": [("PRESSE", "https://press.example/3")],
    }
    return _InMemoryAffairStore(affairs, sources)


class FindPotentialDuplicatesTests(unittest.TestCase):
    def test_pairs_are_found_per_politician_and_sorted(self) -> None:
        duplicates = AffairReconciler(_build_store()).find_potential_duplicates()

        pairs = [({duplicate.affair_a.id, duplicate.affair_b.id}, duplicate.matched_by) for duplicate in duplicates]
        self.assertEqual(
            pairs,
            [
                ({"a1", "a2"}, "title-exact"),
                ({"a1", "a3"}, "title-partial"),
                ({"a2", "a3"}, "title-partial"),
            ],
        )
        self.assertEqual(duplicates[0].confidence, MatchConfidence.HIGH)
        self.assertEqual(duplicates[0].affair_b.sources, ("PRESSE", "JUDILIBRE"))

    def test_dismissed_pairs_are_excluded(self) -> None:
        store = _build_store()
        reconciler = AffairReconciler(store)

        reconciler.dismiss_duplicate("a2", "a1")

        self.assertEqual(store.dismissed, {("a1", "a2")})
        pairs = [{duplicate.affair_a.id, duplicate.affair_b.id} for duplicate in reconciler.find_potential_duplicates()]
        self.assertNotIn({"a1", "a2"}, pairs)

    def test_dismissing_same_affair_is_rejected(self) -> None:
        with self.assertRaises(InvalidMergeError):
            AffairReconciler(_build_store()).dismiss_duplicate("a1", "a1")


class MergeAffairsTests(unittest.TestCase):
    def test_merge_moves_sources_and_deletes_loser(self) -> None:
        store = _build_store()
        store.dismissed.add(("a2", "a3"))

        outcome = AffairReconciler(store).merge_affairs("a2", "a1", merged_by="admin")

        self.assertEqual(outcome.sources_moved, 1)
        self.assertEqual(outcome.identifiers_merged, ["ecli"])
        self.assertNotIn("a1", store.affairs)
        self.assertEqual(store.affairs["a2"].ecli, "ECLI:FR:1")
        self.assertIn(("WIKIDATA", "https://wikidata.example/q1"), store.sources["a2"])
        self.assertEqual(store.dismissed, {("a2", "a3")})
        self.assertEqual(store.merges[0]["mergedFrom"], "a1")
        self.assertEqual(store.merges[0]["removedTitle"], "Emplois fictifs")
        self.assertEqual(store.merges[0]["mergedBy"], "admin")

    def test_second_merge_fails_without_touching_keeper(self) -> None:
        store = _build_store()
        reconciler = AffairReconciler(store)
        reconciler.merge_affairs("a2", "a1")
        keeper_sources = list(store.sources["a2"])

        with self.assertRaises(AffairNotFoundError) as raised:
            reconciler.merge_affairs("a2", "a1")

        self.assertEqual(raised.exception.affair_id, "a1")
        self.assertEqual(raised.exception.role, "remove")
        self.assertEqual(store.sources["a2"], keeper_sources)
        self.assertEqual(len(store.merges), 1)

    def test_missing_keeper_is_reported(self) -> None:
        with self.assertRaises(AffairNotFoundError) as raised:
            AffairReconciler(_build_store()).merge_affairs("missing", "a1")

        self.assertEqual(str(raised.exception), "Affair to keep not found: missing")

    def test_merge_into_itself_is_rejected(self) -> None:
        with self.assertRaises(InvalidMergeError):
            AffairReconciler(_build_store()).merge_affairs("a1", "a1")

    def test_failed_merge_is_rolled_back(self) -> None:
        store = _build_store()
        store.fail_on_transfer.add("a1")

        with self.assertRaises(RuntimeError):
            AffairReconciler(store).merge_affairs("a2", "a1")

        self.assertIn("a1", store.affairs)
        self.assertEqual(store.merges, [])


class ReconcileAffairsTests(unittest.TestCase):
    def test_detection_only_does_not_merge(self) -> None:
        store = _build_store()

        result = AffairReconciler(store).reconcile_affairs()

        self.assertEqual(result.duplicates_found, 3)
        self.assertEqual(result.mergeable, 0)
        self.assertEqual(result.merged, 0)
        self.assertEqual(result.remaining_possible, 2)
        self.assertEqual(len(store.affairs), 4)

    def test_auto_merge_never_merges_possible_pairs(self) -> None:
        store = _build_store()

        result = AffairReconciler(store).reconcile_affairs(auto_merge=True)

        self.assertEqual(result.mergeable, 1)
        self.assertEqual(result.merged, 1)
        self.assertEqual(result.errors, 0)
        # a2 has more source types, so a1 is folded into it.
        self.assertEqual(set(store.affairs), {"a2", "a3", "b1"})
        self.assertEqual(store.merges[0]["mergedBy"], SYSTEM_ACTOR)
        self.assertEqual(result.remaining_possible, 1)

    def test_dry_run_counts_without_writing(self) -> None:
        store = _build_store()

        result = AffairReconciler(store).reconcile_affairs(auto_merge=True, dry_run=True)

        self.assertTrue(result.dry_run)
        self.assertEqual(result.merged, 1)
        self.assertEqual(len(store.affairs), 4)
        self.assertEqual(store.merges, [])
        self.assertEqual(result.remaining_possible, 2)

    def test_pairs_touching_removed_affair_are_skipped(self) -> None:
        store = _InMemoryAffairStore(
            [
                _affair("x1", "Fraude fiscale", ecli="ECLI:X"),
                _affair("x2", "Fraude fiscale", ecli="ECLI:X"),
                _affair("x3", "Fraude fiscale"),
            ],
            {"x1": [("PRESSE", "https://press.example/x1")]},
        )

        result = AffairReconciler(store).reconcile_affairs(auto_merge=True)

        self.assertEqual(result.mergeable, 3)
        self.assertEqual(result.merged, 2)
        self.assertEqual(result.skipped, 1)
        self.assertEqual(set(store.affairs), {"x1"})

    def test_merge_errors_are_counted_and_batch_continues(self) -> None:
        store = _InMemoryAffairStore(
            [
                _affair("x1", "Fraude fiscale", ecli="ECLI:X"),
                _affair("x2", "Fraude fiscale", ecli="ECLI:X"),
                _affair("y1", "Emplois fictifs", politician_id="pol-2"),
                _affair("y2", "Emplois fictifs", politician_id="pol-2"),
            ],
            {},
        )
        store.fail_on_transfer.add("x2")

        with self.assertLogs("poligraph.affairs.reconciliation", level="ERROR"):
            result = AffairReconciler(store).reconcile_affairs(auto_merge=True)

        self.assertEqual(result.errors, 1)
        self.assertEqual(result.merged, 1)
        self.assertEqual(set(store.affairs), {"x1", "x2", "y1"})

    def test_stats_group_by_certainty(self) -> None:
        store = _build_store()
        store.dismissed.add(("a2", "a3"))

        stats = AffairReconciler(store).get_reconciliation_stats()

        self.assertEqual(stats.total_unverified, 4)
        self.assertEqual(stats.total_duplicates, 2)
        self.assertEqual(stats.duplicates_by_certainty[MatchConfidence.HIGH], 1)
        self.assertEqual(stats.duplicates_by_certainty[MatchConfidence.POSSIBLE], 1)
        self.assertEqual(stats.duplicates_by_certainty[MatchConfidence.CERTAIN], 0)
        self.assertEqual(stats.total_dismissed, 1)


class ChooseKeeperTests(unittest.TestCase):
    def test_more_source_types_wins(self) -> None:
        duplicate = PotentialDuplicate(
            affair_a=AffairSummary("a", "T", ("PRESSE",)),
            affair_b=AffairSummary("b", "T", ("PRESSE", "JUDILIBRE")),
            score=0.85,
            confidence=MatchConfidence.HIGH,
            matched_by="title-exact",
        )

        self.assertEqual(choose_keeper(duplicate), ("b", "a"))

    def test_tie_keeps_smaller_id(self) -> None:
        duplicate = PotentialDuplicate(
            affair_a=AffairSummary("z", "T", ("PRESSE",)),
            affair_b=AffairSummary("m", "T", ("WIKIDATA",)),
            score=0.85,
            confidence=MatchConfidence.HIGH,
            matched_by="title-exact",
        )

        self.assertEqual(choose_keeper(duplicate), ("m", "z"))


if __name__ == "__main__":
    unittest.main()
