"""Detect duplicate affairs and optionally auto-merge confident pairs.

Usage (from repository root):
    python scripts/reconcile_affairs.py                 # list potential duplicates
    python scripts/reconcile_affairs.py --auto-merge    # merge CERTAIN/HIGH pairs
    python scripts/reconcile_affairs.py --auto-merge --dry-run
    python scripts/reconcile_affairs.py --stats
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from time import perf_counter

# Make `poligraph` imports work without an editable install.
PROJECT_DIR = Path(__file__).resolve().parents[1]
if str(PROJECT_DIR) not in sys.path:
    sys.path.insert(0, str(PROJECT_DIR))

from poligraph.affairs.types import MatchConfidence, PotentialDuplicate
from poligraph.db.session import SessionLocal
from poligraph.log_config import configure_logging
from poligraph.services.affairs import get_reconciliation_stats, list_potential_duplicates
from poligraph.services.background_jobs import run_affair_reconciliation_job


def parse_args() -> argparse.Namespace:
    """Parse script CLI arguments."""

    parser = argparse.ArgumentParser(description="Detect and merge duplicate affairs.")
    parser.add_argument("--auto-merge", action="store_true", help="Merge CERTAIN and HIGH pairs.")
    parser.add_argument("--dry-run", action="store_true", help="Preview merges without writing.")
    parser.add_argument("--stats", action="store_true", help="Only print reconciliation stats.")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level.")
    return parser.parse_args()


def print_duplicate(duplicate: PotentialDuplicate, index: int) -> None:
    print(
        f"{index + 1}. [{duplicate.confidence.value}] score={duplicate.score * 100:.0f}% "
        f"matched_by={duplicate.matched_by}"
    )
    for label, summary in (("A", duplicate.affair_a), ("B", duplicate.affair_b)):
        print(f"   {label}: {summary.title}")
        print(f"      sources={', '.join(summary.sources) or '-'} id={summary.id}")


def main() -> int:
    """Run reconciliation and print a short report."""

    args = parse_args()
    configure_logging(level=logging.DEBUG if args.verbose else logging.INFO)
    started = perf_counter()
    mode = "DRY RUN" if args.dry_run else "AUTO-MERGE" if args.auto_merge else "PREVIEW"
    print(f"Affair reconciliation mode={mode}")

    with SessionLocal() as db:
        if args.stats:
            stats = get_reconciliation_stats(db)
            print(f"unverified_affairs={stats.total_unverified}")
            print(f"potential_duplicates={stats.total_duplicates}")
            for confidence in MatchConfidence:
                print(f"  {confidence.value}={stats.duplicates_by_certainty[confidence]}")
            print(f"dismissed_pairs={stats.total_dismissed}")
            return 0

        duplicates = list_potential_duplicates(db)
        if not duplicates:
            print("No potential duplicates found.")
            return 0
        print(f"{len(duplicates)} potential duplicate(s):")
        for index, duplicate in enumerate(duplicates):
            print_duplicate(duplicate, index)

    if args.auto_merge:
        result = run_affair_reconciliation_job(auto_merge=True, dry_run=args.dry_run)
        prefix = "[DRY-RUN] " if args.dry_run else ""
        print()
        print(f"{prefix}mergeable={result.mergeable} merged={result.merged} errors={result.errors}")
        print(f"skipped={result.skipped}")
        if result.remaining_possible:
            print(f"{result.remaining_possible} POSSIBLE pair(s) left for manual review")

    print(f"Done in {perf_counter() - started:.1f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
