"""Seed demo politicians and duplicate affairs.

Usage (from repository root):
    python scripts/seed_demo.py
    python scripts/seed_demo.py --no-reset
"""

from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path

from sqlalchemy import delete

# Make `poligraph` imports work without an editable install.
PROJECT_DIR = Path(__file__).resolve().parents[1]
if str(PROJECT_DIR) not in sys.path:
    sys.path.insert(0, str(PROJECT_DIR))

from poligraph.db.session import SessionLocal
from poligraph.models import (
    Affair,
    AffairMergeAudit,
    AffairSource,
    DismissedDuplicate,
    ExternalId,
    IdentityDecision,
    Mandate,
    Politician,
)


def build_demo_politicians() -> list[Politician]:
    """Return deterministic politicians, including two homonyms."""

    return [
        Politician(
            id="pol-1",
            first_name="Thierry",
            last_name="Cousin",
            birth_date=date(1960, 5, 16),
            mandates=[Mandate(mandate_type="MAIRE", department_code="45")],
        ),
        Politician(
            id="pol-2",
            first_name="Thierry",
            last_name="Cousin",
            birth_date=date(1975, 3, 22),
            mandates=[Mandate(mandate_type="CONSEILLER_MUNICIPAL", department_code="70")],
        ),
        Politician(
            id="pol-3",
            first_name="Jean",
            last_name="Martin",
            mandates=[Mandate(mandate_type="DEPUTE", department_code="75")],
        ),
    ]


def build_demo_affairs() -> list[Affair]:
    """Return affairs that the reconciler should flag as duplicates."""

    return [
        Affair(
            id="aff-1",
            politician_id="pol-3",
            title="Détournement de fonds publics",
            category="DETOURNEMENT_FONDS_PUBLICS",
            status="CONDAMNATION_PREMIERE_INSTANCE",
            case_numbers_json=["19/01234"],
            verdict_date=date(2021, 6, 10),
            sources=[AffairSource(source_type="WIKIDATA", url="https://www.wikidata.org/wiki/Q1")],
        ),
        Affair(
            id="aff-2",
            politician_id="pol-3",
            title="[À VÉRIFIER] Détournement de fonds publics",
            category="DETOURNEMENT_FONDS_PUBLICS",
            status="CONDAMNATION_PREMIERE_INSTANCE",
            sources=[
                AffairSource(source_type="PRESSE", url="https://example.org/article-1"),
                AffairSource(source_type="JUDILIBRE", url="https://example.org/decision-1"),
            ],
        ),
        Affair(
            id="aff-3",
            politician_id="pol-3",
            title="Prise illégale d'intérêts",
            category="PRISE_ILLEGALE_INTERETS",
            status="ENQUETE_PRELIMINAIRE",
            verdict_date=date(2021, 6, 20),
            sources=[AffairSource(source_type="PRESSE", url="https://example.org/article-2")],
        ),
    ]


def reset_demo_data(db) -> None:
    """Remove every row the demo writes."""

    db.execute(delete(AffairMergeAudit))
    db.execute(delete(DismissedDuplicate))
    db.execute(delete(AffairSource))
    db.execute(delete(Affair))
    db.execute(delete(IdentityDecision))
    db.execute(delete(ExternalId))
    db.execute(delete(Mandate))
    db.execute(delete(Politician))
    db.commit()


def parse_args() -> argparse.Namespace:
    """Parse script CLI arguments."""

    parser = argparse.ArgumentParser(description="Seed demo politicians and affairs.")
    parser.add_argument(
        "--no-reset",
        action="store_true",
        help="Do not delete existing records before seeding.",
    )
    return parser.parse_args()


def main() -> None:
    """Seed demo data and print a short summary."""

    args = parse_args()
    politicians = build_demo_politicians()
    affairs = build_demo_affairs()

    with SessionLocal() as db:
        if not args.no_reset:
            reset_demo_data(db)
        db.add_all(politicians)
        db.flush()
        db.add_all(affairs)
        db.commit()

    print("Seed complete")
    print(f"politicians_created={len(politicians)}")
    print(f"affairs_created={len(affairs)}")
    print()
    print("Try:")
    print("  python scripts/reconcile_affairs.py --auto-merge --dry-run")
    print("  POST /identity/resolve")


if __name__ == "__main__":
    main()
