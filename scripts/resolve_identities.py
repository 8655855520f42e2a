"""Resolve a batch of source records against canonical politicians.

The input file holds a JSON list of observations:

    [{"first_name": "Thierry", "last_name": "Cousin", "source": "RNE",
      "source_id": "45321", "birth_date": "1960-05-16", "department": "45"}]

Usage (from repository root):
    python scripts/resolve_identities.py observations.json
    python scripts/resolve_identities.py observations.json --limit 100 --no-link
"""

from __future__ import annotations

import argparse
import json
import sys
from collections import Counter
from pathlib import Path

# Make `poligraph` imports work without an editable install.
PROJECT_DIR = Path(__file__).resolve().parents[1]
if str(PROJECT_DIR) not in sys.path:
    sys.path.insert(0, str(PROJECT_DIR))

from pydantic import TypeAdapter

from poligraph.db.session import SessionLocal
from poligraph.log_config import configure_logging
from poligraph.schemas.identity import ObservationRequest
from poligraph.services.identity import resolve_observation

_OBSERVATIONS = TypeAdapter(list[ObservationRequest])


def parse_args() -> argparse.Namespace:
    """Parse script CLI arguments."""

    parser = argparse.ArgumentParser(description="Resolve source records to politicians.")
    parser.add_argument("path", type=Path, help="JSON file containing a list of observations.")
    parser.add_argument("--limit", type=int, default=None, help="Resolve at most N observations.")
    parser.add_argument(
        "--no-link",
        action="store_true",
        help="Do not create or re-point external ids for SAME decisions.",
    )
    return parser.parse_args()


def main() -> int:
    """Resolve observations one by one and print each decision."""

    args = parse_args()
    configure_logging()
    observations = _OBSERVATIONS.validate_python(json.loads(args.path.read_text(encoding="utf-8")))
    if args.limit is not None:
        observations = observations[: args.limit]

    decisions: Counter[str] = Counter()
    with SessionLocal() as db:
        for request in observations:
            observation = request.to_observation()
            result = resolve_observation(db, observation, link_external_id=not args.no_link)
            decisions[result.decision.value] += 1
            print(
                f"{observation.source}:{observation.source_id} "
                f"{observation.first_name} {observation.last_name} -> "
                f"{result.decision.value} politician_id={result.politician_id or '-'} "
                f"confidence={result.confidence:.2f} method={result.method.value}"
                f"{' blocked' if result.blocked else ''}"
            )

    print()
    print(f"resolved={sum(decisions.values())}")
    for decision, count in sorted(decisions.items()):
        print(f"  {decision}={count}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
