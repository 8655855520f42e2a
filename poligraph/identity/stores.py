"""Storage contracts consumed by the identity resolver."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from poligraph.identity.types import ActiveDecision, DecisionRecord, PoliticianSnapshot


class PoliticianStore(Protocol):
    """Read access to canonical politicians and their external ids."""

    def find_many_by_name(self, first_name: str, last_name: str) -> Sequence[PoliticianSnapshot]:
        """Return politicians whose first and last names match case-insensitively."""
        ...

    def find_external_id(self, source: str, source_id: str) -> str | None:
        """Return the politician linked to ``(source, source_id)``, if any."""
        ...


class DecisionLogStore(Protocol):
    """Append-only identity decision log."""

    def find_active_decisions(self, source_type: str, source_id: str) -> Sequence[ActiveDecision]:
        """Return non-superseded decisions, most recent first."""
        ...

    def append(self, record: DecisionRecord) -> None:
        """Persist one decision."""
        ...
