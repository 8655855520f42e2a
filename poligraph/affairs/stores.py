"""Storage contract consumed by affair reconciliation."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from contextlib import AbstractContextManager
from typing import Any, Protocol

from poligraph.affairs.types import AffairSnapshot


class AffairStore(Protocol):
    """Affair persistence needed to detect and merge duplicates."""

    def atomic(self) -> AbstractContextManager[None]:
        """Scope in which every write commits together or not at all."""
        ...

    def find_unverified_grouped_by_politician(self) -> Mapping[str, Sequence[AffairSnapshot]]:
        """Return unverified affairs keyed by politician id."""
        ...

    def list_dismissed_pairs(self) -> set[tuple[str, str]]:
        """Return dismissed pairs as sorted id tuples."""
        ...

    def get_affair(self, affair_id: str) -> AffairSnapshot | None:
        ...

    def transfer_sources(self, from_affair_id: str, to_affair_id: str) -> int:
        """Re-parent sources whose URL the target lacks; return how many moved."""
        ...

    def absorb_identifiers(self, keep_id: str, remove_id: str) -> list[str]:
        """Copy judicial identifiers missing on the keeper; return field names."""
        ...

    def delete_affair(self, affair_id: str) -> None:
        ...

    def forget_dismissals(self, affair_id: str) -> None:
        """Drop dismissed pairs referencing the affair."""
        ...

    def record_merge(self, keep_id: str, remove_id: str, details: dict[str, Any]) -> None:
        ...

    def add_dismissed_pair(self, affair_id_a: str, affair_id_b: str) -> None:
        """Store a sorted pair; a pair already stored is left as is."""
        ...

    def count_unverified(self) -> int:
        ...

    def count_dismissed(self) -> int:
        ...
