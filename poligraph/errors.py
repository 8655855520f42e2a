"""Domain errors raised by the reconciliation core."""

from __future__ import annotations


class AffairNotFoundError(LookupError):
    """Raised when an affair referenced by a merge no longer exists."""

    def __init__(self, affair_id: str, role: str) -> None:
        super().__init__(f"Affair to {role} not found: {affair_id}")
        self.affair_id = affair_id
        self.role = role


class InvalidMergeError(ValueError):
    """Raised when a merge request cannot be applied as given."""
