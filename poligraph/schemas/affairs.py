"""Affair reconciliation request and response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from poligraph.affairs.types import MatchConfidence


class AffairSummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    sources: list[str]


class PotentialDuplicateRead(BaseModel):
    """Serialized duplicate pair."""

    model_config = ConfigDict(from_attributes=True)

    affair_a: AffairSummaryRead
    affair_b: AffairSummaryRead
    score: float
    confidence: MatchConfidence
    matched_by: str


class MergeRequest(BaseModel):
    """Keep one affair and fold the other into it."""

    keep_id: str = Field(min_length=1)
    remove_id: str = Field(min_length=1)
    merged_by: str = Field(default="admin", min_length=1)

    @model_validator(mode="after")
    def validate_distinct_ids(self) -> "MergeRequest":
        if self.keep_id == self.remove_id:
            raise ValueError("keep_id and remove_id must differ.")
        return self


class MergeResultRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    keep_id: str
    remove_id: str
    sources_moved: int
    identifiers_merged: list[str]


class DismissRequest(BaseModel):
    """Pair of affairs confirmed distinct."""

    affair_id_a: str = Field(min_length=1)
    affair_id_b: str = Field(min_length=1)

    @model_validator(mode="after")
    def validate_distinct_ids(self) -> "DismissRequest":
        if self.affair_id_a == self.affair_id_b:
            raise ValueError("A dismissed pair needs two distinct affairs.")
        return self


class ReconcileRequest(BaseModel):
    auto_merge: bool = False
    dry_run: bool = False


class ReconciliationResultRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    duplicates_found: int
    mergeable: int
    merged: int
    errors: int
    skipped: int
    remaining_possible: int
    dry_run: bool


class ReconciliationStatsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_unverified: int
    total_duplicates: int
    duplicates_by_certainty: dict[MatchConfidence, int]
    total_dismissed: int


class AffairMergeAuditRead(BaseModel):
    """Serialized affair merge audit record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    kept_affair_id: str
    removed_affair_id: str
    merged_by: str
    details_json: dict[str, object]
    timestamp: datetime
