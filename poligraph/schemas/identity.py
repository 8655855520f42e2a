"""Identity resolution request and response schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from poligraph.identity.types import Decision, Judgement, MatchMethod, Observation


class ObservationRequest(BaseModel):
    """One source record submitted for resolution."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    source: str = Field(min_length=1)
    source_id: str = Field(min_length=1)
    birth_date: date | None = None
    department: str | None = None
    mandate_type: str | None = None
    context: dict[str, Any] | None = None

    def to_observation(self) -> Observation:
        return Observation(
            first_name=self.first_name.strip(),
            last_name=self.last_name.strip(),
            source=self.source.strip(),
            source_id=self.source_id.strip(),
            birth_date=self.birth_date,
            department=self.department.strip() if self.department else None,
            mandate_type=self.mandate_type,
            context=self.context,
        )


class CandidateMatchRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    politician_id: str
    first_name: str
    last_name: str
    birth_date: date | None
    score: float
    method: MatchMethod
    blocked: bool


class ResolveResultRead(BaseModel):
    """Serialized resolver outcome."""

    model_config = ConfigDict(from_attributes=True)

    politician_id: str | None
    confidence: float
    method: MatchMethod
    decision: Decision
    candidates: list[CandidateMatchRead]
    blocked: bool


class IdentityDecisionRead(BaseModel):
    """Serialized decision log row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    source_type: str
    source_id: str
    politician_id: str
    judgement: Judgement
    confidence: float
    method: MatchMethod
    evidence_json: dict[str, object]
    decided_by: str
    decided_at: datetime
    superseded_by_id: str | None


class ManualDecisionRequest(BaseModel):
    """Human verdict on one (source record, politician) pairing."""

    source_type: str = Field(min_length=1)
    source_id: str = Field(min_length=1)
    politician_id: str = Field(min_length=1)
    judgement: Judgement
    decided_by: str = Field(min_length=1)
    note: str | None = None
