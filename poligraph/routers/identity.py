"""Identity resolution and decision review routes."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from poligraph.db.dependencies import get_db
from poligraph.schemas.common import ApiResponse
from poligraph.schemas.identity import (
    IdentityDecisionRead,
    ManualDecisionRequest,
    ObservationRequest,
    ResolveResultRead,
)
from poligraph.services.identity import (
    list_active_decisions,
    list_decision_history,
    list_review_queue,
    record_manual_decision,
    resolve_observation,
)

router = APIRouter(prefix="/identity")


@router.post("/resolve", response_model=ApiResponse[ResolveResultRead])
def post_resolve(
    payload: ObservationRequest,
    db: Session = Depends(get_db),
) -> ApiResponse[ResolveResultRead]:
    """Resolve one source record against canonical politicians."""

    result = resolve_observation(db, payload.to_observation())
    return ApiResponse(data=ResolveResultRead.model_validate(result))


@router.get("/decisions", response_model=ApiResponse[list[IdentityDecisionRead]])
def get_active_decisions(
    source_type: str = Query(..., min_length=1),
    source_id: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
) -> ApiResponse[list[IdentityDecisionRead]]:
    """List active decisions for one source record."""

    return ApiResponse(
        data=[
            IdentityDecisionRead.model_validate(row)
            for row in list_active_decisions(db, source_type, source_id)
        ]
    )


@router.get("/decisions/history", response_model=ApiResponse[list[IdentityDecisionRead]])
def get_decision_history(
    source_type: str = Query(..., min_length=1),
    source_id: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
) -> ApiResponse[list[IdentityDecisionRead]]:
    """List the full revision chain for one source record."""

    return ApiResponse(
        data=[
            IdentityDecisionRead.model_validate(row)
            for row in list_decision_history(db, source_type, source_id)
        ]
    )


@router.get("/review-queue", response_model=ApiResponse[list[IdentityDecisionRead]])
def get_review_queue(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
) -> ApiResponse[list[IdentityDecisionRead]]:
    """List matches in the review zone awaiting a human verdict."""

    return ApiResponse(
        data=[
            IdentityDecisionRead.model_validate(row)
            for row in list_review_queue(db, limit=limit, offset=offset)
        ]
    )


@router.post("/decisions", response_model=ApiResponse[IdentityDecisionRead], status_code=201)
def post_manual_decision(
    payload: ManualDecisionRequest,
    db: Session = Depends(get_db),
) -> ApiResponse[IdentityDecisionRead]:
    """Record a human judgement, superseding active decisions for the pairing."""

    decision = record_manual_decision(
        db,
        source_type=payload.source_type.strip(),
        source_id=payload.source_id.strip(),
        politician_id=payload.politician_id,
        judgement=payload.judgement,
        decided_by=payload.decided_by.strip(),
        note=payload.note,
    )
    if decision is None:
        raise HTTPException(status_code=404, detail="Politician not found")
    return ApiResponse(data=IdentityDecisionRead.model_validate(decision))
