"""Affair deduplication routes."""

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from poligraph.db.dependencies import get_db
from poligraph.errors import AffairNotFoundError, InvalidMergeError
from poligraph.schemas.affairs import (
    AffairMergeAuditRead,
    DismissRequest,
    MergeRequest,
    MergeResultRead,
    PotentialDuplicateRead,
    ReconcileRequest,
    ReconciliationResultRead,
    ReconciliationStatsRead,
)
from poligraph.schemas.common import ApiResponse
from poligraph.services.affairs import (
    dismiss_duplicate,
    get_reconciliation_stats,
    list_affair_merge_audits,
    list_potential_duplicates,
    merge_affairs,
    reconcile_affairs,
)

router = APIRouter(prefix="/affairs")


@router.get("/duplicates", response_model=ApiResponse[list[PotentialDuplicateRead]])
def get_duplicates(db: Session = Depends(get_db)) -> ApiResponse[list[PotentialDuplicateRead]]:
    """List potential duplicate pairs, most confident first."""

    return ApiResponse(
        data=[PotentialDuplicateRead.model_validate(pair) for pair in list_potential_duplicates(db)]
    )


@router.post("/merge", response_model=ApiResponse[MergeResultRead])
def post_merge(
    payload: MergeRequest,
    db: Session = Depends(get_db),
) -> ApiResponse[MergeResultRead]:
    """Fold one affair into another; the removed affair is deleted."""

    try:
        outcome = merge_affairs(db, payload.keep_id, payload.remove_id, merged_by=payload.merged_by)
    except AffairNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except InvalidMergeError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ApiResponse(data=MergeResultRead.model_validate(outcome))


@router.post("/duplicates/dismiss", response_model=ApiResponse[DismissRequest])
def post_dismiss(
    payload: DismissRequest,
    db: Session = Depends(get_db),
) -> ApiResponse[DismissRequest]:
    """Mark a pair as distinct affairs."""

    dismiss_duplicate(db, payload.affair_id_a, payload.affair_id_b)
    return ApiResponse(data=payload)


@router.post("/reconcile", response_model=ApiResponse[ReconciliationResultRead])
def post_reconcile(
    payload: ReconcileRequest,
    db: Session = Depends(get_db),
) -> ApiResponse[ReconciliationResultRead]:
    """Run duplicate detection and optional auto-merge."""

    result = reconcile_affairs(db, auto_merge=payload.auto_merge, dry_run=payload.dry_run)
    return ApiResponse(data=ReconciliationResultRead.model_validate(result))


@router.get("/reconciliation-stats", response_model=ApiResponse[ReconciliationStatsRead])
def get_stats(db: Session = Depends(get_db)) -> ApiResponse[ReconciliationStatsRead]:
    """Summarize the deduplication backlog."""

    return ApiResponse(data=ReconciliationStatsRead.model_validate(get_reconciliation_stats(db)))


@router.get("/{affair_id}/merges", response_model=ApiResponse[list[AffairMergeAuditRead]])
def get_merge_audits(
    affair_id: str = Path(..., min_length=1),
    db: Session = Depends(get_db),
) -> ApiResponse[list[AffairMergeAuditRead]]:
    """List merges that folded other affairs into this one."""

    return ApiResponse(
        data=[AffairMergeAuditRead.model_validate(row) for row in list_affair_merge_audits(db, affair_id)]
    )
