"""Gate pass history endpoints for administrators (read-only)"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from gatepass.api.deps import Actor, get_store, require_role
from gatepass.models.gate_pass import GatePassStatus
from gatepass.models.user import Role
from gatepass.schemas.gate_pass import GatePassListResponse, GatePassResponse
from gatepass.services.store import GatePassStore

router = APIRouter(prefix="/passes", tags=["passes"])


@router.get("", response_model=GatePassListResponse)
def list_passes(
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status: PENDING, APPROVED, REJECTED, UTILIZED"),
    student_id: Optional[str] = Query(None, description="Filter by student ID"),
    mentor_id: Optional[str] = Query(None, description="Filter by approver ID"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    store: GatePassStore = Depends(get_store),
    _: Actor = Depends(require_role(Role.ADMIN)),
):
    """List gate pass history (admin only)"""
    pass_status = None
    if status_filter:
        try:
            pass_status = GatePassStatus(status_filter.upper())
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="status must be one of: PENDING, APPROVED, REJECTED, UTILIZED"
            )

    passes = store.list(pass_status, student_id, mentor_id, limit=limit, offset=offset)
    return GatePassListResponse(
        items=[GatePassResponse.model_validate(p) for p in passes],
        total=store.count(pass_status, student_id, mentor_id),
        pending_count=store.count(GatePassStatus.PENDING),
    )


@router.get("/{pass_id}", response_model=GatePassResponse)
def get_pass(
    pass_id: str,
    store: GatePassStore = Depends(get_store),
    _: Actor = Depends(require_role(Role.ADMIN)),
):
    """Get a single gate pass by ID (admin only)"""
    return GatePassResponse.model_validate(store.get_by_id(pass_id))
