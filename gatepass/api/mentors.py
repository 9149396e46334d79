"""Approver endpoints - review and decide gate pass requests"""
from fastapi import APIRouter, Depends

from gatepass.api.deps import Actor, get_lifecycle, require_role
from gatepass.models.user import Role
from gatepass.schemas.gate_pass import GatePassListResponse, GatePassResponse
from gatepass.services.lifecycle import Decision, LifecycleController

router = APIRouter(prefix="/mentor", tags=["mentor"])


@router.get("/requests", response_model=GatePassListResponse)
def list_pending_requests(
    lifecycle: LifecycleController = Depends(get_lifecycle),
    actor: Actor = Depends(require_role(Role.APPROVER)),
):
    """List PENDING gate passes assigned to the caller, newest first"""
    passes = lifecycle.list_pending_for_approver(actor.sub)
    items = [GatePassResponse.model_validate(p) for p in passes]
    return GatePassListResponse(items=items, total=len(items), pending_count=len(items))


@router.post("/requests/{pass_id}/approve", response_model=GatePassResponse)
def approve_request(
    pass_id: str,
    lifecycle: LifecycleController = Depends(get_lifecycle),
    actor: Actor = Depends(require_role(Role.APPROVER)),
):
    """
    Approve a pending gate pass (assigned approver only).

    Issues the single-use credential; the student sees it in their pass list.
    """
    gate_pass = lifecycle.decide(pass_id, approver_id=actor.sub, decision=Decision.APPROVE)
    return GatePassResponse.model_validate(gate_pass)


@router.post("/requests/{pass_id}/reject", response_model=GatePassResponse)
def reject_request(
    pass_id: str,
    lifecycle: LifecycleController = Depends(get_lifecycle),
    actor: Actor = Depends(require_role(Role.APPROVER)),
):
    """Reject a pending gate pass (assigned approver only)"""
    gate_pass = lifecycle.decide(pass_id, approver_id=actor.sub, decision=Decision.REJECT)
    return GatePassResponse.model_validate(gate_pass)
