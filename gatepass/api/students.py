"""Student endpoints - apply for a gate pass and follow its status"""
from fastapi import APIRouter, Depends, HTTPException, status

from gatepass.api.deps import Actor, get_directory, get_lifecycle, require_role
from gatepass.models.gate_pass import GatePass, GatePassStatus
from gatepass.models.user import Role
from gatepass.schemas.gate_pass import (
    GatePassApply,
    GatePassResponse,
    RedemptionReferenceResponse,
    StudentGatePassListResponse,
    StudentGatePassResponse,
)
from gatepass.schemas.user import MentorResponse
from gatepass.services.directory import Directory
from gatepass.services.lifecycle import LifecycleController
from gatepass.utils.credentials import RedemptionReference, build_scan_url, render_qr_data_url

router = APIRouter(prefix="/student", tags=["student"])


def _to_student_response(gate_pass: GatePass) -> StudentGatePassResponse:
    """Attach the redemption reference while the pass can still be redeemed"""
    response = StudentGatePassResponse.model_validate(gate_pass)
    if gate_pass.status == GatePassStatus.APPROVED and gate_pass.token_active and gate_pass.token:
        reference = RedemptionReference(pass_id=gate_pass.id, token=gate_pass.token)
        scan_url = build_scan_url(reference)
        response.redemption = RedemptionReferenceResponse(
            pass_id=reference.pass_id,
            token=reference.token,
            scan_url=scan_url,
            qr_data_url=render_qr_data_url(scan_url),
        )
    return response


@router.post("/apply", response_model=GatePassResponse, status_code=status.HTTP_201_CREATED)
def apply_gate_pass(
    request: GatePassApply,
    lifecycle: LifecycleController = Depends(get_lifecycle),
    actor: Actor = Depends(require_role(Role.STUDENT)),
):
    """
    Apply for a gate pass (student only).

    The pass is routed to the student's assigned approver and starts PENDING.
    """
    gate_pass = lifecycle.apply(student_id=actor.sub, reason=request.reason)
    return GatePassResponse.model_validate(gate_pass)


@router.get("/passes", response_model=StudentGatePassListResponse)
def list_my_passes(
    lifecycle: LifecycleController = Depends(get_lifecycle),
    actor: Actor = Depends(require_role(Role.STUDENT)),
):
    """List the caller's gate passes, newest first"""
    passes = lifecycle.list_for_student(actor.sub)
    items = [_to_student_response(p) for p in passes]
    return StudentGatePassListResponse(items=items, total=len(items))


@router.get("/mentor", response_model=MentorResponse)
def get_my_mentor(
    directory: Directory = Depends(get_directory),
    actor: Actor = Depends(require_role(Role.STUDENT)),
):
    """Get the caller's assigned approver"""
    mentor = directory.get_assigned_mentor(actor.sub)
    if mentor is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No mentor assigned")
    return MentorResponse.model_validate(mentor)
