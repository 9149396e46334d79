"""Checkpoint endpoint - redeem a gate pass credential"""
from fastapi import APIRouter, Depends, Request

from gatepass.api.deps import Actor, get_redemption_gate, require_role
from gatepass.config import settings
from gatepass.middleware.rate_limit import limiter
from gatepass.models.user import Role
from gatepass.schemas.gate_pass import GatePassResponse, ScanResponse
from gatepass.services.redemption import RedemptionGate, RedemptionOutcome
from gatepass.utils.credentials import RedemptionReference

router = APIRouter(prefix="/security", tags=["security"])

_MESSAGES = {
    RedemptionOutcome.ADMITTED: "Scan accepted, access granted.",
    RedemptionOutcome.INVALID: "Invalid credential.",
    RedemptionOutcome.ALREADY_USED: "Credential already used.",
}


@router.get("/scan/{pass_id}/{token}", response_model=ScanResponse)
@limiter.limit(settings.RATE_LIMIT_SCAN)
def scan_gate_pass(
    request: Request,
    pass_id: str,
    token: str,
    gate: RedemptionGate = Depends(get_redemption_gate),
    actor: Actor = Depends(require_role(Role.CHECKPOINT)),
):
    """
    Redeem a scanned gate pass (checkpoint only).

    Always 200: denial is a normal outcome, reported in ``outcome`` as
    ``invalid`` or ``already_used``. A credential admits exactly once.
    """
    result = gate.redeem(RedemptionReference(pass_id=pass_id, token=token))

    if not result.admitted:
        return ScanResponse(admitted=False, outcome=result.outcome.value, message=_MESSAGES[result.outcome])

    gate_pass = result.gate_pass
    return ScanResponse(
        admitted=True,
        outcome=result.outcome.value,
        message=_MESSAGES[result.outcome],
        gate_pass=GatePassResponse.model_validate(gate_pass),
        student_name=gate_pass.student.name if gate_pass.student else None,
    )
